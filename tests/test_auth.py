import threading

import pytest

from trportfolio.api.auth import AuthClient
from trportfolio.api.client import ApiError, LoginRequest, LoginResponse
from trportfolio.api.token import Token, TokenName


class FakeApi:
    def __init__(self, session_value="token", fail_session=False, login_session_value=""):
        self.session_value = session_value
        self.fail_session = fail_session
        self.login_session_value = login_session_value
        self.session_calls = []
        self.login_calls = []
        self.otp_calls = []
        self.two_refreshes = threading.Event()

    def session(self, refresh_token):
        self.session_calls.append(refresh_token)
        if len(self.session_calls) >= 2:
            self.two_refreshes.set()
        if self.fail_session:
            raise ApiError("down")
        return Token(TokenName.SESSION, self.session_value)

    def login(self, request, refresh_token):
        self.login_calls.append((request, refresh_token))
        return LoginResponse("process"), Token(TokenName.SESSION, self.login_session_value)

    def post_otp(self, process_id, otp):
        self.otp_calls.append((process_id, otp))
        return Token(TokenName.SESSION, "token"), Token(TokenName.REFRESH, "secret")


def test_reads_refresh_token_file_and_refreshes_on_start(tmp_path):
    (tmp_path / ".refresh").write_text("secret", encoding="utf-8")
    api = FakeApi()
    with AuthClient(api, tmp_path, refresh_interval=3600) as client:
        assert api.session_calls[0] == Token(TokenName.REFRESH, "secret")
        assert client.session_token() == Token(TokenName.SESSION, "token")


def test_missing_token_files_give_empty_tokens(tmp_path):
    api = FakeApi()
    with AuthClient(api, tmp_path, refresh_interval=3600):
        assert api.session_calls == [Token(TokenName.REFRESH, "")]


def test_unreadable_token_file_raises(tmp_path):
    (tmp_path / ".session").mkdir()
    with pytest.raises(OSError):
        AuthClient(FakeApi(), tmp_path, refresh_interval=3600)


def test_failed_refresh_clears_session_token(tmp_path):
    (tmp_path / ".session").write_text("token", encoding="utf-8")
    with AuthClient(FakeApi(fail_session=True), tmp_path, refresh_interval=3600) as client:
        assert client.session_token() == Token(TokenName.SESSION, "")


def test_login_keeps_session_token_when_none_returned(tmp_path):
    api = FakeApi()
    with AuthClient(api, tmp_path, refresh_interval=3600) as client:
        response = client.login("phone", "placeholder")
        assert response == LoginResponse("process")
        assert client.session_token() == Token(TokenName.SESSION, "token")
        request, refresh_token = api.login_calls[0]
        assert request == LoginRequest("phone", "placeholder")
        assert refresh_token == Token(TokenName.REFRESH, "")


def test_login_stores_returned_session_token(tmp_path):
    api = FakeApi(login_session_value="placeholder")
    with AuthClient(api, tmp_path, refresh_interval=3600) as client:
        client.login("phone", "placeholder")
        assert client.session_token() == Token(TokenName.SESSION, "placeholder")


def test_provide_otp_requires_process_id(tmp_path):
    api = FakeApi()
    with AuthClient(api, tmp_path, refresh_interval=3600) as client:
        with pytest.raises(ValueError, match="processID cannot be empty"):
            client.provide_otp("", "1234")
        assert api.otp_calls == []


def test_provide_otp_saves_tokens(tmp_path):
    api = FakeApi(session_value="")
    with AuthClient(api, tmp_path, refresh_interval=3600) as client:
        client.provide_otp("process", "1234")
        assert api.otp_calls == [("process", "1234")]
        assert client.session_token() == Token(TokenName.SESSION, "token")
    assert (tmp_path / ".session").read_text(encoding="utf-8") == "token"
    assert (tmp_path / ".refresh").read_text(encoding="utf-8") == "secret"


def test_session_is_refreshed_periodically(tmp_path):
    api = FakeApi()
    client = AuthClient(api, tmp_path, refresh_interval=0.01)
    try:
        assert api.two_refreshes.wait(5)
    finally:
        client.close()
    assert len(api.session_calls) >= 2