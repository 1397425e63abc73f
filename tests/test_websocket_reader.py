import json

import pytest

from trportfolio.api.token import Token, TokenName
from trportfolio.api.websocket_reader import ErrorStateReceived, WebsocketReader
from trportfolio.constants import HTTP_USER_AGENT, WEBSOCKET_BASE_HOST

CONNECT_MESSAGE = 'connect 31 {"locale": "de"}'


class FakeConnection:
    def __init__(self, incoming):
        self.incoming = list(incoming)
        self.sent = []
        self.closed = False

    def send(self, payload):
        self.sent.append(payload)

    def recv(self):
        if not self.incoming:
            raise OSError("connection closed")
        return self.incoming.pop(0)

    def close(self):
        self.closed = True


class FakeDialer:
    def __init__(self, *connections):
        self.connections = list(connections)
        self.calls = []

    def __call__(self, url, headers):
        self.calls.append((url, headers))
        return self.connections.pop(0)


class FakeAuthService:
    def __init__(self):
        self.logins = 0

    def login(self):
        self.logins += 1

    def session_token(self):
        return Token(TokenName.SESSION, "token")


class FakeWriter:
    def __init__(self):
        self.writes = []

    def write(self, directory, data):
        self.writes.append((directory, data))


def _split_subscription(text):
    prefix, sub_id, body = text.split(" ", 2)
    return prefix, int(sub_id), json.loads(body)


def test_connect_sends_handshake_with_headers():
    conn = FakeConnection(["connected"])
    dialer = FakeDialer(conn)

    WebsocketReader(FakeAuthService(), connect=dialer)

    assert conn.sent == [CONNECT_MESSAGE]
    url, headers = dialer.calls[0]
    assert url == f"wss://{WEBSOCKET_BASE_HOST}/"
    assert headers["User-Agent"] == HTTP_USER_AGENT


def test_read_returns_payload_and_writes_it():
    conn = FakeConnection(["connected", "1 C {}", '1 A {"id":"item"}'])
    writer = FakeWriter()
    reader = WebsocketReader(FakeAuthService(), writer=writer, connect=FakeDialer(conn))

    result = reader.read("timelineDetailV2", {"id": "item"})

    assert result == b'{"id":"item"}'
    prefix, _, body = _split_subscription(conn.sent[1])
    assert prefix == "sub"
    assert body == {"id": "item", "type": "timelineDetailV2", "token": "token"}
    assert writer.writes == [("timelineDetailV2", b'{"id":"item"}')]


def test_read_does_not_change_the_request():
    conn = FakeConnection(["connected", "1 A {}"])
    reader = WebsocketReader(FakeAuthService(), connect=FakeDialer(conn))
    request = {"after": "cursor"}

    reader.read("timelineTransactions", request)

    assert request == {"after": "cursor"}


def test_subscription_ids_increase():
    conn = FakeConnection(["connected", "1 A {}", "2 A {}"])
    reader = WebsocketReader(FakeAuthService(), connect=FakeDialer(conn))

    reader.read("timelineTransactions", None)
    reader.read("timelineTransactions", None)

    _, first, first_body = _split_subscription(conn.sent[1])
    _, second, _ = _split_subscription(conn.sent[2])
    assert second == first + 1
    assert first_body == {"type": "timelineTransactions", "token": "token"}


def test_error_state_raises():
    conn = FakeConnection(["connected", '1 E {"errors":[{"errorCode":"OTHER"}]}'])
    writer = FakeWriter()
    reader = WebsocketReader(FakeAuthService(), writer=writer, connect=FakeDialer(conn))

    with pytest.raises(ErrorStateReceived):
        reader.read("timelineDetailV2", {"id": "item"})
    assert writer.writes == []


def test_auth_error_logs_in_and_retries():
    first = FakeConnection(
        ["connected", '1 E {"errors":[{"errorCode":"AUTHENTICATION_ERROR"}]}']
    )
    second = FakeConnection(["connected", '2 A {"id":"item"}'])
    auth = FakeAuthService()
    dialer = FakeDialer(first, second)
    reader = WebsocketReader(auth, connect=dialer)

    result = reader.read("timelineDetailV2", {"id": "item"})

    assert result == b'{"id":"item"}'
    assert auth.logins == 1
    assert first.closed is True
    assert second.sent[0] == CONNECT_MESSAGE
    _, retry_id, body = _split_subscription(second.sent[1])
    _, first_id, _ = _split_subscription(first.sent[1])
    assert retry_id == first_id + 1
    assert body["id"] == "item"


def test_malformed_message_raises():
    conn = FakeConnection(["connected", "garbage"])
    reader = WebsocketReader(FakeAuthService(), connect=FakeDialer(conn))

    with pytest.raises(ValueError):
        reader.read("timelineDetailV2", {"id": "item"})


def test_lost_connection_raises():
    conn = FakeConnection(["connected"])
    reader = WebsocketReader(FakeAuthService(), connect=FakeDialer(conn))

    with pytest.raises(ConnectionError):
        reader.read("timelineDetailV2", {"id": "item"})


def test_connect_failure_raises():
    def dial(url, headers):
        raise OSError("refused")

    with pytest.raises(ConnectionError):
        WebsocketReader(FakeAuthService(), connect=dial)


def test_close_twice_raises():
    conn = FakeConnection(["connected"])
    reader = WebsocketReader(FakeAuthService(), connect=FakeDialer(conn))

    reader.close()

    assert conn.closed is True
    with pytest.raises(RuntimeError):
        reader.close()


def test_context_manager_closes():
    conn = FakeConnection(["connected"])

    with WebsocketReader(FakeAuthService(), connect=FakeDialer(conn)):
        assert conn.closed is False

    assert conn.closed is True