"""Authentication state: tokens, login, second factor and session refresh."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from trportfolio.api.client import ApiError, LoginRequest, LoginResponse, RestClient
from trportfolio.api.token import Token, TokenName, token_from_file
from trportfolio.constants import SESSION_REFRESH_INTERVAL

logger = logging.getLogger(__name__)


def _load_token(name: TokenName, directory: Path) -> Token:
    try:
        return token_from_file(name, directory)
    except FileNotFoundError:
        return Token(name, "")
    except OSError as error:
        raise OSError(f"could not read {name.value} token file: {error}") from error


class AuthClient:
    """Holds the tokens and keeps the session alive in the background."""

    def __init__(
        self,
        api_client: RestClient,
        token_dir: str | Path = ".",
        refresh_interval: float = SESSION_REFRESH_INTERVAL,
    ) -> None:
        self._api = api_client
        self._token_dir = Path(token_dir)
        self._lock = threading.Lock()
        self._session_token = _load_token(TokenName.SESSION, self._token_dir)
        self._refresh_token = _load_token(TokenName.REFRESH, self._token_dir)

        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._refresh_loop,
            args=(refresh_interval,),
            name="session-refresh",
            daemon=True,
        )
        self._thread.start()
        self.refresh_session()

    def __enter__(self) -> AuthClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def login(self, phone_number: str, pin: str) -> LoginResponse:
        """Log in; keep the session token if the server sent one."""
        with self._lock:
            refresh_token = self._refresh_token
        response, session_token = self._api.login(LoginRequest(phone_number, pin), refresh_token)
        if session_token.value:
            with self._lock:
                self._session_token = session_token
        return response

    def provide_otp(self, process_id: str, otp: str) -> None:
        """Complete the login with the second factor and save the new tokens."""
        if not process_id:
            raise ValueError("processID cannot be empty")

        session_token, refresh_token = self._api.post_otp(process_id, otp)
        with self._lock:
            self._session_token = session_token
            self._refresh_token = refresh_token

        session_token.write_to_file(self._token_dir)
        refresh_token.write_to_file(self._token_dir)

    def refresh_session(self) -> None:
        """Ask for a fresh session token; on failure the session token is cleared."""
        logger.debug("refreshing session token")
        with self._lock:
            refresh_token = self._refresh_token
        try:
            session_token = self._api.session(refresh_token)
        except ApiError as error:
            logger.warning("could not refresh session: %s", error)
            session_token = Token(TokenName.SESSION, "")
        with self._lock:
            self._session_token = session_token

    def session_token(self) -> Token:
        with self._lock:
            return self._session_token

    def close(self) -> None:
        """Stop refreshing the session in the background."""
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join()

    def _refresh_loop(self, interval: float) -> None:
        while not self._stop.wait(interval):
            try:
                self.refresh_session()
            except Exception:  # keep the refresher alive whatever happens
                logger.exception("session refresh failed")