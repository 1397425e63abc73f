"""REST client for the authentication endpoints."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http.cookiejar import DefaultCookiePolicy
from typing import Any

import requests

from trportfolio.api.headers import Headers
from trportfolio.api.token import Token, TokenName, token_from_set_cookie
from trportfolio.constants import REST_API_BASE_URI

logger = logging.getLogger(__name__)

_LOGIN_PATH = "auth/web/login"
_SESSION_PATH = "auth/web/session"


class ApiError(Exception):
    """A request to the REST API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class LoginRequest:
    """Credentials sent to the login endpoint."""

    phone_number: str
    pin: str

    def to_json(self) -> dict[str, str]:
        return {"phoneNumber": self.phone_number, "pin": self.pin}


@dataclass(frozen=True)
class LoginResponse:
    """Answer of the login endpoint; a process id means a second factor is needed."""

    process_id: str = ""


def _set_cookie_values(response: requests.Response) -> list[str]:
    raw_headers = getattr(response.raw, "headers", None)
    getlist = getattr(raw_headers, "getlist", None)
    if callable(getlist):
        return [str(value) for value in getlist("Set-Cookie")]
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


class RestClient:
    """Talks to the login, second-factor and session endpoints."""

    def __init__(
        self,
        http: requests.Session | None = None,
        base_uri: str = REST_API_BASE_URI,
        timeout: float = 30.0,
    ) -> None:
        if http is None:
            http = requests.Session()
            # Cookies are handled explicitly; never let the jar resend them.
            http.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self._http = http
        self._base_uri = base_uri.rstrip("/")
        self._timeout = timeout

    def login(
        self, request: LoginRequest, refresh_token: Token | None = None
    ) -> tuple[LoginResponse, Token]:
        """Log in; return the response and the session token, if one was set."""
        headers = Headers().with_content_type_json()
        if refresh_token is not None and refresh_token.value:
            headers.with_refresh_token(refresh_token.value)

        response = self._request(
            "POST",
            f"{self._base_uri}/{_LOGIN_PATH}",
            headers.as_dict(),
            json.dumps(request.to_json()).encode("utf-8"),
        )
        session_token = self._optional_token(response, TokenName.SESSION)

        logger.debug("received success response: %s", response.text)
        try:
            payload: Any = json.loads(response.content) if response.content else None
        except ValueError as error:
            raise ApiError(f"could not unmarshal login response: {error}") from error
        if payload is None:
            return LoginResponse(), session_token
        if not isinstance(payload, dict):
            raise ApiError("could not unmarshal login response: not a JSON object")

        process_id = payload.get("processId") or ""
        if not isinstance(process_id, str):
            raise ApiError("could not unmarshal login response: processId is not a string")
        return LoginResponse(process_id), session_token

    def post_otp(self, process_id: str, otp: str) -> tuple[Token, Token]:
        """Send the second factor; return the session and refresh tokens."""
        response = self._request(
            "POST",
            f"{self._base_uri}/{_LOGIN_PATH}/{process_id}/{otp}",
            Headers().with_content_type_json().as_dict(),
        )
        cookies = _set_cookie_values(response)
        logger.debug("response headers: %r", dict(response.headers))

        try:
            session_token = token_from_set_cookie(TokenName.SESSION, cookies)
        except ValueError as error:
            raise ApiError(f"could not parse session token from header: {error}") from error
        try:
            refresh_token = token_from_set_cookie(TokenName.REFRESH, cookies)
        except ValueError as error:
            raise ApiError(f"could not parse refresh token from header: {error}") from error

        logger.debug("received session and refresh tokens")
        return session_token, refresh_token

    def session(self, refresh_token: Token) -> Token:
        """Exchange the refresh token for a fresh session token."""
        headers = Headers().with_content_type_json().with_refresh_token(refresh_token.value)
        try:
            response = self._request(
                "GET", f"{self._base_uri}/{_SESSION_PATH}", headers.as_dict()
            )
        except ApiError as error:
            raise ApiError(
                f"could not request session endpoint: {error}", error.status_code
            ) from error
        return self._optional_token(response, TokenName.SESSION)

    @staticmethod
    def _optional_token(response: requests.Response, name: TokenName) -> Token:
        try:
            return token_from_set_cookie(name, _set_cookie_values(response))
        except ValueError:
            return Token(name, "")

    def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
    ) -> requests.Response:
        logger.debug("executing request %s %s", method, url)
        try:
            response = self._http.request(
                method, url, headers=headers, data=body, timeout=self._timeout
            )
        except requests.RequestException as error:
            raise ApiError(f"could not make request: {error}") from error

        if response.status_code < 400:
            return response
        raise ApiError(
            f"request failed with status code '{response.status_code}': {response.text}",
            response.status_code,
        )