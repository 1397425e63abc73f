"""Interactive login on the console."""

from __future__ import annotations

import getpass
from typing import Protocol

from trportfolio.api.client import LoginResponse
from trportfolio.api.token import Token

_PHONE_PROMPT = "Enter phone number in international format (+49xxxxxxxxxxxxx): "


class _AuthClient(Protocol):
    def login(self, phone_number: str, pin: str) -> LoginResponse: ...

    def provide_otp(self, process_id: str, otp: str) -> None: ...

    def session_token(self) -> Token: ...


def read_password(name: str) -> str:
    """Prompt for *name* and read it from the terminal without echoing it."""
    print(f"Enter {name}: ")
    try:
        return getpass.getpass(prompt="")
    except (EOFError, OSError) as error:
        raise OSError(f"could not read {name} from stdin: {error}") from error


class AuthService:
    """Logs in with credentials asked for on the console."""

    def __init__(self, client: _AuthClient, phone_number: str = "", pin: str = "") -> None:
        self._client = client
        self._phone_number = phone_number
        self._pin = pin

    def acquire_credentials(self) -> None:
        """Ask for the phone number and the PIN."""
        print(_PHONE_PROMPT)
        try:
            line = input()
        except EOFError as error:
            raise OSError(f"could not acquire phone number: {error}") from error

        words = line.split()
        if not words:
            raise ValueError("could not acquire phone number: unexpected newline")
        if len(words) > 1:
            raise ValueError("could not acquire phone number: expected newline")
        self._phone_number = words[0]

        try:
            self._pin = read_password("pin")
        except OSError as error:
            raise OSError(f"could not acquire pin: {error}") from error

    def login(self) -> None:
        """Log in, asking for credentials and a second factor when needed."""
        if not self._phone_number or not self._pin:
            self.acquire_credentials()

        response = self._client.login(self._phone_number, self._pin)
        if not response.process_id:
            return

        try:
            otp = read_password("2FA token")
        except OSError as error:
            raise OSError(f"could not read otp: {error}") from error

        self._client.provide_otp(response.process_id, otp)

    def session_token(self) -> Token:
        return self._client.session_token()