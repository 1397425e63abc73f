"""Session and refresh tokens."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from trportfolio.constants import COOKIE_NAME_PREFIX

_FILE_MODE = 0o600


class TokenName(str, Enum):
    SESSION = "session"
    REFRESH = "refresh"


@dataclass(frozen=True)
class Token:
    """A named authentication token."""

    name: TokenName
    value: str = ""

    def write_to_file(self, directory: str | Path = ".") -> None:
        """Save the value to ``<directory>/.<name>``."""
        path = Path(directory) / f".{TokenName(self.name).value}"
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(self.value)
        except OSError as error:
            raise OSError(f"could not write token file '{path}': {error}") from error


def token_from_set_cookie(name: TokenName | str, cookies: Iterable[str]) -> Token:
    """Extract token *name* from the values of ``Set-Cookie`` headers."""
    name = TokenName(name)
    cookies = list(cookies)
    if not cookies:
        raise ValueError("could not find 'Set-Cookie' in header")

    start = len(COOKIE_NAME_PREFIX + name.value) + 1
    value: str | None = None
    for cookie in cookies:
        if name.value not in cookie:
            continue
        end = cookie.find(";")
        value = cookie[start:] if end < 0 else cookie[start:end]

    if value is None:
        raise ValueError(f"could not find '{name.value}' token cookie in header")
    return Token(name, value)


def token_from_file(name: TokenName | str, directory: str | Path = ".") -> Token:
    """Load token *name* from ``<directory>/.<name>``."""
    name = TokenName(name)
    path = Path(directory) / f".{name.value}"
    return Token(name, path.read_text(encoding="utf-8"))