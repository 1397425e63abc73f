"""Messages received over the websocket."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

_MIN_PARTS = 2
_STATE_CONTINUE = "C"
_STATE_ERROR = "E"
_ERROR_CODE_AUTH = "AUTHENTICATION_ERROR"
_ID_PATTERN = re.compile(rb"[+-]?\d+")


@dataclass(frozen=True)
class Message:
    """A websocket message: subscription id, state and payload."""

    id: int
    state: str
    data: bytes

    def has_error_state(self) -> bool:
        return self.state == _STATE_ERROR

    def has_continue_state(self) -> bool:
        return self.state == _STATE_CONTINUE

    def has_auth_error(self) -> bool:
        """Tell whether the payload reports an authentication error."""
        try:
            payload = json.loads(self.data)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return False
        if not isinstance(payload, dict):
            return False
        errors = payload.get("errors")
        if not isinstance(errors, list):
            return False
        return any(
            isinstance(error, dict) and error.get("errorCode") == _ERROR_CODE_AUTH
            for error in errors
        )


def parse_message(data: bytes | str) -> Message:
    """Split ``"<id> <state> <payload>"`` into a :class:`Message`."""
    if isinstance(data, str):
        data = data.encode("utf-8")

    parts = data.split(b" ")
    if len(parts) < _MIN_PARTS:
        raise ValueError("could not parse the contents")

    if _ID_PATTERN.fullmatch(parts[0]) is None:
        raise ValueError(f"could not convert id string to int: {parts[0]!r}")

    return Message(
        id=int(parts[0]),
        state=parts[1].decode("utf-8", errors="replace"),
        data=b" ".join(parts[2:]),
    )