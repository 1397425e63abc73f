"""HTTP headers sent to the API."""

from __future__ import annotations

from trportfolio.constants import COOKIE_NAME_PREFIX, HTTP_USER_AGENT


class Headers:
    """A set of HTTP headers, starting with the package's user agent."""

    def __init__(self) -> None:
        self._values: dict[str, list[str]] = {"User-Agent": [HTTP_USER_AGENT]}

    def with_value(self, key: str, value: str) -> Headers:
        """Add *value* to header *key*, keeping earlier values."""
        self._values.setdefault(key, []).append(value)
        return self

    def with_content_type_json(self) -> Headers:
        """Declare a JSON body."""
        self._values["Content-Type"] = ["application/json"]
        return self

    def with_refresh_token(self, token: str) -> Headers:
        """Send *token* as the refresh cookie."""
        self._values["Cookie"] = [f"{COOKIE_NAME_PREFIX}refresh={token}"]
        return self

    def as_dict(self) -> dict[str, str]:
        """Return the headers as a plain mapping, joining repeated values."""
        return {key: ", ".join(values) for key, values in self._values.items()}