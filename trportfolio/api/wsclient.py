"""Generic client for list and details requests over a response reader."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from trportfolio.reader import ResponseReader


class WSClient:
    """Fetches one data type through a response reader."""

    def __init__(self, data_type: str, reader: ResponseReader) -> None:
        self._data_type = data_type
        self._reader = reader

    @property
    def data_type(self) -> str:
        return self._data_type

    def list(self) -> list[Any]:
        """Return the items of every page, following the ``after`` cursors."""
        items: list[Any] = []
        page = self._request(None)
        items.extend(self._items(page))
        after = self._cursor_after(page)

        while after:
            page = self._request({"after": after})
            items.extend(self._items(page))
            after = self._cursor_after(page)

        return items

    def details(self, item_id: str) -> Any:
        """Return the decoded details of the item *item_id*."""
        return self._request({"id": item_id})

    def _request(self, request: Mapping[str, Any] | None) -> Any:
        data = self._reader.read(self._data_type, request)
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as error:
            raise ValueError(
                f"could not unmarshal {self._data_type} response: {error}"
            ) from error

    def _page(self, page: Any) -> dict[str, Any]:
        if page is None:
            return {}
        if not isinstance(page, dict):
            raise ValueError(f"could not unmarshal {self._data_type} response: not an object")
        return page

    def _items(self, page: Any) -> list[Any]:
        items = self._page(page).get("items")
        if items is None:
            return []
        if not isinstance(items, list):
            raise ValueError(f"could not unmarshal {self._data_type} response: items is not a list")
        return items

    def _cursor_after(self, page: Any) -> str:
        cursors = self._page(page).get("cursors") or {}
        if not isinstance(cursors, dict):
            raise ValueError(f"could not unmarshal {self._data_type} response: bad cursors")
        after = cursors.get("after") or ""
        if not isinstance(after, str):
            raise ValueError(f"could not unmarshal {self._data_type} response: bad cursor")
        return after