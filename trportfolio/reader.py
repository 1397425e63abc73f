"""Reading of API responses, either live or from JSON files on disk."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ResponseReader(Protocol):
    """Something that answers a request for a data type with raw JSON bytes."""

    def read(self, data_type: str, request: Mapping[str, Any] | None) -> bytes:
        """Return the raw JSON answer to *request* for *data_type*."""


class JSONReader:
    """Reads stored responses from ``<base_dir>/<data_type>/``."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._cursors: dict[str, int] = {}

    def read(self, data_type: str, request: Mapping[str, Any] | None = None) -> bytes:
        """Read the file for the request's ``id``, or the next page of *data_type*."""
        if request is not None and "id" in request:
            path = self._base_dir / data_type / f"{request['id']}.json"
        else:
            cursor = self._cursors.get(data_type, 1)
            self._cursors[data_type] = cursor + 1
            path = self._base_dir / data_type / f"page-{cursor}.json"

        contents = path.read_bytes()
        logger.debug("read file contents from %s", path)
        return contents