"""Writers that persist raw API responses."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_DIR_MODE = 0o700
_FILE_MODE = 0o600


class ResponseWriter(Protocol):
    """Something that stores a raw response under a directory name."""

    def write(self, directory: str, data: bytes) -> None:
        """Store *data* under *directory*."""


class NilWriter:
    """A writer that discards everything, counting what it was given."""

    def __init__(self) -> None:
        self.discarded = 0

    def write(self, directory: str, data: bytes) -> None:
        """Discard *data*, keeping count of discarded responses."""
        self.discarded += 1


class JSONWriter:
    """Stores responses as pretty-printed JSON files below *base_dir*."""

    def __init__(self, base_dir: str | Path = "responses") -> None:
        self._base_dir = Path(base_dir)
        self._cursors: dict[str, int] = {}

    def write(self, directory: str, data: bytes) -> None:
        """Store the JSON object in *data* as a file in *directory*."""
        if not directory:
            raise ValueError("writer: dir cannot be empty")

        try:
            data_map = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as error:
            raise ValueError(f"could not unmarshal data bytes to write to file: {error}") from error
        if not isinstance(data_map, dict):
            raise ValueError("could not unmarshal data bytes to write to file: not a JSON object")

        filename = self.generate_filename(directory, data_map)
        self._write(directory, filename, data_map)

    def generate_filename(self, directory: str, data_map: dict[str, Any]) -> str:
        """Name the file after the ``id`` field, or the next page number."""
        if "id" in data_map:
            identifier = data_map["id"]
            if not isinstance(identifier, str):
                raise TypeError("could not convert id into string")
            return identifier

        cursor = self._cursors.get(directory, 1)
        self._cursors[directory] = cursor + 1
        return f"page-{cursor}"

    def _write(self, directory: str, filename: str, data_map: dict[str, Any]) -> None:
        contents = json.dumps(data_map, indent=2, sort_keys=True, ensure_ascii=False)
        destination = self._base_dir / directory
        destination.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        path = destination / f"{filename}.json"

        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(contents)

        logger.debug("wrote file %s: %s", path, contents)