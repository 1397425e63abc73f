"""Thread-safe counting of processed and skipped operations."""

from __future__ import annotations

import threading


class OperationCounter:
    """Counts processed and skipped operations."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._processed = 0
        self._skipped = 0

    def add_processed(self) -> None:
        """Record one processed operation."""
        with self._lock:
            self._processed += 1

    def add_skipped(self) -> None:
        """Record one skipped operation."""
        with self._lock:
            self._skipped += 1

    @property
    def processed(self) -> int:
        with self._lock:
            return self._processed

    @property
    def skipped(self) -> int:
        with self._lock:
            return self._skipped

    def summary(self) -> tuple[int, int, int]:
        """Return ``(total, processed, skipped)`` as one consistent snapshot."""
        with self._lock:
            return self._processed + self._skipped, self._processed, self._skipped