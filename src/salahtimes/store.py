"""Keyed record store — a JSON document on disk holding string-keyed records."""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """Persists a ``{key: record}`` mapping as one JSON file.

    Writes are best-effort: an ``OSError`` is logged and remembered, and the
    latest records are written again on the next ``save`` or ``flush``.
    Reads of a missing or corrupt file return an empty mapping.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._pending: dict[str, Any] | None = None

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None

    def load(self) -> dict[str, Any]:
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable record store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring record store %s: top level is not an object", self.path)
            return {}
        return data

    def save(self, records: dict[str, Any]) -> bool:
        """Write ``records``; returns False (and keeps them pending) on failure."""
        with self._lock:
            self._pending = dict(records)
            return self._write(self._pending)

    def flush(self) -> bool:
        """Retry a previously failed write. True when nothing is left pending."""
        with self._lock:
            if self._pending is None:
                return True
            return self._write(self._pending)

    def _write(self, records: dict[str, Any]) -> bool:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning("Write to %s failed, will retry on next write: %s", self.path, e)
            return False
        self._pending = None
        return True
