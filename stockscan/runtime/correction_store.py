"""JSON file storage for learned corrections.

File layout:
    {
      "version": 1,
      "corrections": {
        "<normalized name>": {"product_id": ..., "occurrences": ..., ...}
      }
    }
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from stockscan.domain.errors import CorrectionStoreError
from stockscan.runtime.logging import get_logger
from stockscan.runtime.paths import get_paths

logger = get_logger(__name__)

STORE_VERSION = 1


class JsonFileCorrectionStore:
    """Key-value correction store persisted to a single JSON file.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a crash never leaves a half-written file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else get_paths().corrections_file
        self._lock = threading.Lock()

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorrectionStoreError(f"Cannot read corrections from {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("corrections", {}), dict):
            raise CorrectionStoreError(f"Unexpected corrections file layout in {self.path}")
        return data.get("corrections", {})

    def _save(self, corrections: dict[str, dict[str, Any]]) -> None:
        payload = {"version": STORE_VERSION, "corrections": corrections}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CorrectionStoreError(f"Cannot write corrections to {self.path}: {e}") from e

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            value = self._load().get(key)
        return dict(value) if isinstance(value, dict) else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            corrections = self._load()
            corrections[key] = dict(value)
            self._save(corrections)
        logger.debug("Saved correction %r to %s", key, self.path)

    def all(self) -> dict[str, dict[str, Any]]:
        """Return every stored entry keyed by normalized name."""
        with self._lock:
            return self._load()
