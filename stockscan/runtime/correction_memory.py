"""Correction memory: learn raw scanned names -> product mappings from user corrections.

Corrections are keyed by the normalized raw name (case-folded, accents
stripped, whitespace collapsed). Confirming the same mapping again bumps its
occurrence count; confirming a different product for the same name replaces
the mapping and restarts the count (most recent correction wins).

Storage is injected as a small key-value interface so the memory works the
same over an in-memory dict (tests) or the JSON file kept on the device.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from stockscan.domain.correction import Correction
from stockscan.domain.errors import CorrectionStoreError
from stockscan.ocr.text_utils import normalize_name
from stockscan.runtime.logging import get_logger

logger = get_logger(__name__)

# Number of locks shared by all normalized names
LOCK_STRIPES = 64


class CorrectionStore(Protocol):
    """Minimal key-value contract required by CorrectionMemory."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def put(self, key: str, value: dict[str, Any]) -> None: ...


class InMemoryCorrectionStore:
    """Dict-backed store, for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            value = self._data.get(key)
            return dict(value) if value is not None else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = dict(value)

    def __len__(self) -> int:
        return len(self._data)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CorrectionMemory:
    """Lookup and record user corrections over a CorrectionStore.

    Store failures never propagate: a failed lookup behaves like a miss and a
    failed record is logged, so the user's confirmation flow is never blocked.
    """

    def __init__(self, store: CorrectionStore | None = None, clock: Callable[[], datetime] | None = None) -> None:
        self.store: CorrectionStore = store if store is not None else InMemoryCorrectionStore()
        self._clock = clock or _utcnow
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))

    def _key_lock(self, key: str) -> threading.Lock:
        # Fixed pool: names sharing a stripe serialize, memory stays bounded
        return self._locks[hash(key) % len(self._locks)]

    def _read(self, key: str) -> Correction | None:
        data = self.store.get(key)
        if data is None:
            return None
        try:
            return Correction.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed correction entry for %r: %s", key, e)
            return None

    def lookup(self, normalized_name: str) -> Correction | None:
        """
        Return the learned correction for a name, or None.

        The name is normalized again, so passing a raw name works too.
        """
        key = normalize_name(normalized_name)
        if not key:
            return None
        try:
            return self._read(key)
        except CorrectionStoreError as e:
            logger.warning("Correction lookup failed for %r: %s", key, e)
            return None

    def record(self, raw_name: str, product_id: str, product_name: str) -> Correction | None:
        """
        Remember that ``raw_name`` refers to ``product_id``.

        Returns:
            The stored Correction, or None if the name is empty or the store failed.
        """
        key = normalize_name(raw_name)
        if not key:
            logger.debug("Not recording correction for empty name %r", raw_name)
            return None

        # Read-modify-write under the name's lock stripe so concurrent
        # confirmations of the same name are not lost.
        with self._key_lock(key):
            try:
                existing = self._read(key)
                now = self._clock()
                if existing is not None and existing.product_id == product_id:
                    occurrences = existing.occurrences + 1
                else:
                    if existing is not None:
                        logger.info(
                            "Correction for %r changed from %s to %s",
                            key,
                            existing.product_id,
                            product_id,
                        )
                    occurrences = 1

                correction = Correction(
                    raw_name_normalized=key,
                    product_id=product_id,
                    product_name=product_name,
                    occurrences=occurrences,
                    last_used_at=now,
                )
                self.store.put(key, correction.to_dict())
            except CorrectionStoreError as e:
                logger.warning("Could not record correction %r -> %s: %s", key, product_id, e)
                return None

        logger.debug("Recorded correction %r -> %s (x%d)", key, product_id, correction.occurrences)
        return correction
