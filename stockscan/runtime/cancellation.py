"""Cancellation and progress plumbing for scan invocations."""

from __future__ import annotations

import threading
from collections.abc import Callable

from stockscan.domain.errors import ScanCancelled
from stockscan.domain.scan import ScanProgress

ProgressCallback = Callable[[ScanProgress], None]


class CancellationToken:
    """Thread-safe flag a caller sets to abandon a scan in flight."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelled("Scan cancelled")

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)


class ProgressReporter:
    """Forward progress to a callback, keeping the sequence well-formed.

    - percentages never go down (a lower value is raised to the last one)
    - nothing is delivered once the token is cancelled or 100 was reported
    - events from a worker thread and the caller thread are serialized
    """

    def __init__(self, callback: ProgressCallback | None, token: CancellationToken | None = None) -> None:
        self._callback = callback
        self._token = token
        self._last = 0
        self._finished = False
        self._lock = threading.Lock()

    @property
    def last(self) -> int:
        return self._last

    def report(self, status: str, progress: float) -> None:
        with self._lock:
            if self._finished or (self._token is not None and self._token.cancelled):
                return
            value = max(self._last, min(100, int(round(progress))))
            self._last = value
            if value >= 100:
                self._finished = True
            if self._callback is not None:
                self._callback(ScanProgress(status=status, progress=value))

    def scaled(self, start: float, end: float) -> ProgressCallback:
        """Return a callback mapping a 0..100 sub-progress into ``start..end``."""

        def forward(event: ScanProgress) -> None:
            fraction = max(0, min(100, event.progress)) / 100
            self.report(event.status, start + (end - start) * fraction)

        return forward
