from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (the form stored in MySQL DATETIME)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SystemClock:
    def now(self) -> datetime:
        return utc_now()


class ManualClock:
    """Clock that only moves when told to.

    Note: Wrapped so tests can pin expiry boundaries exactly.
    """

    def __init__(self, start: datetime):
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value

    def advance(self, delta: timedelta | None = None, *, seconds: float = 0, milliseconds: float = 0) -> datetime:
        step = delta or timedelta(seconds=seconds, milliseconds=milliseconds)
        with self._lock:
            self._now = self._now + step
            return self._now
