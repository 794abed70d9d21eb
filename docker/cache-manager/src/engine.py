from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Sequence

from .aggregator import directory_size_bytes
from .cleaner import CleanOutcome, clean_directory


LOGGER = logging.getLogger("cache_manager")

BYTES_PER_GB = 1024 ** 3


@dataclass(frozen=True)
class SizeReport:
    total_bytes: int

    @property
    def gigabytes(self) -> float:
        return self.total_bytes / BYTES_PER_GB


class CleanState:
    """Instant of the last completed cleaning pass, safe to read from any thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_clean: float | None = None

    def mark(self, instant: float) -> None:
        with self._lock:
            self._last_clean = instant

    def get(self) -> float | None:
        with self._lock:
            return self._last_clean


class CacheEngine:
    def __init__(self, cache_dirs: Sequence[str], *, clock: Callable[[], float] = time.monotonic):
        self._cache_dirs = tuple(str(item) for item in cache_dirs)
        self._clock = clock
        self._state = CleanState()

    @property
    def cache_dirs(self) -> tuple[str, ...]:
        return self._cache_dirs

    @property
    def last_clean_state(self) -> CleanState:
        return self._state

    def measure(self) -> SizeReport:
        total = 0
        for cache_dir in self._cache_dirs:
            total += directory_size_bytes(cache_dir)
        return SizeReport(total_bytes=total)

    def clean(self) -> tuple[CleanOutcome, SizeReport]:
        outcome = CleanOutcome()
        for cache_dir in self._cache_dirs:
            clean_directory(cache_dir, outcome)

        self._state.mark(self._clock())
        LOGGER.info(
            "[CACHE]: Cleaned %d files (%d bytes) across %d directories",
            outcome.files_deleted,
            outcome.bytes_reclaimed,
            len(self._cache_dirs),
        )
        return outcome, self.measure()

    def last_clean_age(self) -> timedelta | None:
        last_clean = self._state.get()
        if last_clean is None:
            return None
        return timedelta(seconds=max(0.0, self._clock() - last_clean))
