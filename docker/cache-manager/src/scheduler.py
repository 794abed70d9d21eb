from __future__ import annotations

import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from .cleaner import CleanOutcome
from .engine import BYTES_PER_GB, CacheEngine, SizeReport
from .models import load_config, record_clean_run
from .policy import should_auto_clean


LOGGER = logging.getLogger("cache_manager")


class CacheScheduler:
    def __init__(self, *, engine: CacheEngine, db_path: str, check_interval_seconds: int = 5):
        self._engine = engine
        self._db_path = db_path
        self._check_interval_seconds = int(check_interval_seconds)
        self._scheduler = BackgroundScheduler()
        self._running = False
        self._clean_lock = threading.Lock()
        self._cleaning = False
        self._cache_size_gb = 0.0
        self._status_message = "Ready"
        self._scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self._check_interval_seconds,
            max_instances=1,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_cleaning(self) -> bool:
        return self._cleaning

    def start(self) -> None:
        if self._running:
            return
        self._scheduler.start()
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        self._scheduler.shutdown(wait=False)
        self._running = False

    def run_once(self) -> None:
        try:
            if self._cleaning:
                LOGGER.debug("[CACHE]: Clean in progress, skipping cache check")
                return

            report = self._engine.measure()
            self._cache_size_gb = report.gigabytes
            config = load_config(self._db_path)

            # Never wait behind a manual pass; the next tick sees its cooldown.
            if not self._clean_lock.acquire(blocking=False):
                return
            try:
                if not should_auto_clean(
                    report.gigabytes,
                    config.threshold_gb,
                    config.auto_clean_enabled,
                    self._engine.last_clean_age(),
                ):
                    return
                LOGGER.info(
                    "[CACHE]: Cache size %.2f GB reached threshold %.2f GB, auto-cleaning",
                    report.gigabytes,
                    config.threshold_gb,
                )
                outcome, _ = self._clean_locked()
            finally:
                self._clean_lock.release()

            self._record(trigger="auto", outcome=outcome)
        except Exception:
            LOGGER.warning("[CACHE]: Cache check failed", exc_info=True)

    def clean_now(self, trigger: str = "manual") -> tuple[CleanOutcome, SizeReport]:
        with self._clean_lock:
            outcome, report = self._clean_locked()
        self._record(trigger=trigger, outcome=outcome)
        return outcome, report

    def _clean_locked(self) -> tuple[CleanOutcome, SizeReport]:
        self._cleaning = True
        self._status_message = "Cleaning cache..."
        try:
            outcome, report = self._engine.clean()
        finally:
            self._cleaning = False

        self._cache_size_gb = report.gigabytes
        self._status_message = (
            f"Cleaned {outcome.files_deleted} files "
            f"({outcome.bytes_reclaimed / BYTES_PER_GB:.2f} GB)"
        )
        return outcome, report

    def _record(self, *, trigger: str, outcome: CleanOutcome) -> None:
        record_clean_run(
            db_path=self._db_path,
            trigger=trigger,
            files_deleted=outcome.files_deleted,
            bytes_reclaimed=outcome.bytes_reclaimed,
        )

    def snapshot(self) -> dict:
        age = self._engine.last_clean_age()
        return {
            "cache_size_gb": round(self._cache_size_gb, 2),
            "status_message": self._status_message,
            "is_cleaning": self._cleaning,
            "last_cleaned_seconds_ago": int(age.total_seconds()) if age is not None else None,
            "cache_dirs": list(self._engine.cache_dirs),
        }
