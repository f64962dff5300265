# notifications/services/dispatcher.py

"""
NOTIFICATION DISPATCHER

Runs notification jobs off the request path:
- ASYNC=True:  bounded ThreadPoolExecutor (MAX_WORKERS)
- ASYNC=False: inline (tests / management commands)

Every job gets MAX_ATTEMPTS tries with exponential backoff
(BACKOFF_SECONDS * 2 ** (attempt - 1)). A job that keeps failing is logged
with its traceback and dropped; submit() never raises into the caller.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.db import close_old_connections

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        *,
        run_async: bool = True,
        max_attempts: int = 3,
        backoff_seconds: float = 2.0,
        max_workers: int = 2,
        sleep=time.sleep,
    ):
        self.run_async = bool(run_async)
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_seconds = max(0.0, float(backoff_seconds))
        self.max_workers = max(1, int(max_workers))
        self._sleep = sleep
        self._executor = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "NotificationDispatcher":
        cfg = getattr(settings, "NOTIFICATIONS", {}) or {}
        return cls(
            run_async=cfg.get("ASYNC", True),
            max_attempts=cfg.get("MAX_ATTEMPTS", 3),
            backoff_seconds=cfg.get("BACKOFF_SECONDS", 2.0),
            max_workers=cfg.get("MAX_WORKERS", 2),
        )

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="notifications",
                )
            return self._executor

    def submit(self, fn, *args, **kwargs) -> None:
        if not self.run_async:
            self.run_with_retry(fn, *args, **kwargs)
            return

        try:
            self._get_executor().submit(self._run_in_worker, fn, args, kwargs)
        except RuntimeError:
            # executor already shut down (interpreter exit)
            logger.error(
                "Notification executor unavailable; job dropped",
                extra={"task": _task_name(fn)},
            )

    def _run_in_worker(self, fn, args, kwargs) -> bool:
        try:
            return self.run_with_retry(fn, *args, **kwargs)
        finally:
            close_old_connections()

    def run_with_retry(self, fn, *args, **kwargs) -> bool:
        name = _task_name(fn)

        for attempt in range(1, self.max_attempts + 1):
            try:
                fn(*args, **kwargs)
                return True
            except Exception:
                if attempt >= self.max_attempts:
                    logger.exception(
                        "Notification failed permanently",
                        extra={"task": name, "attempts": attempt},
                    )
                    return False

                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Notification attempt failed; retrying",
                    extra={"task": name, "attempt": attempt, "retry_in": delay},
                    exc_info=True,
                )
                if delay > 0:
                    self._sleep(delay)
        return False

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)


def _task_name(fn) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


_dispatcher = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher built from settings.NOTIFICATIONS."""
    global _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            _dispatcher = NotificationDispatcher.from_settings()
        return _dispatcher
