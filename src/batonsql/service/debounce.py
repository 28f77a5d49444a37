"""Per-key cancellable delay for re-validation on document change."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("batonsql.service")


class Debouncer:
    """Run a callable once a key has been quiet for ``delay_ms``.

    Scheduling a key that already has a pending timer cancels that timer,
    so a burst of edits produces a single call with the last arguments.
    """

    def __init__(self, delay_ms: int = 500) -> None:
        self._delay = max(delay_ms, 0) / 1000
        self._lock = threading.Lock()
        self._timers: dict[str, threading.Timer] = {}

    def schedule(self, key: str, fn: Callable[..., Any], *args: Any) -> None:
        with self._lock:
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous.cancel()
            timer = threading.Timer(self._delay, self._fire, args=(key, fn, args))
            timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _fire(self, key: str, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        with self._lock:
            if self._timers.get(key) is threading.current_thread():
                del self._timers[key]
        try:
            fn(*args)
        except Exception:
            logger.exception("Debounced call for %s failed", key)

    def cancel(self, key: str) -> bool:
        """Cancel the pending call for ``key``; False when nothing was pending."""
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._timers)
