"""Single-slot delayed task used to coalesce writes.

The first `schedule` call opens a window of `interval` seconds. Further
calls inside the window replace the pending payload without starting a
second timer, so the action runs at most once per window and always sees
the most recent payload.
"""
from __future__ import annotations
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    def __init__(self, interval: float, action: Callable[[Any], None]) -> None:
        self.interval = interval
        self._action = action
        self._lock = threading.Lock()
        # Serializes action runs so an older payload never lands after a newer one
        self._run_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._payload: Any = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, payload: Any) -> None:
        with self._lock:
            self._payload = payload
            if self._timer is None:
                timer = threading.Timer(self.interval, self._fire)
                timer.daemon = True
                self._timer = timer
                timer.start()

    def _take(self) -> Any:
        # Caller holds self._lock
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        payload, self._payload = self._payload, None
        return payload

    def _fire(self) -> None:
        with self._run_lock:
            with self._lock:
                if self._timer is not threading.current_thread():
                    # cancelled or flushed while waiting for the run lock
                    return
                payload = self._take()
            try:
                self._action(payload)
            except Exception:
                logger.exception("Debounced action failed")

    def flush(self) -> bool:
        """Run the pending action now on the caller's thread.

        Returns False when nothing was pending. Errors raised by the action
        propagate to the caller.
        """
        with self._run_lock:
            with self._lock:
                if self._timer is None:
                    return False
                payload = self._take()
            self._action(payload)
            return True

    def cancel(self) -> None:
        """Drop the pending payload, waiting for an action already running."""
        with self._run_lock:
            with self._lock:
                self._take()
