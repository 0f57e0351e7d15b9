"""
One-shot timer bound to a movable deadline.

Re-arming only moves the deadline value; a single background thread sleeps
until the nearest deadline and then invokes the callback once. The thread is
started lazily on the first arm() and exits on close().
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)


class DeadlineTimer:
    def __init__(self, callback: Callable[[], None], name: str = "DeadlineTimer") -> None:
        self._callback = callback
        self._name = name
        self._cond = threading.Condition()
        self._deadline: Optional[float] = None
        self._closed = False
        self._thread: Optional[threading.Thread] = None

    def arm(self, delay_s: float) -> None:
        """Fire the callback delay_s seconds from now, replacing any pending deadline."""
        with self._cond:
            if self._closed:
                return
            self._deadline = time.monotonic() + max(0.0, delay_s)
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()
            self._cond.notify()

    def cancel(self) -> None:
        with self._cond:
            self._deadline = None
            self._cond.notify()

    def is_armed(self) -> bool:
        with self._cond:
            return self._deadline is not None

    def close(self, timeout: float = 2.0) -> None:
        """Stop the timer thread. Idempotent; a pending deadline never fires afterwards."""
        with self._cond:
            self._closed = True
            self._deadline = None
            self._cond.notify()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._closed:
                    if self._deadline is None:
                        self._cond.wait()
                        continue
                    remaining = self._deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    self._cond.wait(remaining)
                if self._closed:
                    return
                self._deadline = None

            try:
                self._callback()
            except Exception:
                log.exception("%s callback failed", self._name)
