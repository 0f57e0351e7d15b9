"""
Recording activity state machine.

State machine: INACTIVE -> ACTIVE -> INACTIVE

Any pulse makes the state ACTIVE and pushes the inactivity deadline to
now + timeout. When the deadline passes without another pulse the state goes
back to INACTIVE. Exactly one event is emitted per real edge, no matter how
many pulses arrive in a burst.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, List

from .deadline import DeadlineTimer
from .types import ActivityState

log = logging.getLogger(__name__)

DEFAULT_INACTIVITY_TIMEOUT_S = 5.0


class ActivityStateMachine:
    """
    Debounces activity pulses into a stable active/inactive boolean.

    The deadline is an explicit value recomputed on every pulse; a single
    DeadlineTimer wakes at it. If the timer fires after the deadline has been
    moved, it is simply re-armed for the remaining time.

    Transition events are queued under the lock and delivered in order by one
    dispatching thread at a time, outside the lock, so listeners may call back
    into the state machine.
    """

    def __init__(self, timeout_s: float = DEFAULT_INACTIVITY_TIMEOUT_S) -> None:
        self._timeout_s = timeout_s
        self._lock = threading.Lock()
        self._state = ActivityState()
        self._timer = DeadlineTimer(self._on_deadline, name="ActivityDeadline")
        self._disposed = False

        self._listeners: List[Callable[[bool], None]] = []
        self._pending: Deque[bool] = deque()
        self._dispatching = False

    def on_state_changed(self, cb: Callable[[bool], None]) -> None:
        with self._lock:
            self._listeners.append(cb)

    def remove_state_listener(self, cb: Callable[[bool], None]) -> None:
        with self._lock:
            if cb in self._listeners:
                self._listeners.remove(cb)

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._state.is_active

    @property
    def timeout_s(self) -> float:
        with self._lock:
            return self._timeout_s

    def get_state(self) -> ActivityState:
        with self._lock:
            return dataclasses.replace(self._state)

    def update_timeout(self, timeout_s: float) -> None:
        """Takes effect from the next pulse."""
        with self._lock:
            self._timeout_s = timeout_s

    def on_pulse(self) -> None:
        with self._lock:
            if self._disposed:
                return
            now = time.monotonic()
            self._state.last_pulse_at = now
            self._state.deadline_at = now + self._timeout_s
            self._timer.arm(self._timeout_s)
            if self._state.is_active:
                return
            self._state.is_active = True
            self._pending.append(True)
        log.info("Recording activity started")
        self._dispatch_pending()

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            self._state.deadline_at = None
            self._listeners.clear()
            self._pending.clear()
        self._timer.close()

    def _on_deadline(self) -> None:
        with self._lock:
            if self._disposed or not self._state.is_active:
                return
            deadline = self._state.deadline_at
            now = time.monotonic()
            if deadline is not None and now < deadline:
                # A pulse moved the deadline while the timer was firing.
                self._timer.arm(deadline - now)
                return
            self._state.is_active = False
            self._state.deadline_at = None
            self._pending.append(False)
        log.info("Recording activity stopped")
        self._dispatch_pending()

    def _dispatch_pending(self) -> None:
        with self._lock:
            if self._dispatching:
                return
            self._dispatching = True

        while True:
            with self._lock:
                if not self._pending:
                    self._dispatching = False
                    return
                is_active = self._pending.popleft()
                listeners = tuple(self._listeners)

            for cb in listeners:
                try:
                    cb(is_active)
                except Exception:
                    log.exception("State listener failed")
