"""
Shared fixtures for the RecCue tests.

- folders: factory for real temp directories
- recorder: thread-safe event recorder with wait helpers
- fake_observers: stand-in for watchdog's Observer to drive native failures
"""

import sys
import threading
import time
from pathlib import Path

import pytest

# Project root on sys.path so `packages.*` imports work without installing
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


class Recorder:
    """Collects callback invocations from any thread."""

    def __init__(self):
        self._cond = threading.Condition()
        self.events = []

    def __call__(self, *args):
        with self._cond:
            self.events.append(args[0] if args else None)
            self._cond.notify_all()

    @property
    def count(self):
        with self._cond:
            return len(self.events)

    def snapshot(self):
        with self._cond:
            return list(self.events)

    def wait_for(self, count, timeout=5.0):
        """Block until at least `count` events were recorded."""
        deadline = time.monotonic() + timeout
        with self._cond:
            while len(self.events) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True


def wait_until(predicate, timeout=5.0, interval=0.02):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class FakeObserver:
    """Minimal watchdog observer double: records schedules, never emits by itself."""

    def __init__(self, fail=False):
        self.fail = fail
        self.handlers = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        if self.fail:
            raise OSError("inotify watch limit reached")
        self.handlers.append((handler, path, recursive))

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def is_alive(self):
        return self.started and not self.stopped

    def join(self, timeout=None):
        pass

    @property
    def handler(self):
        return self.handlers[0][0]


class FakeObserverFactory:
    def __init__(self):
        self.instances = []
        self.fail_from = None  # index of the first observer whose schedule() fails

    def __call__(self):
        fail = self.fail_from is not None and len(self.instances) >= self.fail_from
        observer = FakeObserver(fail=fail)
        self.instances.append(observer)
        return observer

    @property
    def last(self):
        return self.instances[-1]


@pytest.fixture
def folders(tmp_path):
    """Factory: folders("a", "b") creates and returns directories under tmp_path."""

    def _create(*names):
        created = []
        for name in names:
            d = tmp_path / name
            d.mkdir(parents=True, exist_ok=True)
            created.append(d)
        return created if len(created) != 1 else created[0]

    return _create


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def fake_observers():
    return FakeObserverFactory()


@pytest.fixture(name="wait_until")
def wait_until_fixture():
    return wait_until
