"""
Activity watcher for a single folder.

Native change notifications (watchdog) give low-latency pulses. A polling
fallback catches continued writes to already-open files that do not produce a
fresh notification: every native event (re)arms a poll one interval ahead, and
each poll tick that still sees changes arms the next one. The first quiet tick
lets the poll lapse until the next native event.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import threading
import time
from functools import partial
from typing import Callable, List, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .deadline import DeadlineTimer
from .folder_scanner import scan_folder
from .types import MonitoredFolder

log = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 0.5
OBSERVER_JOIN_TIMEOUT_S = 2.0


def _same_path(a: str, b: str) -> bool:
    return os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b))


class _FolderEventHandler(FileSystemEventHandler):
    """Routes watchdog events for one subscription back to its watcher."""

    def __init__(self, watcher: "FolderActivityWatcher", root: str, epoch: int) -> None:
        super().__init__()
        self._watcher = watcher
        self._root = root
        self._epoch = epoch

    # Only file writes count; folder churn (mkdir, a delete bumping the parent) does not.
    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._watcher._on_native_event(self._epoch)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._watcher._on_native_event(self._epoch)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory and _same_path(os.fsdecode(event.src_path), self._root):
            self._watcher._on_native_error(self._epoch, "watched folder was deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory and _same_path(os.fsdecode(event.src_path), self._root):
            self._watcher._on_native_error(self._epoch, "watched folder was moved")


_Detached = Tuple[Optional[MonitoredFolder], Optional[DeadlineTimer]]


class FolderActivityWatcher:
    """
    Watches one folder (recursively) and emits payload-less activity pulses.

    All mutable state is guarded by one lock. Each subscription gets an epoch;
    callbacks carrying a stale epoch are ignored, so a stopped or restarted
    watcher never pulses or re-arms on behalf of an old subscription.
    Pulses are emitted after the lock is released.
    """

    def __init__(
        self,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self._poll_interval_s = poll_interval_s
        self._observer_factory = observer_factory
        self._lock = threading.Lock()

        self._folder: Optional[MonitoredFolder] = None
        self._poll_timer: Optional[DeadlineTimer] = None
        self._monitoring = False
        self._epoch = 0

        self._listeners: List[Callable[[], None]] = []

    def on_activity(self, cb: Callable[[], None]) -> None:
        with self._lock:
            self._listeners.append(cb)

    def remove_activity_listener(self, cb: Callable[[], None]) -> None:
        with self._lock:
            if cb in self._listeners:
                self._listeners.remove(cb)

    @property
    def is_monitoring(self) -> bool:
        with self._lock:
            return self._monitoring

    @property
    def path(self) -> Optional[str]:
        with self._lock:
            return self._folder.path if self._folder else None

    def get_folder(self) -> Optional[MonitoredFolder]:
        """Copy of the current folder state, or None when stopped."""
        with self._lock:
            if self._folder is None:
                return None
            return dataclasses.replace(self._folder)

    def start_monitoring(self, path: str) -> None:
        """Start watching path. Silently ignored if path is not an existing directory."""
        if not path or not str(path).strip() or not os.path.isdir(path):
            return
        self._subscribe(os.path.abspath(path))

    def stop_monitoring(self) -> None:
        with self._lock:
            detached = self._detach_locked()
        self._release(detached)

    def dispose(self) -> None:
        self.stop_monitoring()
        with self._lock:
            self._listeners.clear()

    # -- subscription lifecycle ------------------------------------------

    def _subscribe(self, root: str) -> bool:
        with self._lock:
            detached = self._detach_locked()
            epoch = self._epoch
        self._release(detached)

        observer = self._observer_factory()
        try:
            observer.schedule(_FolderEventHandler(self, root, epoch), root, recursive=True)
            observer.start()
        except OSError as e:
            log.warning("Native watch failed for %s: %s", root, e)
            self._release((MonitoredFolder(path=root, observer=observer), None))
            return False

        with self._lock:
            if self._epoch == epoch:
                self._folder = MonitoredFolder(
                    path=root,
                    observer=observer,
                    poll_baseline_time=time.time(),
                    poll_baseline_file_count=0,
                )
                self._monitoring = True
                log.info("Monitoring %s", root)
                return True

        # Another start/stop won the race; discard this subscription.
        self._release((MonitoredFolder(path=root, observer=observer), None))
        return False

    def _detach_locked(self) -> _Detached:
        self._epoch += 1
        self._monitoring = False
        detached = (self._folder, self._poll_timer)
        self._folder = None
        self._poll_timer = None
        return detached

    @staticmethod
    def _release(detached: _Detached) -> None:
        folder, timer = detached
        if timer is not None:
            timer.close()
        if folder is None or folder.observer is None:
            return
        observer = folder.observer
        observer.stop()
        # Joining waits for in-flight callbacks; never join from the observer's own thread.
        if observer is not threading.current_thread() and observer.is_alive():
            observer.join(OBSERVER_JOIN_TIMEOUT_S)
        log.debug("Released watch on %s", folder.path)

    def _ensure_poll_timer_locked(self, epoch: int) -> DeadlineTimer:
        if self._poll_timer is None:
            self._poll_timer = DeadlineTimer(
                partial(self._on_poll_tick, epoch), name=f"FolderPoll-{epoch}"
            )
        return self._poll_timer

    # -- callbacks ---------------------------------------------------------

    def _on_native_event(self, epoch: int) -> None:
        with self._lock:
            if not self._monitoring or self._epoch != epoch or self._folder is None:
                return
            self._folder.poll_baseline_time = time.time()
            self._folder.poll_active = True
            self._ensure_poll_timer_locked(epoch).arm(self._poll_interval_s)
            listeners = tuple(self._listeners)
        self._emit(listeners)

    def _on_poll_tick(self, epoch: int) -> None:
        with self._lock:
            if not self._monitoring or self._epoch != epoch or self._folder is None:
                return
            folder = self._folder
            path = folder.path
            baseline_time = folder.poll_baseline_time
            baseline_count = folder.poll_baseline_file_count
            observer_alive = folder.observer is None or folder.observer.is_alive()

        if not observer_alive:
            self._on_native_error(epoch, "observer thread stopped")
            return

        snapshot = scan_folder(path)
        active = snapshot is not None and (
            snapshot.file_count != baseline_count or snapshot.newest_mtime > baseline_time
        )

        with self._lock:
            if not self._monitoring or self._epoch != epoch or self._folder is not folder:
                return
            if not active:
                folder.poll_active = False
                if snapshot is None:
                    log.debug("Poll stopped, %s is gone", path)
                return
            folder.poll_baseline_time = time.time()
            folder.poll_baseline_file_count = snapshot.file_count
            folder.poll_active = True
            self._ensure_poll_timer_locked(epoch).arm(self._poll_interval_s)
            listeners = tuple(self._listeners)

        log.debug("Poll detected activity in %s (%d files)", path, snapshot.file_count)
        self._emit(listeners)

    def _on_native_error(self, epoch: int, reason: str) -> None:
        with self._lock:
            if not self._monitoring or self._epoch != epoch or self._folder is None:
                return
            path = self._folder.path
            detached = self._detach_locked()
        self._release(detached)

        if not os.path.isdir(path):
            log.warning("Stopped watching %s: %s", path, reason)
            return

        log.warning("Native watch error on %s (%s), resubscribing once", path, reason)
        if not self._subscribe(path):
            log.warning("Resubscribe failed for %s, watcher stays stopped", path)

    def _emit(self, listeners: Tuple[Callable[[], None], ...]) -> None:
        for cb in listeners:
            try:
                cb()
            except Exception:
                log.exception("Activity listener failed")
