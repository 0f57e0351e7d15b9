"""
Registry of folder watchers.

sync() reconciles the watched set against a desired path list: removed
folders are torn down, new folders get a fresh watcher, and folders present
in both lists are left untouched so their in-flight poll state survives.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Dict, Iterable, List, Optional

from packages.shared.config import MAX_FOLDERS

from .folder_watcher import DEFAULT_POLL_INTERVAL_S, FolderActivityWatcher

log = logging.getLogger(__name__)


def _key(path: str) -> str:
    return path.casefold()


def normalize_paths(paths: Iterable[Optional[str]], max_folders: int = MAX_FOLDERS) -> List[str]:
    """Absolute, existing, case-insensitively unique paths; first max_folders in input order."""
    result: List[str] = []
    seen: set[str] = set()
    for raw in paths:
        if raw is None or not str(raw).strip():
            continue
        full = os.path.abspath(str(raw).strip())
        if not os.path.isdir(full):
            continue
        key = _key(full)
        if key in seen:
            continue
        seen.add(key)
        result.append(full)
        if len(result) >= max_folders:
            break
    return result


class WatcherRegistry:
    """
    Owns at most max_folders FolderActivityWatcher instances and fans their
    pulses into one aggregate activity event.

    Structural changes are serialized by the registry lock, which is always
    taken before any watcher lock. The fan-in handler never takes the
    registry lock.
    """

    def __init__(
        self,
        max_folders: int = MAX_FOLDERS,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        watcher_factory: Optional[Callable[[], FolderActivityWatcher]] = None,
    ) -> None:
        self._max_folders = max_folders
        self._poll_interval_s = poll_interval_s
        self._watcher_factory = watcher_factory
        self._lock = threading.Lock()
        self._watchers: Dict[str, FolderActivityWatcher] = {}
        self._paths: Dict[str, str] = {}

        self._listeners_lock = threading.Lock()
        self._listeners: List[Callable[[], None]] = []

    def on_activity(self, cb: Callable[[], None]) -> None:
        with self._listeners_lock:
            self._listeners.append(cb)

    def remove_activity_listener(self, cb: Callable[[], None]) -> None:
        with self._listeners_lock:
            if cb in self._listeners:
                self._listeners.remove(cb)

    def set_poll_interval(self, poll_interval_s: float) -> None:
        """Applies to watchers created by later sync() calls."""
        with self._lock:
            self._poll_interval_s = poll_interval_s

    def sync(self, desired_paths: Iterable[Optional[str]]) -> None:
        desired = {_key(p): p for p in normalize_paths(desired_paths, self._max_folders)}

        with self._lock:
            removed = [k for k in self._watchers if k not in desired]
            for key in removed:
                watcher = self._watchers.pop(key)
                self._paths.pop(key, None)
                watcher.remove_activity_listener(self._on_child_activity)
                watcher.dispose()

            added = []
            for key, path in desired.items():
                if key in self._watchers:
                    continue
                watcher = self._new_watcher()
                watcher.on_activity(self._on_child_activity)
                watcher.start_monitoring(path)
                self._watchers[key] = watcher
                self._paths[key] = path
                added.append(path)

            count = len(self._watchers)

        if removed or added:
            log.info("Watchers synced: %d active (+%d, -%d)", count, len(added), len(removed))

    def stop_all(self) -> None:
        with self._lock:
            for watcher in self._watchers.values():
                watcher.remove_activity_listener(self._on_child_activity)
                watcher.dispose()
            self._watchers.clear()
            self._paths.clear()

    def dispose(self) -> None:
        self.stop_all()

    def paths(self) -> List[str]:
        with self._lock:
            return list(self._paths.values())

    def watcher_for(self, path: str) -> Optional[FolderActivityWatcher]:
        with self._lock:
            return self._watchers.get(_key(os.path.abspath(path.strip())))

    def __len__(self) -> int:
        with self._lock:
            return len(self._watchers)

    def _new_watcher(self) -> FolderActivityWatcher:
        if self._watcher_factory is not None:
            return self._watcher_factory()
        return FolderActivityWatcher(poll_interval_s=self._poll_interval_s)

    def _on_child_activity(self) -> None:
        with self._listeners_lock:
            listeners = tuple(self._listeners)
        for cb in listeners:
            try:
                cb()
            except Exception:
                log.exception("Activity listener failed")
