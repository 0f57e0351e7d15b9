"""
Recording activity engine.

Wires the watcher registry's aggregate pulse into the activity state machine
and exposes the result to the host: sync the watched folders, listen for
active/inactive transitions, and re-sync once a missing folder reappears.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Iterable, List, Optional

from packages.shared.config import MAX_FOLDERS

from .activity_monitor import ActivityStateMachine
from .types import ActivityState, EngineConfig
from .watcher_registry import WatcherRegistry, normalize_paths

log = logging.getLogger(__name__)


class ActivityEngine:
    """
    Background engine that emits True / False when recording activity starts
    and stops in any of the monitored folders.
    """

    def __init__(self, config: dict, registry: Optional[WatcherRegistry] = None) -> None:
        self._cfg = self._parse_config(config)
        self._lock = threading.Lock()
        self._missing: set[str] = set()

        self._registry = registry or WatcherRegistry(
            max_folders=self._cfg.max_folders,
            poll_interval_s=self._cfg.poll_interval_ms / 1000.0,
        )
        self._state_machine = ActivityStateMachine(self._cfg.inactivity_timeout_ms / 1000.0)
        self._registry.on_activity(self._state_machine.on_pulse)

    @staticmethod
    def _parse_config(config: dict) -> EngineConfig:
        """Parse config dict into EngineConfig."""
        return EngineConfig(
            poll_interval_ms=config.get("poll_interval_ms", 500),
            inactivity_timeout_ms=config.get("inactivity_timeout_ms", 5000),
            max_folders=config.get("max_folders", MAX_FOLDERS),
        )

    def on_state_changed(self, cb: Callable[[bool], None]) -> None:
        self._state_machine.on_state_changed(cb)

    def remove_state_listener(self, cb: Callable[[bool], None]) -> None:
        self._state_machine.remove_state_listener(cb)

    @property
    def is_active(self) -> bool:
        return self._state_machine.is_active

    def get_state(self) -> ActivityState:
        return self._state_machine.get_state()

    def watched_paths(self) -> List[str]:
        return self._registry.paths()

    def update_config(self, config: dict) -> None:
        """New timeout applies from the next pulse; new poll interval applies to newly added folders."""
        cfg = self._parse_config(config)
        with self._lock:
            self._cfg = cfg
        self._state_machine.update_timeout(cfg.inactivity_timeout_ms / 1000.0)
        self._registry.set_poll_interval(cfg.poll_interval_ms / 1000.0)

    def sync(self, paths: Iterable[Optional[str]]) -> None:
        paths = list(paths)
        missing = self._find_missing(paths)
        with self._lock:
            self._missing = missing
        if missing:
            log.info("Skipping %d missing folder(s)", len(missing))
        self._registry.sync(paths)

    def refresh_missing_folders(self, paths: Iterable[Optional[str]]) -> bool:
        """
        Re-sync if a configured folder that was missing now exists. Returns True if it did.

        A folder that reappears but falls outside the first max_folders valid
        entries would be dropped by sync(), so it does not count.
        """
        paths = list(paths)
        missing = self._find_missing(paths)
        with self._lock:
            recovered = self._missing - missing
            self._missing = missing
            max_folders = self._cfg.max_folders
        if recovered:
            selected = {p.casefold() for p in normalize_paths(paths, max_folders)}
            recovered = {p for p in recovered if p.casefold() in selected}
        if not recovered:
            return False
        log.info("Folder(s) available again: %s", ", ".join(sorted(recovered)))
        self._registry.sync(paths)
        return True

    def stop(self) -> None:
        self._registry.stop_all()

    def dispose(self) -> None:
        self._registry.remove_activity_listener(self._state_machine.on_pulse)
        self._registry.dispose()
        self._state_machine.dispose()

    @staticmethod
    def _find_missing(paths: List[Optional[str]]) -> set[str]:
        return {
            os.path.abspath(p.strip())
            for p in paths
            if p and p.strip() and not os.path.isdir(p.strip())
        }
