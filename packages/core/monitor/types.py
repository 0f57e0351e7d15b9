from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class MonitoredFolder:
    """State of one watched folder. The observer is owned by a single watcher."""
    path: str
    observer: Optional[Any] = None  # watchdog observer
    poll_baseline_time: float = 0.0  # wall clock, comparable with st_mtime
    poll_baseline_file_count: int = 0
    poll_active: bool = False


@dataclass
class FolderSnapshot:
    file_count: int
    newest_mtime: float  # 0.0 for an empty folder


@dataclass
class ActivityState:
    is_active: bool = False
    last_pulse_at: Optional[float] = None  # monotonic seconds
    deadline_at: Optional[float] = None  # monotonic seconds


@dataclass
class EngineConfig:
    """Configuration for the activity engine."""
    poll_interval_ms: int  # milliseconds
    inactivity_timeout_ms: int  # milliseconds
    max_folders: int
