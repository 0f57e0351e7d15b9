from __future__ import annotations

import os
from typing import List, Optional

from pydantic import BaseModel, Field

MAX_FOLDERS = 5


def is_path_valid(path: Optional[str]) -> bool:
    """True if path is a non-blank string naming an existing directory."""
    return bool(path and path.strip()) and os.path.isdir(path)


class AppConfig(BaseModel):
    version: int = 1
    # Up to MAX_FOLDERS folders; blank entries are unused slots.
    monitored_folder_paths: List[str] = Field(default_factory=list)
    inactivity_timeout_ms: int = Field(default=5000, gt=0)
    poll_interval_ms: int = Field(default=500, gt=0)
    hide_indicator: bool = False

    @property
    def has_any_valid_monitored_folder(self) -> bool:
        return any(is_path_valid(p) for p in self.monitored_folder_paths)

    @property
    def has_any_invalid_nonempty_folder(self) -> bool:
        return bool(self.missing_folders())

    def missing_folders(self) -> List[str]:
        return [p for p in self.monitored_folder_paths if p.strip() and not os.path.isdir(p)]

    def clean_paths(self) -> None:
        """Drop blank entries and enforce the folder limit."""
        self.monitored_folder_paths = [
            p for p in self.monitored_folder_paths if p.strip()
        ][:MAX_FOLDERS]

    def to_engine_config(self) -> dict:
        return {
            "poll_interval_ms": self.poll_interval_ms,
            "inactivity_timeout_ms": self.inactivity_timeout_ms,
            "max_folders": MAX_FOLDERS,
        }
