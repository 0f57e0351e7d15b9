from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "RecCue"
HOME_ENV = "RECCUE_HOME"


def app_data_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override)
    # %APPDATA% on Windows, XDG config dir elsewhere
    base = os.environ.get("APPDATA") or os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def config_path() -> Path:
    return app_data_dir() / "config.json"


def log_path() -> Path:
    return app_data_dir() / "logs" / "reccue.log"


def ensure_app_dirs() -> None:
    log_path().parent.mkdir(parents=True, exist_ok=True)
