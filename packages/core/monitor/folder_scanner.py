from __future__ import annotations

import os
from typing import Optional

from .types import FolderSnapshot


def scan_folder(path: str) -> Optional[FolderSnapshot]:
    """Count files under path recursively and find the newest modification time.

    Returns None when the folder itself is gone or unreadable. Files that vanish
    between listing and stat() still count but contribute no mtime.
    """
    if not os.path.isdir(path):
        return None

    count = 0
    newest = 0.0
    try:
        for dirpath, _dirnames, filenames in os.walk(path):
            for name in filenames:
                count += 1
                try:
                    mtime = os.stat(os.path.join(dirpath, name)).st_mtime
                except OSError:
                    continue
                if mtime > newest:
                    newest = mtime
    except OSError:
        return None

    # os.walk() silently yields nothing if the root disappears mid-scan.
    if not os.path.isdir(path):
        return None
    return FolderSnapshot(file_count=count, newest_mtime=newest)
