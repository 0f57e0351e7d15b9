"""
Main window: folder settings, recording indicator and an activity log.
"""

from __future__ import annotations

import logging
import time
from typing import List

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QVBoxLayout,
    QWidget,
)

from packages.shared.config import AppConfig, MAX_FOLDERS
from packages.shared.store import ConfigStore
from packages.core.monitor.engine import ActivityEngine

from .theme import Theme
from .components import Card, FolderRow, PrimaryButton, RecIndicator

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Settings window hosting the recording indicator."""

    # Emitted from engine threads; Qt queues delivery onto the GUI thread.
    recording_changed = Signal(bool)

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("RecCue")
        self.resize(640, 560)

        self.theme = Theme("dark")

        self.store = ConfigStore()
        self.cfg: AppConfig = self.store.load()

        self.engine = ActivityEngine(config=self.cfg.to_engine_config())
        self.recording_changed.connect(self._on_recording_changed)
        self._engine_listener = self.recording_changed.emit
        self.engine.on_state_changed(self._engine_listener)

        self._build_ui()
        self.setStyleSheet(self.theme.get_stylesheet())
        self._load_to_ui()

        self.engine.sync(self.cfg.monitored_folder_paths)

        self._status_timer = QTimer(self)
        self._status_timer.timeout.connect(self._refresh_status)
        self._status_timer.start(800)

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        main_layout = QVBoxLayout(root)
        main_layout.setContentsMargins(24, 24, 24, 24)
        main_layout.setSpacing(16)

        header = QHBoxLayout()
        title = QLabel("RecCue")
        title.setObjectName("TitleLabel")
        header.addWidget(title)
        header.addStretch()
        self.indicator = RecIndicator()
        header.addWidget(self.indicator)
        main_layout.addLayout(header)

        folders_card = Card()
        hint = QLabel(f"Folders your recorder writes to (up to {MAX_FOLDERS}).")
        hint.setObjectName("HintLabel")
        folders_card.layout.addWidget(hint)
        self.folder_rows: List[FolderRow] = []
        for i in range(MAX_FOLDERS):
            row = FolderRow(i)
            folders_card.layout.addWidget(row)
            self.folder_rows.append(row)

        self.chk_hide = QCheckBox("Hide indicator")
        self.chk_hide.toggled.connect(self._on_hide_toggled)
        folders_card.layout.addWidget(self.chk_hide)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        self.btn_save = PrimaryButton("Save")
        self.btn_save.clicked.connect(self._save_config)
        btn_row.addWidget(self.btn_save)
        folders_card.layout.addLayout(btn_row)
        main_layout.addWidget(folders_card)

        events_card = Card()
        events_title = QLabel("Activity")
        events_title.setObjectName("HintLabel")
        events_card.layout.addWidget(events_title)
        self.events = QListWidget()
        events_card.layout.addWidget(self.events)
        main_layout.addWidget(events_card, 1)

    def _load_to_ui(self) -> None:
        paths = self.cfg.monitored_folder_paths
        for i, row in enumerate(self.folder_rows):
            row.set_text(paths[i] if i < len(paths) else "")
        self.chk_hide.setChecked(self.cfg.hide_indicator)
        self._refresh_status()

    def _refresh_status(self) -> None:
        paths = self.cfg.monitored_folder_paths
        if self.engine.refresh_missing_folders(paths):
            self._append_event("Missing folder is available again, monitoring resumed.")

        missing = set(self.cfg.missing_folders())
        for row in self.folder_rows:
            row.set_missing(bool(row.text()) and row.text() in missing)

        self.indicator.setVisible(not self.cfg.hide_indicator)
        if missing:
            self.indicator.set_kind("warning")
        elif self.engine.is_active:
            self.indicator.set_kind("recording")
        else:
            self.indicator.set_kind("idle")

    def _append_event(self, line: str) -> None:
        stamp = time.strftime("%H:%M:%S", time.localtime())
        self.events.insertItem(0, QListWidgetItem(f"{stamp}  {line}"))

    def _on_hide_toggled(self, checked: bool) -> None:
        self.cfg.hide_indicator = checked
        self._refresh_status()

    def _save_config(self) -> None:
        self.cfg.monitored_folder_paths = [row.text() for row in self.folder_rows]
        self.cfg.hide_indicator = self.chk_hide.isChecked()
        self.store.save(self.cfg)
        self._load_to_ui()
        self._append_event("Config saved.")

        self.engine.sync(self.cfg.monitored_folder_paths)
        watched = self.engine.watched_paths()
        self._append_event(f"Watching {len(watched)} folder(s).")

    def _on_recording_changed(self, active: bool) -> None:
        self._append_event("Recording detected." if active else "Recording stopped.")
        self._refresh_status()

    def closeEvent(self, event) -> None:
        self._status_timer.stop()
        self.engine.remove_state_listener(self._engine_listener)
        self.engine.dispose()
        log.info("Engine disposed")
        super().closeEvent(event)
