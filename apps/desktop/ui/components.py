"""
Reusable widgets for the RecCue window.
"""

from __future__ import annotations

from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .theme import INDICATOR_COLORS, IndicatorKind


class Card(QFrame):
    """Card container with rounded corners."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("Card")
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(16, 16, 16, 16)
        self.layout.setSpacing(12)


class PrimaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("PrimaryButton")


class SecondaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("SecondaryButton")


class RecIndicator(QLabel):
    """Rec badge whose dot is red while recording, grey when idle, orange on folder errors."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("RecIndicator")
        self._kind: IndicatorKind | None = None
        self.set_kind("idle")

    def set_kind(self, kind: IndicatorKind) -> None:
        if kind == self._kind:
            return
        self._kind = kind
        color = INDICATOR_COLORS[kind]
        self.setText(f'<span style="color:{color}">&#9679;</span> Rec')


class FolderRow(QWidget):
    """Line edit + browse button for one monitored folder slot."""

    def __init__(self, index: int, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        self.edit = QLineEdit()
        self.edit.setPlaceholderText(f"Folder {index + 1} (optional)")
        layout.addWidget(self.edit, 1)

        self.btn_browse = SecondaryButton("Browse…")
        self.btn_browse.clicked.connect(self._browse)
        layout.addWidget(self.btn_browse)

    def text(self) -> str:
        return self.edit.text().strip()

    def set_text(self, value: str) -> None:
        self.edit.setText(value)

    def set_missing(self, missing: bool) -> None:
        self.edit.setProperty("missing", "true" if missing else "false")
        # Re-polish so the [missing] selector is re-evaluated
        self.edit.style().unpolish(self.edit)
        self.edit.style().polish(self.edit)

    def _browse(self) -> None:
        chosen = QFileDialog.getExistingDirectory(self, "Select recording folder", self.text())
        if chosen:
            self.edit.setText(chosen)
