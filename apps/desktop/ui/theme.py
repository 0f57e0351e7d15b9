"""
Theme tokens and QSS for the RecCue window and recording indicator.
"""

from __future__ import annotations

from typing import Literal

SPACING = {
    "xs": "4px",
    "sm": "8px",
    "md": "12px",
    "lg": "16px",
}

FONT_FAMILY = "Segoe UI, -apple-system, BlinkMacSystemFont, sans-serif"

# Indicator dot colors
INDICATOR_COLORS = {
    "recording": "#FF3B30",
    "idle": "#8E8E93",
    "warning": "#FF9500",
}

ACCENT = "#007AFF"

DARK_COLORS = {
    "background": "#000000",
    "surface": "#1C1C1E",
    "surface_secondary": "#2C2C2E",
    "text_primary": "#FFFFFF",
    "text_secondary": "#98989D",
    "border": "#38383A",
}

LIGHT_COLORS = {
    "background": "#F5F5F7",
    "surface": "#FFFFFF",
    "surface_secondary": "#F9F9F9",
    "text_primary": "#000000",
    "text_secondary": "#6E6E73",
    "border": "#E5E5EA",
}

ThemeMode = Literal["light", "dark"]
IndicatorKind = Literal["recording", "idle", "warning"]


def rgba(hex_color: str, alpha: float) -> str:
    hex_color = hex_color.lstrip("#")
    r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)
    return f"rgba({r}, {g}, {b}, {alpha})"


class Theme:
    """QSS stylesheet for light and dark modes."""

    def __init__(self, mode: ThemeMode = "dark"):
        self.mode = mode
        self.colors = LIGHT_COLORS if mode == "light" else DARK_COLORS

    def get_stylesheet(self) -> str:
        colors = self.colors
        return f"""
        QMainWindow {{
            background-color: {colors["background"]};
            color: {colors["text_primary"]};
        }}

        QLabel#TitleLabel {{
            font-family: {FONT_FAMILY};
            font-size: 22px;
            font-weight: 700;
            color: {colors["text_primary"]};
        }}

        QLabel#HintLabel {{
            font-family: {FONT_FAMILY};
            font-size: 13px;
            color: {colors["text_secondary"]};
        }}

        QFrame#Card {{
            background-color: {colors["surface"]};
            border-radius: 16px;
            border: 1px solid {colors["border"]};
        }}

        QPushButton#PrimaryButton {{
            background-color: {ACCENT};
            color: #FFFFFF;
            border: none;
            border-radius: 16px;
            padding: {SPACING["sm"]} {SPACING["lg"]};
            font-family: {FONT_FAMILY};
            font-weight: 600;
        }}

        QPushButton#SecondaryButton {{
            background-color: {colors["surface_secondary"]};
            color: {ACCENT};
            border: 1px solid {colors["border"]};
            border-radius: 16px;
            padding: {SPACING["sm"]} {SPACING["lg"]};
            font-family: {FONT_FAMILY};
        }}

        QLineEdit {{
            background-color: {colors["surface"]};
            color: {colors["text_primary"]};
            border: 1px solid {colors["border"]};
            border-radius: 10px;
            padding: {SPACING["xs"]} {SPACING["md"]};
            font-family: {FONT_FAMILY};
            min-height: 28px;
        }}

        QLineEdit[missing="true"] {{
            border-color: {INDICATOR_COLORS["warning"]};
        }}

        QListWidget {{
            background-color: transparent;
            color: {colors["text_secondary"]};
            border: none;
            font-family: {FONT_FAMILY};
        }}

        QCheckBox {{
            font-family: {FONT_FAMILY};
            color: {colors["text_primary"]};
        }}

        QLabel#RecIndicator {{
            background-color: {rgba(colors["surface_secondary"], 0.9)};
            color: {colors["text_primary"]};
            border: 1px solid {rgba("#FFFFFF", 0.65)};
            border-radius: 8px;
            padding: {SPACING["sm"]} {SPACING["md"]};
            font-family: {FONT_FAMILY};
            font-size: 17px;
            font-weight: 600;
        }}
        """
