"""UI Theme Constants for Pinboard.

Centralises all colour, font, and sizing constants for the
CustomTkinter interface.  Light content area, white cards, red accent.

This file contains **zero logic**; only ``Final`` constants.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

SIDEBAR_BG: Final[str] = "#ffffff"
SIDEBAR_HOVER: Final[str] = "#efefef"
SIDEBAR_ACTIVE: Final[str] = "#111111"
SIDEBAR_TEXT: Final[str] = "#111111"
SIDEBAR_ACTIVE_TEXT: Final[str] = "#ffffff"

CONTENT_BG: Final[str] = "#ffffff"
CONTENT_CARD_BG: Final[str] = "#f6f6f6"

ACCENT_PRIMARY: Final[str] = "#e60023"
ACCENT_HOVER: Final[str] = "#ad081b"
TEXT_PRIMARY: Final[str] = "#111111"
TEXT_SECONDARY: Final[str] = "#5f5f5f"
TEXT_LIGHT: Final[str] = "#ffffff"

# Modal backdrop (Tk frames have no alpha; a solid dim colour stands in)
BACKDROP_BG: Final[str] = "#3b3b3b"
OVERLAY_BG: Final[str] = "#000000"

# Input / form
INPUT_BG: Final[str] = "#ffffff"
INPUT_BORDER: Final[str] = "#cdcdcd"
ERROR_TEXT: Final[str] = "#cc0000"
SUCCESS_TEXT: Final[str] = "#1a7f37"

# Interactive
NEUTRAL_BUTTON: Final[str] = "#efefef"
NEUTRAL_HOVER: Final[str] = "#e2e2e2"
DANGER: Final[str] = "#cc0000"
DANGER_HOVER: Final[str] = "#a30000"
LIKED: Final[str] = "#e60023"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_TITLE: Final[tuple[str, int, str]] = (FONT_FAMILY, 26, "bold")
FONT_SUBTITLE: Final[tuple[str, int]] = (FONT_FAMILY, 12)
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_SIDEBAR: Final[tuple[str, int]] = (FONT_FAMILY, 14)
FONT_SIDEBAR_ACTIVE: Final[tuple[str, int, str]] = (FONT_FAMILY, 14, "bold")
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_CAPTION: Final[tuple[str, int]] = (FONT_FAMILY, 10)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")
FONT_ICON: Final[tuple[str, int]] = (FONT_FAMILY, 18)

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

SIDEBAR_WIDTH: Final[int] = 220
LOGIN_WINDOW_WIDTH: Final[int] = 480
LOGIN_WINDOW_HEIGHT: Final[int] = 720
MAIN_WINDOW_WIDTH: Final[int] = 1320
MAIN_WINDOW_HEIGHT: Final[int] = 820
MODAL_WIDTH: Final[int] = 980
MODAL_HEIGHT: Final[int] = 640
CORNER_RADIUS: Final[int] = 16
CARD_GAP: Final[int] = 8
AVATAR_SIZE: Final[int] = 32
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24
