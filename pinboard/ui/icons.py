"""Icon Set.

Views never hard-code glyphs; they ask the injected ``IconSet`` by name.
An unknown name, or a set built with ``IconSet.blank()``, yields an
empty string so widgets render without an icon instead of failing.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

_DEFAULT_GLYPHS: dict[str, str] = {
    "home": "⌂",
    "create": "+",
    "profile": "☺",
    "settings": "⚙",
    "logout": "⏻",
    "search": "⌕",
    "close": "✕",
    "heart": "♡",
    "heart_filled": "♥",
    "save": "⚑",
    "share": "↪",
    "more": "⋯",
    "delete": "✖",
    "back": "←",
    "brand": "P",
}


class IconSet:
    """Name -> glyph lookup resolved once at application start."""

    __slots__ = ("_glyphs",)

    def __init__(self, glyphs: Optional[Mapping[str, str]] = None) -> None:
        self._glyphs: Mapping[str, str] = MappingProxyType(dict(glyphs or {}))

    @classmethod
    def default(cls) -> "IconSet":
        return cls(_DEFAULT_GLYPHS)

    @classmethod
    def blank(cls) -> "IconSet":
        """A set that renders nothing (e.g. fonts without these glyphs)."""
        return cls({})

    def get(self, name: str) -> str:
        return self._glyphs.get(name, "")

    def label(self, name: str, text: str) -> str:
        """``"<glyph>  <text>"`` or just *text* when the glyph is blank."""
        glyph = self.get(name)
        return f"{glyph}  {text}" if glyph else text

    def __contains__(self, name: object) -> bool:
        return name in self._glyphs
