"""
Image Card Component.

One pin in the masonry grid: the image cropped to the pin's layout
height, a hover overlay with a Save toggle, and the owner attribution
underneath.  Clicking anywhere on the card opens the pin modal.

**Thin UI Rule**: Zero business logic; only display and callbacks.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pinboard.models.feed import FeedItem
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.icons import IconSet
from pinboard.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    AVATAR_SIZE,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BUTTON,
    FONT_LABEL,
    FONT_SMALL,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class ImageCard(ctk.CTkFrame):
    """A single pin tile.

    Parameters
    ----------
    parent:
        Column frame of the masonry grid.
    item:
        Pin to display.
    width:
        Column width in pixels; the image is cropped to
        ``width x item.height``.
    images:
        Shared async image source.
    icons:
        Icon set.
    on_open:
        Called with *item* when the card is clicked.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        item: FeedItem,
        width: int,
        images: AsyncImageSource,
        icons: IconSet,
        on_open: Callable[[FeedItem], None],
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, cursor="hand2")
        self._item = item
        self._width = width
        self._icons = icons
        self._on_open = on_open
        self._saved: bool = False
        self._image: Optional[ctk.CTkImage] = None

        self._build_ui()
        self._bind_click_recursive(self)

        # Hover affordance lives outside the click binding.
        self._save_btn = ctk.CTkButton(
            self._image_label,
            text="Save",
            font=FONT_BUTTON,
            width=64,
            height=32,
            corner_radius=16,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._toggle_save,
        )
        self.bind("<Enter>", self._on_enter, add="+")
        self.bind("<Leave>", self._on_leave, add="+")
        self._image_label.bind("<Enter>", self._on_enter, add="+")
        self._image_label.bind("<Leave>", self._on_leave, add="+")

        images.request(self, item.src, width, item.height, self._set_image)

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._image_label = ctk.CTkLabel(
            self,
            text="",
            width=self._width,
            height=self._item.height,
            fg_color=CONTENT_CARD_BG,
            corner_radius=CORNER_RADIUS,
        )
        self._image_label.pack(fill="x")

        ctk.CTkLabel(
            self,
            text=self._item.title,
            font=FONT_LABEL,
            text_color=TEXT_PRIMARY,
            anchor="w",
            wraplength=max(self._width - PADDING_SM, 40),
            justify="left",
        ).pack(fill="x", padx=2, pady=(PADDING_SM // 2, 0))

        attribution = ctk.CTkFrame(self, fg_color="transparent")
        attribution.pack(fill="x", padx=2, pady=(2, PADDING_SM))

        ctk.CTkLabel(
            attribution,
            text=_initials(self._item.username),
            width=AVATAR_SIZE - 8,
            height=AVATAR_SIZE - 8,
            corner_radius=(AVATAR_SIZE - 8) // 2,
            fg_color=SIDEBAR_ACTIVE,
            text_color=TEXT_LIGHT,
            font=FONT_SMALL,
        ).pack(side="left")
        ctk.CTkLabel(
            attribution,
            text=self._item.username,
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(side="left", padx=(6, 0))

    def _set_image(self, image: ctk.CTkImage) -> None:
        self._image = image
        self._image_label.configure(image=image, fg_color="transparent")

    # ------------------------------------------------------------------
    # Hover / save
    # ------------------------------------------------------------------

    def _on_enter(self, _event: object) -> None:
        self._save_btn.place(relx=1.0, x=-PADDING_SM, y=PADDING_SM, anchor="ne")

    def _on_leave(self, _event: object) -> None:
        # <Leave> also fires when the pointer moves onto a child widget.
        x, y = self.winfo_pointerxy()
        hovered = self.winfo_containing(x, y)
        while hovered is not None:
            if hovered is self:
                return
            hovered = hovered.master
        self._save_btn.place_forget()

    def _toggle_save(self) -> None:
        self._saved = not self._saved
        self._save_btn.configure(
            text="Saved" if self._saved else "Save",
            fg_color=SIDEBAR_ACTIVE if self._saved else ACCENT_PRIMARY,
        )

    @property
    def saved(self) -> bool:
        return self._saved

    @property
    def item(self) -> FeedItem:
        return self._item

    # ------------------------------------------------------------------
    # Click
    # ------------------------------------------------------------------

    def _bind_click_recursive(self, widget: ctk.CTkBaseClass) -> None:
        """Bind left-click to every child widget so the whole card is clickable."""
        widget.bind("<Button-1>", self._on_click)
        for child in widget.winfo_children():
            self._bind_click_recursive(child)

    def _on_click(self, _event: object) -> None:
        self._on_open(self._item)


def _initials(name: str) -> str:
    parts = name.split()
    if not parts:
        return "?"
    return "".join(p[0] for p in parts[:2]).upper()
