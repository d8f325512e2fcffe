"""
Masonry Grid Component.

Scrollable multi-column layout of ``ImageCard`` tiles.  The column count
follows the window width (``grid_geometry``), not the grid's own, and is
recomputed on every ``<Configure>``; items are dealt to columns
round-robin so the first N pins form the top row.

Scrolling can be switched off while a modal is open (``ScrollTarget``).
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import customtkinter as ctk

from pinboard.models.feed import FeedItem
from pinboard.ui.components.image_card import ImageCard
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.icons import IconSet
from pinboard.ui.theme import (
    CARD_GAP,
    CONTENT_BG,
    FONT_BODY,
    PADDING_LG,
    TEXT_SECONDARY,
)
from pinboard.utils.layout import (
    column_count_for_width,
    distribute_round_robin,
    grid_geometry,
)

_RELAYOUT_DEBOUNCE_MS: int = 120


class MasonryGrid(ctk.CTkScrollableFrame):
    """Responsive masonry of pin cards.

    Parameters
    ----------
    parent:
        Containing view.
    images:
        Shared async image source.
    icons:
        Icon set passed to the cards.
    on_open:
        Called with the clicked ``FeedItem``.
    empty_text:
        Message shown when there are no items.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        images: AsyncImageSource,
        icons: IconSet,
        on_open: Callable[[FeedItem], None],
        empty_text: str = "No pins yet.",
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._images = images
        self._icons = icons
        self._on_open = on_open
        self._empty_text = empty_text

        self._items: list[FeedItem] = []
        self._columns: int = 0
        self._width: int = 0
        self._column_frames: list[ctk.CTkFrame] = []
        self._cards: dict[str, ImageCard] = {}
        self._empty_label: Optional[ctk.CTkLabel] = None
        self._relayout_job: Optional[str] = None
        self._scroll_enabled: bool = True

        self.bind("<Configure>", self._on_configure, add="+")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def column_count(self) -> int:
        return self._columns

    @property
    def items(self) -> list[FeedItem]:
        return list(self._items)

    def set_items(self, items: Sequence[FeedItem]) -> None:
        """Replace the displayed pins and re-render."""
        self._items = list(items)
        self._render()

    def set_scroll_enabled(self, enabled: bool) -> None:
        self._scroll_enabled = enabled

    # CTkScrollableFrame binds the wheel globally and routes it here.
    def _mouse_wheel_all(self, event: object) -> None:
        if not self._scroll_enabled:
            return
        super()._mouse_wheel_all(event)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _on_configure(self, event: object) -> None:
        width = getattr(event, "width", 0)
        if width <= 1 or width == self._width:
            return
        self._width = width
        if self._relayout_job is not None:
            self.after_cancel(self._relayout_job)
        self._relayout_job = self.after(_RELAYOUT_DEBOUNCE_MS, self._relayout_if_needed)

    def _relayout_if_needed(self) -> None:
        self._relayout_job = None
        if column_count_for_width(self._viewport_width()) != self._columns:
            self._render()

    def _viewport_width(self) -> int:
        return self.winfo_toplevel().winfo_width()

    def _render(self) -> None:
        for frame in self._column_frames:
            frame.destroy()
        self._column_frames.clear()
        self._cards.clear()
        if self._empty_label is not None:
            self._empty_label.destroy()
            self._empty_label = None

        self._columns, col_width = grid_geometry(
            self._viewport_width(), self._width or self.winfo_width(), CARD_GAP,
        )
        for col in range(5):
            self.grid_columnconfigure(col, weight=0, uniform="")

        if not self._items:
            self._empty_label = ctk.CTkLabel(
                self, text=self._empty_text, font=FONT_BODY, text_color=TEXT_SECONDARY,
            )
            self._empty_label.grid(row=0, column=0, pady=PADDING_LG, sticky="n")
            self.grid_columnconfigure(0, weight=1)
            return

        for col, column_items in enumerate(
            distribute_round_robin(self._items, self._columns)
        ):
            self.grid_columnconfigure(col, weight=1, uniform="masonry")
            frame = ctk.CTkFrame(self, fg_color="transparent", width=col_width)
            frame.grid(row=0, column=col, sticky="new", padx=CARD_GAP // 2, pady=CARD_GAP)
            self._column_frames.append(frame)
            for item in column_items:
                card = ImageCard(
                    frame,
                    item=item,
                    width=col_width,
                    images=self._images,
                    icons=self._icons,
                    on_open=self._on_open,
                )
                card.pack(fill="x", pady=(0, CARD_GAP))
                self._cards[item.id] = card

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def destroy(self) -> None:
        if self._relayout_job is not None:
            try:
                self.after_cancel(self._relayout_job)
            except ValueError:
                pass
            self._relayout_job = None
        super().destroy()
