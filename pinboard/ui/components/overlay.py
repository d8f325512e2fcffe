"""
Overlay Modal.

A dimmed backdrop covering the whole window with a centred panel on
top.  Closes on backdrop click, the close button and the Escape key; with
several overlays open, Escape closes only the topmost (``EscapeStack``).
While open it holds a ``ScrollLease``; every close path, including
plain widget destruction, releases it.

Subclasses build their content into ``self.panel``.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pinboard.ui.escape_stack import EscapeStack
from pinboard.ui.icons import IconSet
from pinboard.ui.scroll_lock import ScrollLease, ScrollLock
from pinboard.ui.theme import (
    BACKDROP_BG,
    CONTENT_BG,
    CORNER_RADIUS,
    FONT_ICON,
    NEUTRAL_BUTTON,
    NEUTRAL_HOVER,
    PADDING_SM,
    TEXT_PRIMARY,
)


class OverlayModal(ctk.CTkFrame):
    """Base class for in-window modals.

    Parameters
    ----------
    master:
        Any widget of the window; the overlay attaches to its toplevel.
    scroll_lock:
        Page scroll lock acquired while the modal is open.
    icons:
        Icon set for the close button.
    on_close:
        Called once after the modal closed through ``close()``.
    relwidth, relheight:
        Panel size relative to the window.
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        scroll_lock: ScrollLock,
        icons: IconSet,
        on_close: Optional[Callable[[], None]] = None,
        relwidth: float = 0.82,
        relheight: float = 0.86,
    ) -> None:
        self._root = master.winfo_toplevel()
        super().__init__(self._root, fg_color=BACKDROP_BG, corner_radius=0)

        self._scroll_lock = scroll_lock
        self._on_close = on_close
        self._lease: Optional[ScrollLease] = None
        self._pop_escape: Optional[Callable[[], None]] = None
        self._closed: bool = False

        self.panel = ctk.CTkFrame(self, fg_color=CONTENT_BG, corner_radius=CORNER_RADIUS)
        self.panel.place(
            relx=0.5, rely=0.5, relwidth=relwidth, relheight=relheight, anchor="center",
        )

        self._close_btn = ctk.CTkButton(
            self.panel,
            text=icons.get("close") or "X",
            font=FONT_ICON,
            width=36,
            height=36,
            corner_radius=18,
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=TEXT_PRIMARY,
            command=self.close,
        )

        self.bind("<Button-1>", self._on_backdrop_click)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._lease is not None and not self._closed

    def open(self) -> None:
        """Show the overlay above everything else and lock page scroll."""
        if self._closed or self._lease is not None:
            return
        self.place(x=0, y=0, relwidth=1, relheight=1)
        self.lift()
        self._close_btn.place(relx=1.0, x=-PADDING_SM, y=PADDING_SM, anchor="ne")
        self._close_btn.lift()
        self._lease = self._scroll_lock.acquire()
        self._pop_escape = EscapeStack.for_window(self._root).push(self.close)

    def close(self) -> None:
        """Idempotent: release the lock, destroy the widget, notify."""
        if self._closed:
            return
        self._closed = True
        callback = self._on_close
        self.destroy()
        if callback is not None:
            callback()

    def destroy(self) -> None:
        self._closed = True
        self._release()
        super().destroy()

    def _release(self) -> None:
        if self._lease is not None:
            self._lease.release()
        if self._pop_escape is not None:
            self._pop_escape()
            self._pop_escape = None

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_backdrop_click(self, _event: object) -> None:
        self.close()
