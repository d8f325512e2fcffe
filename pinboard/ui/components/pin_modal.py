"""
Pin Modal.

Detail view of one pin over the current page: large image on the left;
title, description, owner attribution, like/save toggles, a comments
placeholder and (for the owner only) a two-step Delete on the right.

**Thin UI Rule**: deletion is delegated to the ``on_delete`` callback;
the modal only disables its buttons and reports the outcome.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pinboard.models.feed import FeedItem
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.components.overlay import OverlayModal
from pinboard.ui.icons import IconSet
from pinboard.ui.scroll_lock import ScrollLock
from pinboard.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    AVATAR_SIZE,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    DANGER,
    DANGER_HOVER,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_ICON,
    FONT_LABEL,
    FONT_SMALL,
    FONT_TITLE,
    LIKED,
    MODAL_HEIGHT,
    MODAL_WIDTH,
    NEUTRAL_BUTTON,
    NEUTRAL_HOVER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

# Delete handler receives the item and a completion callback
# ``done(error_message_or_None)`` to be called on the Tk thread.
DeleteHandler = Callable[[FeedItem, Callable[[Optional[str]], None]], None]


class PinModal(OverlayModal):
    """Pin detail modal.

    Parameters
    ----------
    master:
        Any widget of the window.
    item:
        The pin to show.
    images:
        Shared async image source.
    icons:
        Icon set.
    scroll_lock:
        Page scroll lock.
    current_user_id:
        Signed-in user; the Delete action is offered when it owns *item*.
    on_delete:
        Starts the delete; ``None`` hides the Delete action.
    on_close:
        Called after the modal closed.
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        item: FeedItem,
        images: AsyncImageSource,
        icons: IconSet,
        scroll_lock: ScrollLock,
        current_user_id: Optional[str] = None,
        on_delete: Optional[DeleteHandler] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(master, scroll_lock, icons, on_close=on_close)
        self._item = item
        self._icons = icons
        self._on_delete = on_delete
        self._is_owner = bool(current_user_id) and current_user_id == item.user_id
        self._liked: bool = False
        self._saved: bool = False
        self._confirming: bool = False
        self._image: Optional[ctk.CTkImage] = None

        self._build_ui()

        image_width = MODAL_WIDTH // 2 - PADDING_LG
        images.request(self, item.src, image_width, None, self._set_image)

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        body = self.panel
        body.grid_columnconfigure(0, weight=1, uniform="pin")
        body.grid_columnconfigure(1, weight=1, uniform="pin")
        body.grid_rowconfigure(0, weight=1)

        # --- Left: image ---
        self._image_label = ctk.CTkLabel(
            body,
            text="",
            fg_color=CONTENT_CARD_BG,
            corner_radius=CORNER_RADIUS,
            height=MODAL_HEIGHT - 2 * PADDING_LG,
        )
        self._image_label.grid(
            row=0, column=0, sticky="nsew", padx=(PADDING_LG, PADDING_MD), pady=PADDING_LG,
        )

        # --- Right: details ---
        details = ctk.CTkScrollableFrame(body, fg_color="transparent")
        details.grid(
            row=0, column=1, sticky="nsew", padx=(PADDING_MD, PADDING_LG),
            pady=(PADDING_LG + 36, PADDING_LG),
        )

        actions = ctk.CTkFrame(details, fg_color="transparent")
        actions.pack(fill="x", pady=(0, PADDING_MD))

        self._like_btn = ctk.CTkButton(
            actions,
            text=self._icons.get("heart") or "Like",
            font=FONT_ICON,
            width=44,
            height=40,
            corner_radius=20,
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=TEXT_PRIMARY,
            command=self._toggle_like,
        )
        self._like_btn.pack(side="left")

        self._save_btn = ctk.CTkButton(
            actions,
            text="Save",
            font=FONT_BUTTON,
            width=80,
            height=40,
            corner_radius=20,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._toggle_save,
        )
        self._save_btn.pack(side="right")

        ctk.CTkLabel(
            details,
            text=self._item.title,
            font=FONT_TITLE,
            text_color=TEXT_PRIMARY,
            anchor="w",
            justify="left",
            wraplength=MODAL_WIDTH // 2 - 3 * PADDING_LG,
        ).pack(fill="x")

        if self._item.description:
            ctk.CTkLabel(
                details,
                text=self._item.description,
                font=FONT_BODY,
                text_color=TEXT_PRIMARY,
                anchor="w",
                justify="left",
                wraplength=MODAL_WIDTH // 2 - 3 * PADDING_LG,
            ).pack(fill="x", pady=(PADDING_SM, 0))

        owner = ctk.CTkFrame(details, fg_color="transparent")
        owner.pack(fill="x", pady=(PADDING_LG, 0))
        ctk.CTkLabel(
            owner,
            text=(self._item.username[:1] or "?").upper(),
            width=AVATAR_SIZE,
            height=AVATAR_SIZE,
            corner_radius=AVATAR_SIZE // 2,
            fg_color=SIDEBAR_ACTIVE,
            text_color=TEXT_LIGHT,
            font=FONT_LABEL,
        ).pack(side="left")
        ctk.CTkLabel(
            owner,
            text=self._item.username,
            font=FONT_LABEL,
            text_color=TEXT_PRIMARY,
        ).pack(side="left", padx=(PADDING_SM, 0))

        ctk.CTkLabel(
            details,
            text="Comments",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            details,
            text="No comments yet.",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x")

        if self._is_owner and self._on_delete is not None:
            self._delete_btn = ctk.CTkButton(
                details,
                text="Delete Pin",
                font=FONT_BUTTON,
                height=40,
                corner_radius=20,
                fg_color=NEUTRAL_BUTTON,
                hover_color=NEUTRAL_HOVER,
                text_color=DANGER,
                command=self._on_delete_click,
            )
            self._delete_btn.pack(fill="x", pady=(PADDING_LG, 0))

        self._error_label = ctk.CTkLabel(
            details, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=360,
        )
        self._error_label.pack(fill="x", pady=(PADDING_SM, 0))

    def _set_image(self, image: ctk.CTkImage) -> None:
        self._image = image
        self._image_label.configure(image=image, fg_color="transparent")

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def _toggle_like(self) -> None:
        self._liked = not self._liked
        glyph = self._icons.get("heart_filled" if self._liked else "heart")
        self._like_btn.configure(
            text=glyph or ("Liked" if self._liked else "Like"),
            text_color=LIKED if self._liked else TEXT_PRIMARY,
        )

    def _toggle_save(self) -> None:
        self._saved = not self._saved
        self._save_btn.configure(
            text="Saved" if self._saved else "Save",
            fg_color=SIDEBAR_ACTIVE if self._saved else ACCENT_PRIMARY,
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def _on_delete_click(self) -> None:
        if not self._confirming:
            self._confirming = True
            self._delete_btn.configure(
                text="Click again to delete",
                fg_color=DANGER,
                hover_color=DANGER_HOVER,
                text_color=TEXT_LIGHT,
            )
            return

        if self._on_delete is None:
            return
        self._delete_btn.configure(state="disabled", text="Deleting...")
        self._error_label.configure(text="")
        self._on_delete(self._item, self._on_delete_done)

    def _on_delete_done(self, error: Optional[str]) -> None:
        if not self.winfo_exists():
            return
        if error is None:
            self.close()
            return
        self._confirming = False
        self._delete_btn.configure(
            state="normal",
            text="Delete Pin",
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=DANGER,
        )
        self._error_label.configure(text=error)
