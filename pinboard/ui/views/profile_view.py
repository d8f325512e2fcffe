"""Profile View: route ``/profile``.

Header with the signed-in user's avatar, name and description, an Edit
Profile button, and a masonry grid of the user's own pins.  Deleting a
pin from its modal removes it here and from the shared feed.

**Thin UI Rule**: data comes from ``ProfileService`` and
``FeedService``; this view only arranges it.
"""

from __future__ import annotations

import threading
from typing import Optional

import customtkinter as ctk

from pinboard.auth import SessionManager
from pinboard.logger import StructuredLogger
from pinboard.models.feed import FeedItem
from pinboard.models.service_models import ProfileView as ProfileData
from pinboard.models.service_models import ServiceResult
from pinboard.services.feed_assembler import remove_from_feed
from pinboard.services.feed_service import FeedService
from pinboard.services.profile_service import ProfileService
from pinboard.ui.components.dialogs import ErrorPanel
from pinboard.ui.components.edit_profile_modal import EditProfileModal
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.components.masonry_grid import MasonryGrid
from pinboard.ui.icons import IconSet
from pinboard.ui.routes import RouteContext
from pinboard.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    FONT_BUTTON,
    FONT_SMALL,
    FONT_TITLE,
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
from pinboard.ui.views.pin_actions import PinActions
from pinboard.utils.cancellation import CancellationToken, TokenSource

_AVATAR_PX: int = 96


class ProfileView(ctk.CTkFrame):
    """Current user's profile page.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    context:
        Route context.
    session:
        Current user id.
    profile_service:
        Header data and edits.
    feed_service:
        The user's own pins.
    pin_actions:
        Pin modal and delete flow.
    images:
        Shared async image source.
    icons:
        Icon set.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        context: RouteContext,
        session: SessionManager,
        profile_service: ProfileService,
        feed_service: FeedService,
        pin_actions: PinActions,
        images: AsyncImageSource,
        icons: IconSet,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._context = context
        self._session = session
        self._profile_service = profile_service
        self._feed_service = feed_service
        self._pin_actions = pin_actions
        self._images = images
        self._icons = icons
        self._logger = logger
        self._tokens = TokenSource("profile")
        self._profile: Optional[ProfileData] = None
        self._pins: list[FeedItem] = []
        self._avatar: Optional[ctk.CTkImage] = None
        self._error_panel: Optional[ErrorPanel] = None

        self._build_ui()
        self._context.scroll_lock.attach(self._grid)
        self.reload()

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._header = ctk.CTkFrame(self, fg_color="transparent")
        self._header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_MD))

        self._avatar_label = ctk.CTkLabel(
            self._header,
            text="",
            width=_AVATAR_PX,
            height=_AVATAR_PX,
            corner_radius=_AVATAR_PX // 2,
            fg_color=SIDEBAR_ACTIVE,
            text_color=TEXT_LIGHT,
            font=FONT_TITLE,
        )
        self._avatar_label.pack()

        self._name_label = ctk.CTkLabel(
            self._header, text="", font=FONT_TITLE, text_color=TEXT_PRIMARY,
        )
        self._name_label.pack(pady=(PADDING_SM, 0))

        self._email_label = ctk.CTkLabel(
            self._header, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY,
        )
        self._email_label.pack()

        self._description_label = ctk.CTkLabel(
            self._header,
            text="",
            font=FONT_BODY,
            text_color=TEXT_PRIMARY,
            wraplength=560,
            justify="center",
        )
        self._description_label.pack(pady=(PADDING_SM, 0))

        self._edit_btn = ctk.CTkButton(
            self._header,
            text="Edit Profile",
            font=FONT_BUTTON,
            height=40,
            corner_radius=20,
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=TEXT_PRIMARY,
            state="disabled",
            command=self._open_edit,
        )
        self._edit_btn.pack(pady=(PADDING_MD, 0))

        self._count_label = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY,
        )
        self._count_label.pack()

        self._grid = MasonryGrid(
            self,
            images=self._images,
            icons=self._icons,
            on_open=self._open_pin,
            empty_text="You haven't created any pins yet.",
        )
        self._grid.pack(fill="both", expand=True, padx=PADDING_SM)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Load header and pins together on one worker thread."""
        user_id = self._session.user_id
        if user_id is None:
            return
        token = self._tokens.next()
        profile_service = self._profile_service
        feed_service = self._feed_service

        def _worker() -> None:
            profile = profile_service.load_profile()
            pins = feed_service.load_user_pins(user_id, token)
            self.after(0, self._on_loaded, token, profile, pins)

        threading.Thread(target=_worker, name="profile-load", daemon=True).start()

    def _on_loaded(
        self,
        token: CancellationToken,
        profile: ServiceResult[ProfileData],
        pins: ServiceResult[list[FeedItem]],
    ) -> None:
        if token.cancelled or not self.winfo_exists():
            return
        if not profile.success or profile.data is None:
            self._show_error(profile.error or "Could not load your profile.")
            return
        self._apply_profile(profile.data)

        if pins.success:
            self._set_pins(pins.data or [])
        else:
            self._count_label.configure(text=pins.error or "Could not load your pins.")

    def _apply_profile(self, data: ProfileData) -> None:
        self._profile = data
        name = data.display_name or "Your profile"
        self._name_label.configure(text=name)
        self._email_label.configure(text=data.email or "")
        self._description_label.configure(text=data.description)
        self._avatar_label.configure(text=(name[:1] or "?").upper())
        self._edit_btn.configure(state="normal")
        if data.avatar_url:
            self._images.request(
                self, data.avatar_url, _AVATAR_PX, _AVATAR_PX, self._set_avatar,
            )

    def _set_avatar(self, image: ctk.CTkImage) -> None:
        self._avatar = image
        self._avatar_label.configure(image=image, text="", fg_color="transparent")

    def _set_pins(self, pins: list[FeedItem]) -> None:
        self._pins = pins
        count = len(pins)
        self._count_label.configure(text=f"{count} pin{'s' if count != 1 else ''}")
        self._grid.set_items(pins)

    def _show_error(self, message: str) -> None:
        if self._error_panel is not None:
            self._error_panel.set_message(message)
            return
        self._header.pack_forget()
        self._count_label.pack_forget()
        self._grid.pack_forget()
        self._error_panel = ErrorPanel(self, "Profile Unavailable", message, on_retry=self._retry)
        self._error_panel.pack(fill="both", expand=True)

    def _retry(self) -> None:
        if self._error_panel is not None:
            self._error_panel.destroy()
            self._error_panel = None
        self._header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_MD))
        self._count_label.pack()
        self._grid.pack(fill="both", expand=True, padx=PADDING_SM)
        self.reload()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _open_pin(self, item: FeedItem) -> None:
        self._pin_actions.open(
            self, item, self._context.scroll_lock, on_deleted=self._on_pin_deleted,
        )

    def _on_pin_deleted(self, pin_id: str) -> None:
        if self.winfo_exists():
            self._set_pins(remove_from_feed(self._pins, pin_id))

    def _open_edit(self) -> None:
        if self._profile is None:
            return
        EditProfileModal(
            self,
            profile=self._profile,
            profile_service=self._profile_service,
            scroll_lock=self._context.scroll_lock,
            icons=self._icons,
            logger=self._logger,
            on_saved=self.reload,
        ).open()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def destroy(self) -> None:
        self._tokens.cancel()
        super().destroy()
