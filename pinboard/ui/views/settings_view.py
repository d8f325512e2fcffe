"""Settings View: route ``/settings``.

Account email, a shortcut to the edit-profile modal and Sign Out.

**Thin UI Rule**: sign-out is handed to the shell through ``on_logout``.
"""

from __future__ import annotations

import threading
from typing import Callable

import customtkinter as ctk

from pinboard.auth import SessionManager
from pinboard.logger import StructuredLogger
from pinboard.models.service_models import ProfileView as ProfileData
from pinboard.models.service_models import ServiceResult
from pinboard.services.profile_service import ProfileService
from pinboard.ui.components.edit_profile_modal import EditProfileModal
from pinboard.ui.icons import IconSet
from pinboard.ui.routes import RouteContext
from pinboard.ui.theme import (
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    DANGER,
    DANGER_HOVER,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    NEUTRAL_BUTTON,
    NEUTRAL_HOVER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class SettingsView(ctk.CTkFrame):
    """Account settings.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    context:
        Route context.
    session:
        Account email.
    profile_service:
        Loads the profile for the edit modal.
    icons:
        Icon set.
    logger:
        Structured logger.
    on_logout:
        Shell callback performing the sign-out.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        context: RouteContext,
        session: SessionManager,
        profile_service: ProfileService,
        icons: IconSet,
        logger: StructuredLogger,
        on_logout: Callable[[], None],
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._context = context
        self._session = session
        self._profile_service = profile_service
        self._icons = icons
        self._logger = logger
        self._on_logout = on_logout

        self._build_ui()

    def _build_ui(self) -> None:
        ctk.CTkLabel(
            self, text="Settings", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(anchor="w", padx=PADDING_LG, pady=(PADDING_LG, PADDING_MD))

        card = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(fill="x", padx=PADDING_LG)

        ctk.CTkLabel(
            card, text="EMAIL", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(anchor="w", padx=PADDING_MD, pady=(PADDING_MD, 0))
        current = self._session.current_session
        ctk.CTkLabel(
            card,
            text=(current.email if current and current.email else "Unknown"),
            font=FONT_BODY,
            text_color=TEXT_PRIMARY,
        ).pack(anchor="w", padx=PADDING_MD, pady=(0, PADDING_MD))

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)

        self._edit_btn = ctk.CTkButton(
            actions,
            text="Edit Profile",
            font=FONT_BUTTON,
            height=40,
            corner_radius=20,
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=TEXT_PRIMARY,
            command=self._on_edit_profile,
        )
        self._edit_btn.pack(side="left")

        ctk.CTkButton(
            actions,
            text=self._icons.label("logout", "Sign Out"),
            font=FONT_BUTTON,
            height=40,
            corner_radius=20,
            fg_color=DANGER,
            hover_color=DANGER_HOVER,
            text_color=TEXT_LIGHT,
            command=self._on_logout,
        ).pack(side="left", padx=(PADDING_SM, 0))

        self._error_label = ctk.CTkLabel(self, text="", font=FONT_BODY, text_color=ERROR_TEXT)
        self._error_label.pack(anchor="w", padx=PADDING_LG)

    def _on_edit_profile(self) -> None:
        self._edit_btn.configure(state="disabled")
        self._error_label.configure(text="")
        service = self._profile_service

        def _worker() -> None:
            result = service.load_profile()
            self.after(0, self._open_editor, result)

        threading.Thread(target=_worker, name="settings-profile", daemon=True).start()

    def _open_editor(self, result: ServiceResult[ProfileData]) -> None:
        if not self.winfo_exists():
            return
        self._edit_btn.configure(state="normal")
        if not result.success or result.data is None:
            self._error_label.configure(text=result.error or "Could not load your profile.")
            return
        EditProfileModal(
            self,
            profile=result.data,
            profile_service=self._profile_service,
            scroll_lock=self._context.scroll_lock,
            icons=self._icons,
            logger=self._logger,
        ).open()
