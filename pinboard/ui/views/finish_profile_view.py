"""Finish Profile View: route ``/finish-profile``.

Shown once after the first sign-in of an account without a profile
row.  Collects a description and an optional avatar URL, upserts the
profile and continues to the feed.  "Skip" continues without saving.

**Thin UI Rule**: validation and the upsert live in ``ProfileService``.
"""

from __future__ import annotations

import threading

import customtkinter as ctk

from pinboard.logger import StructuredLogger
from pinboard.models.profile import ProfileRecord
from pinboard.models.service_models import ProfileView as ProfileData
from pinboard.models.service_models import ServiceResult
from pinboard.services.profile_service import ProfileService
from pinboard.ui.routes import ROUTE_HOME, RouteContext
from pinboard.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    FONT_SUBTITLE,
    INPUT_BG,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_INPUT_HEIGHT: int = 44
_CARD_WIDTH: int = 480


class FinishProfileView(ctk.CTkFrame):
    """Complete-your-profile form.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    context:
        Route context.
    profile_service:
        Prefill and save.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        context: RouteContext,
        profile_service: ProfileService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._context = context
        self._profile_service = profile_service
        self._logger = logger

        self._build_ui()
        self._prefill()

    def _build_ui(self) -> None:
        card = ctk.CTkFrame(
            self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS, width=_CARD_WIDTH,
        )
        card.place(relx=0.5, rely=0.45, anchor="center")

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(padx=PADDING_LG, pady=PADDING_LG)

        ctk.CTkLabel(
            inner, text="Complete your profile", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(anchor="w")
        ctk.CTkLabel(
            inner,
            text="Tell people a little about yourself.",
            font=FONT_SUBTITLE,
            text_color=TEXT_SECONDARY,
        ).pack(anchor="w", pady=(2, PADDING_MD))

        ctk.CTkLabel(
            inner, text="About you", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(anchor="w")
        self._description = ctk.CTkTextbox(
            inner,
            width=_CARD_WIDTH - 2 * PADDING_LG,
            height=120,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            border_width=1,
            text_color=TEXT_PRIMARY,
        )
        self._description.pack(fill="x", pady=(2, PADDING_MD))

        ctk.CTkLabel(
            inner, text="Avatar URL (optional)", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(anchor="w")
        self._avatar_url = ctk.CTkEntry(
            inner,
            height=_INPUT_HEIGHT,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            placeholder_text="https://...",
        )
        self._avatar_url.pack(fill="x", pady=(2, PADDING_SM))

        self._error_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=420,
        )
        self._error_label.pack(anchor="w")

        self._save_btn = ctk.CTkButton(
            inner,
            text="Continue",
            font=FONT_BUTTON,
            height=_INPUT_HEIGHT,
            corner_radius=22,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._on_save,
        )
        self._save_btn.pack(fill="x", pady=(PADDING_SM, PADDING_SM))

        ctk.CTkButton(
            inner,
            text="Skip for now",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=CONTENT_BG,
            text_color=TEXT_SECONDARY,
            command=lambda: self._context.navigate(ROUTE_HOME),
        ).pack()

    # ------------------------------------------------------------------
    # Prefill
    # ------------------------------------------------------------------

    def _prefill(self) -> None:
        service = self._profile_service

        def _worker() -> None:
            result = service.load_profile()
            self.after(0, self._on_prefill, result)

        threading.Thread(target=_worker, name="profile-prefill", daemon=True).start()

    def _on_prefill(self, result: ServiceResult[ProfileData]) -> None:
        if not self.winfo_exists() or not result.success or result.data is None:
            return
        if result.data.description and not self._description.get("1.0", "end").strip():
            self._description.insert("1.0", result.data.description)
        if result.data.avatar_url and not self._avatar_url.get():
            self._avatar_url.insert(0, result.data.avatar_url)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _on_save(self) -> None:
        description = self._description.get("1.0", "end").strip()
        avatar_url = self._avatar_url.get().strip() or None
        service = self._profile_service

        self._save_btn.configure(state="disabled", text="Saving...")
        self._error_label.configure(text="")

        def _worker() -> None:
            result = service.save_profile(description, avatar_url)
            self.after(0, self._on_saved, result)

        threading.Thread(target=_worker, name="profile-save", daemon=True).start()

    def _on_saved(self, result: ServiceResult[ProfileRecord]) -> None:
        if not self.winfo_exists():
            return
        if not result.success:
            self._save_btn.configure(state="normal", text="Continue")
            self._error_label.configure(text=result.error or "Could not save your profile.")
            return
        self._logger.info("Profile completed.", extra={"event": "PROFILE_COMPLETED"})
        self._context.navigate(ROUTE_HOME)
