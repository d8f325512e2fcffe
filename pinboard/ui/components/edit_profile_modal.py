"""
Edit Profile Modal.

Description, avatar URL and an optional avatar file (JPG/PNG).  Saving
runs ``ProfileService.update_profile`` on a worker thread; a picked file
is uploaded first and its public URL replaces the typed one.

**Thin UI Rule**: validation and persistence live in ``ProfileService``.
"""

from __future__ import annotations

import mimetypes
import threading
from pathlib import Path
from tkinter import filedialog
from typing import Callable, Optional

import customtkinter as ctk

from pinboard.logger import StructuredLogger
from pinboard.models.profile import ProfileRecord
from pinboard.models.service_models import AvatarUpload, ProfileView, ServiceResult
from pinboard.services.profile_service import ProfileService
from pinboard.ui.components.overlay import OverlayModal
from pinboard.ui.icons import IconSet
from pinboard.ui.scroll_lock import ScrollLock
from pinboard.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    NEUTRAL_BUTTON,
    NEUTRAL_HOVER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_INPUT_HEIGHT: int = 40


class EditProfileModal(OverlayModal):
    """Profile edit form in an overlay.

    Parameters
    ----------
    master:
        Any widget of the window.
    profile:
        Current values used to prefill the form.
    profile_service:
        Performs the upload and upsert.
    scroll_lock:
        Page scroll lock.
    icons:
        Icon set.
    logger:
        Structured logger.
    on_saved:
        Called on the Tk thread after a successful save.
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        profile: ProfileView,
        profile_service: ProfileService,
        scroll_lock: ScrollLock,
        icons: IconSet,
        logger: StructuredLogger,
        on_saved: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(master, scroll_lock, icons, relwidth=0.5, relheight=0.72)
        self._profile = profile
        self._profile_service = profile_service
        self._logger = logger
        self._on_saved = on_saved
        self._avatar: Optional[AvatarUpload] = None

        self._build_ui()

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        form = ctk.CTkFrame(self.panel, fg_color="transparent")
        form.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        ctk.CTkLabel(
            form, text="Edit Profile", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(anchor="w", pady=(0, PADDING_MD))

        ctk.CTkLabel(
            form, text="About you", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(anchor="w")
        self._description = ctk.CTkTextbox(
            form,
            height=110,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            border_width=1,
            text_color=TEXT_PRIMARY,
        )
        self._description.pack(fill="x", pady=(2, PADDING_MD))
        self._description.insert("1.0", self._profile.description)

        ctk.CTkLabel(
            form, text="Avatar URL", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(anchor="w")
        self._avatar_url = ctk.CTkEntry(
            form,
            height=_INPUT_HEIGHT,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            placeholder_text="https://...",
        )
        self._avatar_url.pack(fill="x", pady=(2, PADDING_SM))
        if self._profile.avatar_url:
            self._avatar_url.insert(0, self._profile.avatar_url)

        picker = ctk.CTkFrame(form, fg_color="transparent")
        picker.pack(fill="x", pady=(0, PADDING_MD))
        ctk.CTkButton(
            picker,
            text="Upload image...",
            font=FONT_BUTTON,
            height=36,
            corner_radius=18,
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=TEXT_PRIMARY,
            command=self._on_pick_avatar,
        ).pack(side="left")
        self._avatar_file_label = ctk.CTkLabel(
            picker, text="JPG or PNG", font=FONT_SMALL, text_color=TEXT_SECONDARY,
        )
        self._avatar_file_label.pack(side="left", padx=(PADDING_SM, 0))

        self._error_label = ctk.CTkLabel(
            form, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=420,
        )
        self._error_label.pack(anchor="w")

        self._save_btn = ctk.CTkButton(
            form,
            text="Save",
            font=FONT_BUTTON,
            height=42,
            corner_radius=21,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._on_save,
        )
        self._save_btn.pack(fill="x", pady=(PADDING_SM, 0))

    # ------------------------------------------------------------------
    # Avatar file
    # ------------------------------------------------------------------

    def _on_pick_avatar(self) -> None:
        filename = filedialog.askopenfilename(
            parent=self.winfo_toplevel(),
            title="Choose an avatar",
            filetypes=[("Images", "*.jpg *.jpeg *.png")],
        )
        if not filename:
            return
        path = Path(filename)
        content_type = mimetypes.guess_type(path.name)[0] or ""
        try:
            content = path.read_bytes()
        except OSError as exc:
            self._error_label.configure(text=f"Could not read file: {exc}")
            return
        self._avatar = AvatarUpload(
            filename=path.name, content=content, content_type=content_type,
        )
        self._avatar_file_label.configure(text=path.name, text_color=TEXT_PRIMARY)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _on_save(self) -> None:
        description = self._description.get("1.0", "end").strip()
        avatar_url = self._avatar_url.get().strip() or None
        avatar = self._avatar
        service = self._profile_service

        self._save_btn.configure(state="disabled", text="Saving...")
        self._error_label.configure(text="")

        def _worker() -> None:
            result = service.update_profile(description, avatar_url, avatar)
            self.after(0, self._on_save_done, result)

        threading.Thread(target=_worker, name="save-profile", daemon=True).start()

    def _on_save_done(self, result: ServiceResult[ProfileRecord]) -> None:
        if not self.winfo_exists():
            return
        if not result.success:
            self._save_btn.configure(state="normal", text="Save")
            self._error_label.configure(text=result.error or "Could not save your profile.")
            return
        self._logger.info("Profile updated from edit modal.")
        callback = self._on_saved
        self.close()
        if callback is not None:
            callback()
