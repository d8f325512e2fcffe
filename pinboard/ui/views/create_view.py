"""Create View: route ``/create``.

Upload form for a new pin: image file with preview, title, description
and a public switch.  Storage setup must succeed before the form is
usable; a failed setup blocks the view with a Retry.

On success the new pin is prepended to the shared feed and the user is
sent back to ``/``.

**Thin UI Rule**: validation, identity check, upload and row insert are
all delegated to ``PinService``.
"""

from __future__ import annotations

import mimetypes
import threading
from pathlib import Path
from tkinter import filedialog
from typing import Optional

import customtkinter as ctk
from PIL import Image, UnidentifiedImageError

from pinboard.logger import StructuredLogger
from pinboard.models.enums import ErrorKind
from pinboard.models.feed import FeedItem
from pinboard.models.service_models import ServiceResult, UploadRequest
from pinboard.services.pin_service import PinService
from pinboard.services.storage_service import StorageService
from pinboard.ui.components.dialogs import ErrorPanel
from pinboard.ui.feed_state import FeedState
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

_INPUT_HEIGHT: int = 44
_PREVIEW_SIZE: int = 360
_FILE_TYPES: list[tuple[str, str]] = [
    ("Images", "*.jpg *.jpeg *.png *.gif *.webp *.bmp"),
    ("All files", "*.*"),
]


class CreateView(ctk.CTkFrame):
    """Create-pin form.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    context:
        Route context.
    pin_service:
        Upload pipeline.
    storage_service:
        Storage readiness check run on mount.
    feed_state:
        Shared feed receiving the created pin.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        context: RouteContext,
        pin_service: PinService,
        storage_service: StorageService,
        feed_state: FeedState,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._context = context
        self._pin_service = pin_service
        self._storage = storage_service
        self._feed_state = feed_state
        self._logger = logger

        self._file: Optional[Path] = None
        self._content: bytes = b""
        self._content_type: str = ""
        self._preview: Optional[ctk.CTkImage] = None
        self._busy: bool = False
        self._error_panel: Optional[ErrorPanel] = None

        self._status_label = ctk.CTkLabel(
            self, text="Preparing storage...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        )
        self._status_label.place(relx=0.5, rely=0.4, anchor="center")

        self._form = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._build_form(self._form)

        self._check_storage()

    # ------------------------------------------------------------------
    # Storage readiness
    # ------------------------------------------------------------------

    def _check_storage(self, force: bool = False) -> None:
        storage = self._storage

        def _worker() -> None:
            result = storage.ensure_ready(force=force)
            self.after(0, self._on_storage_checked, result)

        threading.Thread(target=_worker, name="storage-setup", daemon=True).start()

    def _on_storage_checked(self, result: ServiceResult[bool]) -> None:
        if not self.winfo_exists():
            return
        self._status_label.place_forget()
        if not result.success:
            self._show_blocking_error(result.error or "Storage is not available.")
            return
        if self._error_panel is not None:
            self._error_panel.destroy()
            self._error_panel = None
        self._form.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_MD)

    def _show_blocking_error(self, message: str) -> None:
        self._form.pack_forget()
        if self._error_panel is not None:
            self._error_panel.set_message(message)
            return
        self._error_panel = ErrorPanel(
            self, "Storage Setup Failed", message, on_retry=self._retry_setup,
        )
        self._error_panel.pack(fill="both", expand=True)

    def _retry_setup(self) -> None:
        if self._error_panel is not None:
            self._error_panel.set_message("Retrying...")
        self._check_storage(force=True)

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_form(self, form: ctk.CTkScrollableFrame) -> None:
        form.grid_columnconfigure(0, weight=0)
        form.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            form, text="Create Pin", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).grid(row=0, column=0, columnspan=2, sticky="w", pady=(0, PADDING_MD))

        # --- Left: picker + preview ---
        left = ctk.CTkFrame(form, fg_color="transparent")
        left.grid(row=1, column=0, sticky="n", padx=(0, PADDING_LG))

        self._preview_label = ctk.CTkLabel(
            left,
            text="Choose a file",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            width=_PREVIEW_SIZE,
            height=_PREVIEW_SIZE,
            fg_color=CONTENT_CARD_BG,
            corner_radius=CORNER_RADIUS,
            cursor="hand2",
        )
        self._preview_label.pack()
        self._preview_label.bind("<Button-1>", lambda _e: self._on_choose_file())

        ctk.CTkButton(
            left,
            text="Choose image...",
            font=FONT_BUTTON,
            height=36,
            corner_radius=18,
            fg_color=NEUTRAL_BUTTON,
            hover_color=NEUTRAL_HOVER,
            text_color=TEXT_PRIMARY,
            command=self._on_choose_file,
        ).pack(fill="x", pady=(PADDING_SM, 0))

        # --- Right: fields ---
        right = ctk.CTkFrame(form, fg_color="transparent")
        right.grid(row=1, column=1, sticky="new")

        ctk.CTkLabel(right, text="Title", font=FONT_LABEL, text_color=TEXT_SECONDARY).pack(
            anchor="w"
        )
        self._title_entry = ctk.CTkEntry(
            right,
            height=_INPUT_HEIGHT,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            placeholder_text="Add a title",
        )
        self._title_entry.pack(fill="x", pady=(2, PADDING_MD))

        ctk.CTkLabel(
            right, text="Description", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(anchor="w")
        self._description_box = ctk.CTkTextbox(
            right,
            height=140,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            border_width=1,
            text_color=TEXT_PRIMARY,
        )
        self._description_box.pack(fill="x", pady=(2, PADDING_MD))

        self._public_switch = ctk.CTkSwitch(
            right,
            text="Public",
            font=FONT_BODY,
            text_color=TEXT_PRIMARY,
            progress_color=ACCENT_PRIMARY,
        )
        self._public_switch.select()
        self._public_switch.pack(anchor="w", pady=(0, PADDING_MD))

        self._error_label = ctk.CTkLabel(
            right, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=420,
            justify="left",
        )
        self._error_label.pack(anchor="w")

        self._submit_btn = ctk.CTkButton(
            right,
            text="Publish",
            font=FONT_BUTTON,
            height=_INPUT_HEIGHT,
            corner_radius=22,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._on_submit,
        )
        self._submit_btn.pack(fill="x", pady=(PADDING_SM, 0))

    # ------------------------------------------------------------------
    # File selection
    # ------------------------------------------------------------------

    def _on_choose_file(self) -> None:
        if self._busy:
            return
        filename = filedialog.askopenfilename(
            parent=self.winfo_toplevel(), title="Choose an image", filetypes=_FILE_TYPES,
        )
        if not filename:
            return
        path = Path(filename)
        try:
            content = path.read_bytes()
        except OSError as exc:
            self._set_error(f"Could not read file: {exc}")
            return

        self._file = path
        self._content = content
        self._content_type = mimetypes.guess_type(path.name)[0] or ""
        self._set_error("")
        self._show_preview(path)

    def _show_preview(self, path: Path) -> None:
        try:
            with Image.open(path) as raw:
                image = raw.convert("RGB")
        except (UnidentifiedImageError, OSError):
            self._preview = None
            self._preview_label.configure(image=None, text=path.name)
            return
        image.thumbnail((_PREVIEW_SIZE, _PREVIEW_SIZE))
        self._preview = ctk.CTkImage(light_image=image, dark_image=image, size=image.size)
        self._preview_label.configure(image=self._preview, text="")

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _on_submit(self) -> None:
        if self._busy:
            return
        request = UploadRequest(
            filename=self._file.name if self._file else "",
            content=self._content,
            content_type=self._content_type,
            title=self._title_entry.get(),
            description=self._description_box.get("1.0", "end").strip(),
            is_public=bool(self._public_switch.get()),
        )

        check = self._pin_service.validate_upload(request)
        if not check.is_valid:
            self._set_error(check.error_message or "")
            return

        self._set_busy(True)
        service = self._pin_service

        def _worker() -> None:
            result = service.upload_pin(request)
            self.after(0, self._on_uploaded, result)

        threading.Thread(target=_worker, name="upload-pin", daemon=True).start()

    def _on_uploaded(self, result: ServiceResult[Optional[FeedItem]]) -> None:
        if not self.winfo_exists():
            return
        self._set_busy(False)
        if not result.success:
            if result.error_kind == ErrorKind.STORAGE_SETUP:
                self._storage.invalidate()
                self._show_blocking_error(result.error or "Storage is not ready.")
                return
            self._set_error(result.error or "Upload failed.")
            return

        if result.data is not None:
            self._feed_state.prepend(result.data)
        self._context.navigate(ROUTE_HOME)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_error(self, message: str) -> None:
        self._error_label.configure(text=message)

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        self._submit_btn.configure(
            state="disabled" if busy else "normal",
            text="Uploading..." if busy else "Publish",
        )
