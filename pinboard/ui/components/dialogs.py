"""
Dialog helpers.

``show_error_dialog`` is the escalation path for failures the user must
acknowledge (a failed delete).  ``ErrorPanel`` is the blocking variant
used in place of a view's content when it cannot proceed (session check
or storage setup failed) and offers a retry.

**Thin UI Rule**: display and callbacks only.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pinboard.logger import StructuredLogger
from pinboard.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
)


def show_error_dialog(
    parent: ctk.CTkBaseClass,
    title: str,
    message: str,
    logger: Optional[StructuredLogger] = None,
) -> None:
    """Modal error box on the UI thread."""
    if not parent.winfo_exists():
        return
    if logger is not None:
        logger.error("%s: %s", title, message)

    dialog = ctk.CTkToplevel(parent)
    dialog.title(title)
    dialog.geometry("450x200")
    dialog.resizable(False, False)
    dialog.transient(parent.winfo_toplevel())
    dialog.grab_set()

    ctk.CTkLabel(
        dialog,
        text=message,
        font=FONT_BODY,
        text_color=TEXT_PRIMARY,
        wraplength=400,
    ).pack(padx=PADDING_MD, pady=(PADDING_LG, PADDING_SM))

    ctk.CTkButton(
        dialog,
        text="OK",
        font=FONT_BUTTON,
        fg_color=ACCENT_PRIMARY,
        hover_color=ACCENT_HOVER,
        text_color=TEXT_LIGHT,
        command=dialog.destroy,
    ).pack(pady=(0, PADDING_MD))


class ErrorPanel(ctk.CTkFrame):
    """Centered error message with a Retry button.

    Parameters
    ----------
    parent:
        Container to fill.
    title:
        Bold heading.
    message:
        Error text.
    on_retry:
        Called when Retry is clicked; ``None`` hides the button.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        title: str,
        message: str,
        on_retry: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)

        inner = ctk.CTkFrame(self, fg_color="transparent")
        inner.place(relx=0.5, rely=0.45, anchor="center")

        ctk.CTkLabel(
            inner, text=title, font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(pady=(0, PADDING_SM))
        self._message_label = ctk.CTkLabel(
            inner, text=message, font=FONT_BODY, text_color=ERROR_TEXT, wraplength=460,
        )
        self._message_label.pack(pady=(0, PADDING_MD))

        if on_retry is not None:
            ctk.CTkButton(
                inner,
                text="Retry",
                font=FONT_BUTTON,
                fg_color=ACCENT_PRIMARY,
                hover_color=ACCENT_HOVER,
                text_color=TEXT_LIGHT,
                corner_radius=20,
                width=140,
                height=40,
                command=on_retry,
            ).pack()

    def set_message(self, message: str) -> None:
        self._message_label.configure(text=message)
