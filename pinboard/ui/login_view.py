"""Login View: Authentication Screen.

Sign In / Sign Up tabs over ``AuthService``.  Sign-up sends the
confirmation email (redirecting back to the configured URL) and, when
the project skips confirmation, signs the user straight in.

**Thin UI Rule**: This module contains ZERO business logic.  It
gathers inputs, delegates to ``AuthService``, and displays results.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from pinboard.logger import StructuredLogger
from pinboard.models.auth_models import AuthResult
from pinboard.services.auth_service import AuthService
from pinboard.ui.icons import IconSet
from pinboard.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BRAND,
    FONT_BUTTON,
    FONT_LABEL,
    FONT_SMALL,
    FONT_SUBTITLE,
    INPUT_BG,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_CARD_WIDTH: int = 420
_TAB_HEIGHT: int = 42
_INPUT_HEIGHT: int = 44
_BUTTON_HEIGHT: int = 48
_BRAND_ICON_SIZE: int = 56
_TAB_FONT: tuple[str, int] = ("Segoe UI", 13)
_TAB_FONT_ACTIVE: tuple[str, int, str] = ("Segoe UI", 13, "bold")

CONFIRMATION_MESSAGE: str = (
    "Registration successful! Please check your email to verify your account."
)


class LoginView(ctk.CTkFrame):
    """Full-screen login frame with Sign In / Sign Up tabs.

    Parameters
    ----------
    parent:
        The root ``CTk`` window this frame belongs to.
    auth_service:
        Login, registration and input validation.
    icons:
        Icon set for the brand mark.
    on_login_success:
        Called on the main thread with the successful ``AuthResult``.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        auth_service: AuthService,
        icons: IconSet,
        on_login_success: Callable[[AuthResult], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)

        self._auth_service = auth_service
        self._icons = icons
        self._on_login_success = on_login_success
        self._logger = logger

        self._active_tab: str = "sign_in"
        self._message_label: Optional[ctk.CTkLabel] = None

        self._build_ui()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def show_message(self, message: str) -> None:
        """Show an informational message above the sign-in form."""
        if self._message_label is not None:
            self._message_label.configure(text=message)
            self._message_label.pack(fill="x", pady=(0, PADDING_SM), before=self._tab_bar)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        """Create the centred card with brand, tabs and both forms."""
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)
        self.grid_rowconfigure(2, weight=1)
        self.grid_columnconfigure(0, weight=1)

        card = ctk.CTkFrame(
            self,
            width=_CARD_WIDTH,
            fg_color=CONTENT_CARD_BG,
            corner_radius=CORNER_RADIUS,
        )
        card.grid(row=1, column=0)

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        icon_frame = ctk.CTkFrame(
            inner,
            width=_BRAND_ICON_SIZE,
            height=_BRAND_ICON_SIZE,
            corner_radius=_BRAND_ICON_SIZE // 2,
            fg_color=ACCENT_PRIMARY,
        )
        icon_frame.pack(pady=(0, 12))
        icon_frame.pack_propagate(False)
        ctk.CTkLabel(
            icon_frame,
            text=self._icons.get("brand"),
            font=("Segoe UI", 24, "bold"),
            text_color=TEXT_LIGHT,
        ).place(relx=0.5, rely=0.5, anchor="center")

        ctk.CTkLabel(
            inner, text="Welcome to Pinboard", font=FONT_BRAND, text_color=TEXT_PRIMARY,
        ).pack(pady=(0, 2))
        ctk.CTkLabel(
            inner,
            text="Find new ideas to try",
            font=FONT_SUBTITLE,
            text_color=TEXT_SECONDARY,
        ).pack(pady=(0, PADDING_LG))

        self._message_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, wraplength=340,
        )

        # -- Tab bar --
        self._tab_bar = ctk.CTkFrame(inner, fg_color="transparent", height=_TAB_HEIGHT)
        self._tab_bar.pack(fill="x", pady=(0, PADDING_MD))
        self._tab_bar.pack_propagate(False)
        self._tab_bar.grid_columnconfigure(0, weight=1)
        self._tab_bar.grid_columnconfigure(1, weight=1)

        self._sign_in_tab = self._tab_button("Sign In", "sign_in", active=True)
        self._sign_in_tab.grid(row=0, column=0, sticky="nsew")
        self._sign_up_tab = self._tab_button("Sign Up", "sign_up", active=False)
        self._sign_up_tab.grid(row=0, column=1, sticky="nsew")

        self._sign_in_frame = ctk.CTkFrame(inner, fg_color="transparent")
        self._build_sign_in_tab(self._sign_in_frame)

        self._sign_up_frame = ctk.CTkFrame(inner, fg_color="transparent")
        self._build_sign_up_tab(self._sign_up_frame)

        self._sign_in_frame.pack(fill="both", expand=True)

    def _tab_button(self, text: str, tab: str, active: bool) -> ctk.CTkButton:
        return ctk.CTkButton(
            self._tab_bar,
            text=text,
            font=_TAB_FONT_ACTIVE if active else _TAB_FONT,
            fg_color="transparent",
            hover_color="#f0f0f0",
            text_color=ACCENT_PRIMARY if active else TEXT_SECONDARY,
            height=_TAB_HEIGHT,
            corner_radius=0,
            border_width=2 if active else 1,
            border_color=ACCENT_PRIMARY if active else INPUT_BORDER,
            command=lambda: self._switch_tab(tab),
        )

    def _field(
        self, parent: ctk.CTkFrame, label: str, placeholder: str, secret: bool = False,
    ) -> ctk.CTkEntry:
        ctk.CTkLabel(
            parent, text=label, font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(0, 4))
        entry = ctk.CTkEntry(
            parent,
            height=_INPUT_HEIGHT,
            placeholder_text=placeholder,
            show="•" if secret else "",
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
        )
        entry.pack(fill="x", pady=(0, PADDING_MD))
        return entry

    def _submit_button(
        self, parent: ctk.CTkFrame, text: str, command: Callable[[], None],
    ) -> ctk.CTkButton:
        button = ctk.CTkButton(
            parent,
            text=text,
            font=FONT_BUTTON,
            height=_BUTTON_HEIGHT,
            corner_radius=_BUTTON_HEIGHT // 2,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=command,
        )
        button.pack(fill="x", pady=(PADDING_SM, PADDING_SM))
        return button

    def _build_sign_in_tab(self, parent: ctk.CTkFrame) -> None:
        self._email_entry = self._field(parent, "Email", "you@example.com")
        self._password_entry = self._field(parent, "Password", "Password", secret=True)
        self._password_entry.bind("<Return>", self._on_enter_key)
        self._login_button = self._submit_button(parent, "Sign In", self._handle_login)
        self._error_label = ctk.CTkLabel(
            parent, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=340,
        )

    def _build_sign_up_tab(self, parent: ctk.CTkFrame) -> None:
        self._su_username_entry = self._field(parent, "Username", "Username")

        names = ctk.CTkFrame(parent, fg_color="transparent")
        names.pack(fill="x")
        names.grid_columnconfigure(0, weight=1)
        names.grid_columnconfigure(1, weight=1)
        first = ctk.CTkFrame(names, fg_color="transparent")
        first.grid(row=0, column=0, sticky="ew", padx=(0, 6))
        last = ctk.CTkFrame(names, fg_color="transparent")
        last.grid(row=0, column=1, sticky="ew", padx=(6, 0))
        self._su_first_name_entry = self._field(first, "First name", "First name")
        self._su_last_name_entry = self._field(last, "Last name", "Last name")

        self._su_email_entry = self._field(parent, "Email", "you@example.com")
        self._su_password_entry = self._field(
            parent, "Password", "At least 6 characters", secret=True,
        )
        self._su_button = self._submit_button(parent, "Create Account", self._handle_register)
        self._su_error_label = ctk.CTkLabel(
            parent, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=340,
        )
        self._su_success_label = ctk.CTkLabel(
            parent, text="", font=FONT_SMALL, text_color=SUCCESS_TEXT, wraplength=340,
        )

    # ------------------------------------------------------------------
    # Tab switching
    # ------------------------------------------------------------------

    def _switch_tab(self, tab: str) -> None:
        """Switch between Sign In and Sign Up tabs."""
        if tab == self._active_tab:
            return
        self._active_tab = tab
        self._clear_error()
        self._clear_su_messages()

        sign_in = tab == "sign_in"
        (self._sign_up_frame if sign_in else self._sign_in_frame).pack_forget()
        (self._sign_in_frame if sign_in else self._sign_up_frame).pack(fill="both", expand=True)
        self._style_tab(self._sign_in_tab, sign_in)
        self._style_tab(self._sign_up_tab, not sign_in)

    @staticmethod
    def _style_tab(button: ctk.CTkButton, active: bool) -> None:
        button.configure(
            text_color=ACCENT_PRIMARY if active else TEXT_SECONDARY,
            border_color=ACCENT_PRIMARY if active else INPUT_BORDER,
            border_width=2 if active else 1,
            font=_TAB_FONT_ACTIVE if active else _TAB_FONT,
        )

    # ------------------------------------------------------------------
    # Event Handlers: Sign In
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event[tk.Misc]) -> None:
        """Trigger the login flow when the user presses Enter."""
        self._handle_login()

    def _handle_login(self) -> None:
        """Gather inputs and start background auth."""
        email = self._email_entry.get().strip()
        password = self._password_entry.get()

        if not email or not password:
            self._show_error("Please enter email and password.")
            return

        self._set_loading(True)
        self._clear_error()

        threading.Thread(
            target=self._authenticate,
            args=(email, password),
            name="login",
            daemon=True,
        ).start()

    def _authenticate(self, email: str, password: str) -> None:
        """Background thread: delegate to ``AuthService.login()``.

        All UI mutations are dispatched back via ``self.after(0, ...)``.
        """
        result = self._auth_service.login(email, password)
        self.after(0, self._on_login_result, result)

    def _on_login_result(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._set_loading(False)
        if result.is_authenticated:
            self._on_login_success(result)
            return
        self._show_error(result.error_message or "Login failed.")

    # ------------------------------------------------------------------
    # Event Handlers: Sign Up
    # ------------------------------------------------------------------

    def _handle_register(self) -> None:
        """Gather inputs and start background registration."""
        username = self._su_username_entry.get().strip()
        first_name = self._su_first_name_entry.get().strip()
        last_name = self._su_last_name_entry.get().strip()
        email = self._su_email_entry.get().strip()
        password = self._su_password_entry.get()

        self._clear_su_messages()

        if not email or not password:
            self._show_su_error("Email and password are required.")
            return

        self._set_su_loading(True)
        auth_service = self._auth_service

        def _worker() -> None:
            result = auth_service.register(email, password, username, first_name, last_name)
            self.after(0, self._on_register_result, result)

        threading.Thread(target=_worker, name="register", daemon=True).start()

    def _on_register_result(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._set_su_loading(False)
        if not result.success:
            self._show_su_error(result.error_message or "Registration failed.")
            return
        if result.is_authenticated:
            self._on_login_success(result)
            return

        self._su_success_label.configure(text=CONFIRMATION_MESSAGE)
        self._su_success_label.pack(fill="x")
        for entry in (
            self._su_username_entry,
            self._su_first_name_entry,
            self._su_last_name_entry,
            self._su_password_entry,
        ):
            entry.delete(0, "end")

    # ------------------------------------------------------------------
    # UI Helper Methods
    # ------------------------------------------------------------------

    def _show_error(self, message: str) -> None:
        self._error_label.configure(text=message)
        self._error_label.pack(fill="x")

    def _clear_error(self) -> None:
        self._error_label.configure(text="")
        self._error_label.pack_forget()

    def _show_su_error(self, message: str) -> None:
        self._su_error_label.configure(text=message)
        self._su_error_label.pack(fill="x")

    def _clear_su_messages(self) -> None:
        for label in (self._su_error_label, self._su_success_label):
            label.configure(text="")
            label.pack_forget()

    def _set_loading(self, loading: bool) -> None:
        """Disable the Sign In button while a request is in flight."""
        self._login_button.configure(
            text="Signing in..." if loading else "Sign In",
            state="disabled" if loading else "normal",
        )

    def _set_su_loading(self, loading: bool) -> None:
        self._su_button.configure(
            text="Creating account..." if loading else "Create Account",
            state="disabled" if loading else "normal",
        )
