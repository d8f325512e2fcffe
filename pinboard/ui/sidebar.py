"""Sidebar Navigation Component.

Displays the brand, the registered sidebar routes, the signed-in
user's identity and a logout button.  Follows the **Thin UI** rule:
zero business logic; all actions are delegated via injected callbacks.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pinboard.auth import SessionManager
from pinboard.logger import StructuredLogger
from pinboard.ui.icons import IconSet
from pinboard.ui.routes import RouteEntry
from pinboard.ui.theme import (
    ACCENT_PRIMARY,
    DANGER,
    FONT_BODY,
    FONT_BRAND,
    FONT_SIDEBAR,
    FONT_SIDEBAR_ACTIVE,
    FONT_SMALL,
    NEUTRAL_HOVER,
    PADDING_MD,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    SIDEBAR_ACTIVE_TEXT,
    SIDEBAR_BG,
    SIDEBAR_HOVER,
    SIDEBAR_TEXT,
    SIDEBAR_WIDTH,
    TEXT_LIGHT,
    TEXT_SECONDARY,
)

_AVATAR_SIZE: int = 40


class _RouteButton(ctk.CTkButton):
    """Internal clickable sidebar entry for a single route."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        path: str,
        text: str,
        on_click: Callable[[str], None],
    ) -> None:
        self._path = path
        super().__init__(
            parent,
            text=f"  {text}",
            anchor="w",
            font=FONT_SIDEBAR,
            text_color=SIDEBAR_TEXT,
            fg_color="transparent",
            hover_color=SIDEBAR_HOVER,
            height=40,
            corner_radius=20,
            command=lambda: on_click(self._path),
        )

    @property
    def path(self) -> str:
        return self._path

    def set_active(self, active: bool) -> None:
        """Highlight or un-highlight this button."""
        if active:
            self.configure(
                fg_color=SIDEBAR_ACTIVE,
                text_color=SIDEBAR_ACTIVE_TEXT,
                font=FONT_SIDEBAR_ACTIVE,
            )
        else:
            self.configure(fg_color="transparent", text_color=SIDEBAR_TEXT, font=FONT_SIDEBAR)


class SidebarNav(ctk.CTkFrame):
    """Sidebar navigation panel for the shell.

    Parameters
    ----------
    parent:
        The parent widget (the ``AppShell`` root).
    entries:
        Sidebar routes in display order.
    icons:
        Icon set for the entries.
    on_navigate:
        Called with a route path when an entry is clicked.
    on_logout:
        Called when the user clicks Log Out.
    session:
        Used only to read the signed-in email.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        entries: list[RouteEntry],
        icons: IconSet,
        on_navigate: Callable[[str], None],
        on_logout: Callable[[], None],
        session: SessionManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, width=SIDEBAR_WIDTH, fg_color=SIDEBAR_BG, corner_radius=0)
        self.pack_propagate(False)

        self._icons = icons
        self._on_navigate = on_navigate
        self._on_logout = on_logout
        self._session = session
        self._logger = logger

        self._buttons: dict[str, _RouteButton] = {}
        self._active_path: Optional[str] = None

        self._build_ui(entries)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_active(self, path: str) -> None:
        """Highlight the entry for *path* (if any) and un-highlight the rest."""
        if self._active_path and self._active_path in self._buttons:
            self._buttons[self._active_path].set_active(False)
        if path in self._buttons:
            self._buttons[path].set_active(True)
        self._active_path = path

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_ui(self, entries: list[RouteEntry]) -> None:
        """Construct the sidebar layout."""
        # --- Brand ---
        brand = ctk.CTkFrame(self, fg_color="transparent")
        brand.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))
        ctk.CTkLabel(
            brand,
            text=self._icons.label("brand", "Pinboard"),
            font=FONT_BRAND,
            text_color=ACCENT_PRIMARY,
            anchor="w",
        ).pack(fill="x")

        # --- Route list ---
        routes_frame = ctk.CTkFrame(self, fg_color="transparent")
        routes_frame.pack(fill="both", expand=True, pady=PADDING_SM)
        for entry in entries:
            btn = _RouteButton(
                routes_frame,
                path=entry.pattern,
                text=self._icons.label(entry.icon, entry.display_name),
                on_click=self._on_navigate,
            )
            btn.pack(fill="x", padx=PADDING_SM, pady=2)
            self._buttons[entry.pattern] = btn

        # --- Bottom section: user + logout ---
        bottom_frame = ctk.CTkFrame(self, fg_color="transparent")
        bottom_frame.pack(fill="x", padx=PADDING_SM, pady=PADDING_SM, side="bottom")

        ctk.CTkButton(
            bottom_frame,
            text=f"  {self._icons.label('logout', 'Log Out')}",
            font=FONT_BODY,
            fg_color="transparent",
            hover_color=NEUTRAL_HOVER,
            text_color=DANGER,
            anchor="w",
            height=36,
            corner_radius=18,
            command=self._on_logout,
        ).pack(fill="x", side="bottom")

        current = self._session.current_session
        email = current.email if current and current.email else ""

        row = ctk.CTkFrame(bottom_frame, fg_color="transparent")
        row.pack(fill="x", pady=(0, PADDING_SM), side="bottom")

        avatar = ctk.CTkFrame(
            row,
            width=_AVATAR_SIZE,
            height=_AVATAR_SIZE,
            corner_radius=_AVATAR_SIZE // 2,
            fg_color=SIDEBAR_ACTIVE,
        )
        avatar.pack(side="left", padx=(PADDING_SM, 10))
        avatar.pack_propagate(False)
        ctk.CTkLabel(
            avatar,
            text=self._get_initials(email),
            font=FONT_SIDEBAR_ACTIVE,
            text_color=TEXT_LIGHT,
        ).place(relx=0.5, rely=0.5, anchor="center")

        ctk.CTkLabel(
            row,
            text=email,
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(side="left", fill="x", expand=True)

    @staticmethod
    def _get_initials(email: str) -> str:
        """Up to two uppercase initials from the local part of *email*."""
        local = email.split("@", 1)[0]
        parts = [p for p in local.replace("_", ".").replace("-", ".").split(".") if p]
        if len(parts) >= 2:
            return (parts[0][0] + parts[-1][0]).upper()
        if parts:
            return parts[0][0].upper()
        return "?"
