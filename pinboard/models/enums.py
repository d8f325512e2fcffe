"""
Shared Enumerations for Pinboard Models.

StrEnum values compare equal to their string equivalents, so values
coming straight from the Supabase SDK (``"SIGNED_IN"``) match directly.
"""

from __future__ import annotations

from enum import StrEnum


class AuthEventType(StrEnum):
    """Auth state transitions delivered by the session provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class ErrorKind(StrEnum):
    """Failure categories surfaced to the UI layer."""

    AUTH = "auth"
    STORAGE_SETUP = "storage_setup"
    UPLOAD = "upload"
    DATABASE = "database"
    RESOLUTION = "resolution"
    VALIDATION = "validation"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"
