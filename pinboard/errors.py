"""
Error Taxonomy.

Exceptions raised by the repository and storage layers.  Services catch
them and translate them into ``ServiceResult`` / ``AuthResult`` envelopes
so the UI never inspects raw exceptions.
"""

from __future__ import annotations

from typing import Optional

from pinboard.models.enums import ErrorKind

# PostgREST: ``.single()`` matched zero (or several) rows.
NO_ROWS_CODE: str = "PGRST116"
# Postgres: insufficient_privilege, raised by row-level security.
RLS_DENIED_CODE: str = "42501"


class PinboardError(Exception):
    """Base class for every error the client raises on purpose."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class AuthError(PinboardError):
    """Session or credential failure."""

    kind = ErrorKind.AUTH


class StorageSetupError(PinboardError):
    """Bucket missing, misconfigured, or RLS setup RPC failed."""

    kind = ErrorKind.STORAGE_SETUP


class UploadError(PinboardError):
    """Upload validation or object write failure."""

    kind = ErrorKind.UPLOAD


class DatabaseError(PinboardError):
    """Row-level failure reported by the relational store."""

    kind = ErrorKind.DATABASE

    @property
    def is_no_rows(self) -> bool:
        return self.code == NO_ROWS_CODE

    @property
    def is_rls_violation(self) -> bool:
        return (
            self.code == RLS_DENIED_CODE
            or "violates row-level security" in self.message.lower()
        )

    @classmethod
    def from_exception(cls, exc: Exception, operation: str) -> "DatabaseError":
        """Wrap an SDK exception, keeping its PostgREST/Postgres code."""
        code = getattr(exc, "code", None)
        message = getattr(exc, "message", None) or str(exc)
        return cls(f"{operation}: {message}", code=str(code) if code else None)


class ResolutionError(PinboardError):
    """A stored object path could not be turned into a public URL."""

    kind = ErrorKind.RESOLUTION
