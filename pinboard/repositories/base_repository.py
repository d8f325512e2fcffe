"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference (Supabase client)
- Logger reference
- A single wrapper that turns SDK exceptions into ``DatabaseError``
"""

from __future__ import annotations

from typing import Callable, TypeVar

from supabase import Client as SupabaseClient

from pinboard.database import DatabaseManager
from pinboard.errors import DatabaseError
from pinboard.logger import StructuredLogger

T = TypeVar("T")


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client."""
        return self._db.supabase

    def _execute(self, op: Callable[[], T], *, operation_name: str) -> T:
        """Run *op* and normalise failures to ``DatabaseError``.

        ``DatabaseError`` raised by *op* itself passes through untouched.
        Anything else (PostgREST ``APIError``, transport errors, the
        ``RuntimeError`` of an unconfigured client) is wrapped with its
        code preserved so callers can tell "no rows" from real failures.
        """
        try:
            return op()
        except DatabaseError:
            raise
        except Exception as exc:
            error = DatabaseError.from_exception(exc, operation_name)
            if not error.is_no_rows:
                self._logger.warning(
                    "%s failed on %s: %s", operation_name, self.TABLE, error.message,
                    extra={"code": error.code or ""},
                )
            raise error from exc
