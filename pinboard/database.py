"""
Backend Connection Layer.

Owns the single Supabase client for the process.  The client is built
once at startup and injected into repositories and services; nothing
else calls ``create_client``.

Data access is performed through the Repository pattern.  This module
only manages the connection; it contains no query logic.

Usage (dependency injection at app startup)::

    from pinboard.database import DatabaseManager
    from pinboard.logger import StructuredLogger

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

from typing import Optional

from supabase import Client as SupabaseClient
from supabase import create_client

from pinboard.logger import StructuredLogger


class DatabaseManager:
    """Holds the Supabase client.

    When ``supabase_url`` or ``supabase_key`` is empty the client is not
    created and the ``supabase`` property raises ``RuntimeError``.  The
    service layer reports that as a network failure with a retry
    affordance.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        The anonymous (publishable) key.
    logger:
        A ``StructuredLogger`` instance.
    client:
        Pre-built client.  Skips ``create_client``; used by tests to
        inject an in-memory fake with the same surface.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._url: str = supabase_url
        self._supabase: Optional[SupabaseClient] = client

        if self._supabase is not None:
            return

        if supabase_url and supabase_key:
            try:
                self._supabase = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. Backend unavailable.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning(
                "Supabase credentials not configured; backend unavailable."
            )

    @property
    def supabase(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        RuntimeError
            If the client could not be created.
        """
        if self._supabase is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "Check SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._supabase is not None

    @property
    def url(self) -> str:
        return self._url
