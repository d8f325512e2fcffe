"""
Profile Repository.

Handles access to the ``profiles`` table (description and avatar).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from pinboard.errors import DatabaseError
from pinboard.models.profile import ProfileRecord
from pinboard.repositories.base_repository import BaseRepository

_COLUMNS: str = "id, user_id, description, avatar_url, updated_at"


class ProfileRepository(BaseRepository):
    """Data access layer for ``ProfileRecord``.

    A missing row is the normal state of a new user.  ``get_by_user_id``
    tells it apart from a real failure through the ``PGRST116`` code.
    """

    TABLE = "profiles"

    def get_by_user_ids(self, user_ids: Iterable[str]) -> dict[str, ProfileRecord]:
        """Map each user id to its profile row; users without one are absent."""
        ids = sorted({uid for uid in user_ids if uid})
        if not ids:
            return {}

        def _query() -> dict[str, ProfileRecord]:
            response = (
                self.supabase.table(self.TABLE)
                .select(_COLUMNS)
                .in_("user_id", ids)
                .execute()
            )
            profiles = [ProfileRecord(**row) for row in response.data or []]
            return {p.user_id: p for p in profiles if p.user_id}

        return self._execute(_query, operation_name="get_by_user_ids (profiles)")

    def get_by_user_id(self, user_id: str) -> Optional[ProfileRecord]:
        """Fetch the profile of *user_id*.

        Returns ``None`` when the user has no row yet.

        Raises
        ------
        DatabaseError
            For any failure other than "no rows".
        """
        def _query() -> ProfileRecord:
            response = (
                self.supabase.table(self.TABLE)
                .select(_COLUMNS)
                .eq("user_id", user_id)
                .single()
                .execute()
            )
            return ProfileRecord(**response.data)

        try:
            return self._execute(_query, operation_name="get_by_user_id (profiles)")
        except DatabaseError as exc:
            if exc.is_no_rows:
                return None
            raise

    def upsert(
        self,
        user_id: str,
        description: str,
        avatar_url: Optional[str],
    ) -> ProfileRecord:
        """Create or update the profile row of *user_id*."""
        payload = {
            "user_id": user_id,
            "description": description,
            "avatar_url": avatar_url or None,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        def _query() -> ProfileRecord:
            response = (
                self.supabase.table(self.TABLE)
                .upsert(payload, on_conflict="user_id")
                .execute()
            )
            if not response.data:
                raise DatabaseError("upsert (profiles): no row returned")
            return ProfileRecord(**response.data[0])

        result = self._execute(_query, operation_name="upsert (profiles)")
        self._logger.info(
            "Profile saved for %s", user_id,
            extra={"event": "PROFILE_UPSERT", "user_id": user_id},
        )
        return result
