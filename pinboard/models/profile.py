"""
Profile Model.

Row of the ``profiles`` table, 1:1 with ``users`` through ``user_id``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ProfileRecord(BaseModel):
    """Represents a row of ``profiles``.

    ``user_id`` is nullable until the first save; a user with no row at
    all is a new user, not an error.
    """

    id: Optional[str] = None
    user_id: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "extra": "ignore"}
