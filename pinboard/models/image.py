"""
Image Models.

``ImageRecord`` mirrors a row of the ``images`` table.  ``NewImage`` is the
insert payload written after a successful object upload.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ImageRecord(BaseModel):
    """Represents a stored pin.

    ``storage_path`` is the object key relative to the image bucket.
    Records are immutable in this client: created by upload, removed by
    delete.
    """

    id: str
    user_id: Optional[str] = None
    storage_path: Optional[str] = None
    original_filename: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = True
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "extra": "ignore"}


class NewImage(BaseModel):
    """Insert payload for ``images``; ``id`` and ``created_at`` are server defaults."""

    user_id: str
    storage_path: str
    original_filename: str
    title: str
    description: str = ""
    is_public: bool = True
