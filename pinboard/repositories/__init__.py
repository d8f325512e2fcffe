"""
Repository Layer Package.

Data-access abstractions over the Supabase tables.  All table operations
flow through repositories; services never touch ``db.supabase.table``
directly.

Usage:
    from pinboard.repositories.image_repository import ImageRepository
"""

from pinboard.repositories.base_repository import BaseRepository
from pinboard.repositories.image_repository import ImageRepository
from pinboard.repositories.profile_repository import ProfileRepository
from pinboard.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ImageRepository",
    "ProfileRepository",
    "UserRepository",
]
