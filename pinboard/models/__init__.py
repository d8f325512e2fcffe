"""
Data Models Package.

Re-exports all Pydantic models:
    from pinboard.models import ImageRecord, UserRecord, ProfileRecord, FeedItem
    from pinboard.models import AuthEventType, ErrorKind
"""

from pinboard.models.auth_models import (
    AuthErrorCode,
    AuthEvent,
    AuthResult,
    AuthSession,
    ValidationResult,
)
from pinboard.models.enums import AuthEventType, ErrorKind
from pinboard.models.feed import DEFAULT_USERNAME, FeedItem
from pinboard.models.image import ImageRecord, NewImage
from pinboard.models.profile import ProfileRecord
from pinboard.models.service_models import (
    AvatarUpload,
    ProfileView,
    ServiceResult,
    SetupRpcResult,
    UploadRequest,
)
from pinboard.models.user import UserRecord

__all__ = [
    "AuthErrorCode",
    "AuthEvent",
    "AuthEventType",
    "AuthResult",
    "AuthSession",
    "AvatarUpload",
    "DEFAULT_USERNAME",
    "ErrorKind",
    "FeedItem",
    "ImageRecord",
    "NewImage",
    "ProfileRecord",
    "ProfileView",
    "ServiceResult",
    "SetupRpcResult",
    "UploadRequest",
    "UserRecord",
    "ValidationResult",
]
