"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from pinboard.models.enums import ErrorKind

T = TypeVar("T")

__all__ = [
    "AvatarUpload",
    "ProfileView",
    "ServiceResult",
    "SetupRpcResult",
    "UploadRequest",
]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, giving views a single contract:
    check ``success``, then read ``data`` or show ``error``.
    ``error_kind`` tells the view whether the failure blocks the page
    (auth, storage setup) or belongs inline (upload, validation).
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind) -> "ServiceResult[T]":
        return cls(success=False, error=error, error_kind=kind)


class SetupRpcResult(BaseModel):
    """Shape both storage setup RPCs must return."""

    success: bool = False
    message: Optional[str] = None


class UploadRequest(BaseModel):
    """Form contents of the create-pin view."""

    filename: str = ""
    content: bytes = b""
    content_type: str = ""
    title: str = ""
    description: str = ""
    is_public: bool = True

    @property
    def extension(self) -> str:
        """File extension without the dot, as the last dotted segment."""
        return self.filename.rsplit(".", 1)[-1] if "." in self.filename else ""


class AvatarUpload(BaseModel):
    """A new avatar picked in the edit-profile modal."""

    filename: str
    content: bytes
    content_type: str


class ProfileView(BaseModel):
    """Everything the profile header needs: identity, user row, profile row."""

    user_id: str
    email: Optional[str] = None
    display_name: str = ""
    description: str = ""
    avatar_url: Optional[str] = None
    has_profile: bool = False
    pin_count: int = Field(default=0, ge=0)
