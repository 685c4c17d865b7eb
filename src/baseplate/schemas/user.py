from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from .base import BaseSchema, BaseResponseSchema
from .enums import UserStatus


class UserPublic(BaseSchema):
    """Public user schema without identity-provider fields."""
    id: UUID
    name: Optional[str] = None
    email: str
    role_id: Optional[int] = None
    customer_id: Optional[UUID] = None
    status: UserStatus


class UserResponse(UserPublic, BaseResponseSchema):
    """Schema for user response."""
    is_superadmin: bool = False
    is_customer_success: bool = False
    deleted_at: Optional[datetime] = None


class UserStatusUpdate(BaseModel):
    """Schema for a status transition."""
    status: UserStatus


class ActingContextResponse(BaseSchema):
    """Who is acting on the current request, and for which customer."""
    user: UserPublic
    real_user: UserPublic
    is_impersonating: bool
    effective_customer_id: Optional[UUID] = None
    requested_customer_id: Optional[str] = None


class UserUpdate(BaseModel):
    """Admin edit of a user. ``role_id`` set to null removes the role."""
    name: Optional[str] = None
    role_id: Optional[int] = None
