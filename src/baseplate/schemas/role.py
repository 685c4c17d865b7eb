from typing import Optional

from pydantic import BaseModel, Field

from .base import BaseSchema


class RoleCreate(BaseModel):
    """Schema for creating a custom role."""
    name: str = Field(min_length=1)
    description: Optional[str] = None


class RoleUpdate(BaseModel):
    """Schema for updating a custom role."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class RolePermissionsUpdate(BaseModel):
    """Replace the permission set of a role, by permission name."""
    permission_names: list[str]


class RoleResponse(BaseSchema):
    id: int
    name: str
    description: Optional[str] = None
    is_system_role: bool
    permissions: list[str] = []
    user_count: int = 0


class RolePermissionsUpdateResponse(BaseSchema):
    message: str
    count: int
