from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status

from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.permissions import require_permissions
from src.baseplate.db.session import SessionDep
from src.baseplate.schemas.base import MessageResponse
from src.baseplate.schemas.role import (
    RoleCreate,
    RolePermissionsUpdate,
    RolePermissionsUpdateResponse,
    RoleResponse,
    RoleUpdate,
)
from src.baseplate.services.role_service import role_service

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def read_roles(
    context: Annotated[ActingContext, Depends(require_permissions("roles:list", "RoleManagement:viewRoles"))],
    db: SessionDep,
    search: Optional[str] = None,
) -> list[RoleResponse]:
    """List roles with their permissions and user counts."""
    return await role_service.list_roles(db, search=search)


@router.get("/{role_id}", response_model=RoleResponse)
async def read_role(
    role_id: int,
    context: Annotated[ActingContext, Depends(require_permissions("roles:read", "RoleManagement:viewRoles"))],
    db: SessionDep,
) -> RoleResponse:
    return await role_service.get_role(db, role_id)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    role_in: RoleCreate,
    context: Annotated[ActingContext, Depends(require_permissions("roles:create", "RoleManagement:createRoles"))],
    db: SessionDep,
) -> RoleResponse:
    """Create a custom role."""
    return await role_service.create_role(db, role_in)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    role_in: RoleUpdate,
    context: Annotated[ActingContext, Depends(require_permissions("roles:update", "RoleManagement:editRoles"))],
    db: SessionDep,
) -> RoleResponse:
    return await role_service.update_role(db, role_id, role_in)


@router.put("/{role_id}/permissions", response_model=RolePermissionsUpdateResponse)
async def update_role_permissions(
    role_id: int,
    permissions_in: RolePermissionsUpdate,
    context: Annotated[ActingContext, Depends(require_permissions("roles:update_permissions", "RoleManagement:editRoles"))],
    db: SessionDep,
) -> RolePermissionsUpdateResponse:
    """Replace the permissions of a custom role."""
    role = await role_service.update_role_permissions(db, role_id, permissions_in.permission_names)
    return RolePermissionsUpdateResponse(
        message=f"Permissions updated for role ID {role_id}",
        count=len(role.permissions),
    )


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: int,
    context: Annotated[ActingContext, Depends(require_permissions("roles:delete", "RoleManagement:deleteRoles"))],
    db: SessionDep,
) -> MessageResponse:
    """Delete a custom role that no user holds."""
    await role_service.delete_role(db, role_id)
    return MessageResponse(message=f"Role {role_id} deleted")
