"""Permission catalogue and raw role/permission links, for system administrators only."""
from typing import Annotated

from fastapi import APIRouter, Depends

from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.permissions import WILDCARD_PERMISSION, require_permissions
from src.baseplate.db.session import SessionDep
from src.baseplate.models.role import Permission
from src.baseplate.schemas.permission import PermissionResponse
from src.baseplate.schemas.role import RolePermissionsUpdate, RolePermissionsUpdateResponse
from src.baseplate.services.role_service import role_service

router = APIRouter()


@router.get("/permissions", response_model=list[PermissionResponse])
async def read_permissions(
    context: Annotated[ActingContext, Depends(require_permissions("role_permissions:catalogue", WILDCARD_PERMISSION))],
    db: SessionDep,
) -> list[Permission]:
    """Every permission known to the system, enabled module or not."""
    return await role_service.list_permissions(db)


@router.get("/role/{role_id}", response_model=list[PermissionResponse])
async def read_role_permissions(
    role_id: int,
    context: Annotated[ActingContext, Depends(require_permissions("role_permissions:read", WILDCARD_PERMISSION))],
    db: SessionDep,
) -> list[Permission]:
    return await role_service.get_role_permissions(db, role_id)


@router.put("/role/{role_id}", response_model=RolePermissionsUpdateResponse)
async def replace_role_permissions(
    role_id: int,
    permissions_in: RolePermissionsUpdate,
    context: Annotated[ActingContext, Depends(require_permissions("role_permissions:replace", WILDCARD_PERMISSION))],
    db: SessionDep,
) -> RolePermissionsUpdateResponse:
    """Replace every permission of a custom role."""
    role = await role_service.update_role_permissions(db, role_id, permissions_in.permission_names)
    return RolePermissionsUpdateResponse(
        message=f"Permissions set for role ID {role_id}",
        count=len(role.permissions),
    )
