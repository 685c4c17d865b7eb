from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from src.baseplate.api.auth_deps import ActingContextDep, get_current_user
from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.permissions import require_permissions
from src.baseplate.db.session import SessionDep
from src.baseplate.models.core import User
from src.baseplate.schemas.user import (
    ActingContextResponse,
    UserPublic,
    UserResponse,
    UserStatusUpdate,
    UserUpdate,
)
from src.baseplate.services.user_service import user_service

router = APIRouter()

VIEW_USERS = "UserManagement:viewUsers"
EDIT_USER = "UserManagement:editUser"


@router.get("/me", response_model=ActingContextResponse, dependencies=[Depends(get_current_user)])
async def read_user_me(context: ActingContextDep) -> ActingContextResponse:
    """Get the acting user and customer of the current request."""
    return ActingContextResponse(
        user=UserPublic.model_validate(context.effective_user),
        real_user=UserPublic.model_validate(context.real_user),
        is_impersonating=context.is_impersonating,
        effective_customer_id=context.effective_customer_id,
        requested_customer_id=context.requested_customer_id,
    )


@router.get("", response_model=list[UserResponse])
async def read_users(
    context: Annotated[ActingContext, Depends(require_permissions("users:list", VIEW_USERS))],
    db: SessionDep,
    skip: int = 0,
    limit: int = 100,
) -> list[User]:
    """Get users of the effective customer; system administrators without one see everyone."""
    return await user_service.list_users(db, context, skip=skip, limit=limit)


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(
    user_id: UUID,
    context: Annotated[ActingContext, Depends(require_permissions("users:read", VIEW_USERS))],
    db: SessionDep,
) -> User:
    """Get a specific user."""
    return await user_service.get_user(db, context, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    context: Annotated[ActingContext, Depends(require_permissions("users:update", EDIT_USER))],
    db: SessionDep,
) -> User:
    """Edit a user: display name and role assignment."""
    return await user_service.update_user(db, context, user_id, user_in)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: UUID,
    status_in: UserStatusUpdate,
    context: Annotated[ActingContext, Depends(require_permissions("users:update_status", EDIT_USER))],
    db: SessionDep,
) -> User:
    """Change the status of a user. Users are never hard deleted."""
    return await user_service.update_status(db, context, user_id, status_in.status)
