from typing import Annotated

from fastapi import APIRouter, Depends
from supabase import Client

from src.baseplate.api.auth_deps import CurrentUser
from src.baseplate.db.session import SessionDep
from src.baseplate.schemas.auth import RefreshContextRequest, RefreshContextResponse
from src.baseplate.services.auth_context_service import AuthContextService, get_supabase_admin_client

router = APIRouter()


def get_auth_context_service(
    supabase: Annotated[Client, Depends(get_supabase_admin_client)],
) -> AuthContextService:
    return AuthContextService(supabase)


AuthContextServiceDep = Annotated[AuthContextService, Depends(get_auth_context_service)]


@router.post("/context", response_model=RefreshContextResponse)
async def refresh_context(
    context_in: RefreshContextRequest,
    current_user: CurrentUser,
    db: SessionDep,
    service: AuthContextServiceDep,
) -> RefreshContextResponse:
    """
    Validate and store the customer / impersonation context of the caller.
    The client must refresh its Supabase session to receive the new claims.
    Validation always uses the real user, never an impersonated one.
    """
    return await service.refresh_context(db, current_user, context_in)


@router.delete("/context", response_model=RefreshContextResponse)
async def clear_context(
    current_user: CurrentUser,
    service: AuthContextServiceDep,
) -> RefreshContextResponse:
    """Drop customer selection and impersonation from the caller's claims."""
    return await service.clear_context(current_user)
