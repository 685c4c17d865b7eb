"""Authentication dependencies for FastAPI endpoints."""
import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.baseplate.core.auth_context import (
    ActingContext,
    AuthenticatedRequest,
    resolve_acting_context,
)
from src.baseplate.core.config import settings
from src.baseplate.core.exceptions import InvalidToken, Unauthenticated
from src.baseplate.crud.crud_authz import AuthorizationStore
from src.baseplate.db.session import SessionDep
from src.baseplate.models.core import User
from src.baseplate.schemas.auth import TokenClaims
from src.baseplate.schemas.enums import BLOCKED_STATUSES
from src.baseplate.services.token_service import TokenDecoder

logger = logging.getLogger(__name__)
bearer_scheme = HTTPBearer(auto_error=False)

token_decoder = TokenDecoder()


def get_token_decoder() -> TokenDecoder:
    return token_decoder


async def _load_impersonated_user(
    claims: TokenClaims, current_user: Optional[User], store: AuthorizationStore
) -> Optional[User]:
    """Target of an active impersonation, if the token carries a usable marker."""
    metadata = claims.app_metadata
    if not metadata.impersonated_user_id or current_user is None:
        return None
    if not metadata.impersonation_allowed:
        logger.warning(
            f"Ignoring impersonation marker for user {current_user.id}: impersonation not allowed"
        )
        return None

    target = await store.find_user_by_id(metadata.impersonated_user_id)
    if target is None:
        logger.warning(f"Impersonated user {metadata.impersonated_user_id} not found, acting as self")
        return None
    if target.deleted_at is not None or target.status in BLOCKED_STATUSES:
        logger.warning(
            f"Impersonated user {target.id} is deleted or {target.status}, "
            f"user {current_user.id} acts as self"
        )
        return None
    return target


async def get_authenticated_request(
    request: Request,
    db: SessionDep,
    decoder: Annotated[TokenDecoder, Depends(get_token_decoder)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> AuthenticatedRequest:
    """Verify the bearer token and load the local user behind it."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("Authorization header missing or invalid")

    try:
        claims = decoder.verify_and_decode(credentials.credentials)
    except InvalidToken as e:
        raise Unauthenticated(str(e))

    store = AuthorizationStore(db)
    current_user = await store.find_user_by_auth_uid(claims.subject)

    if current_user is None:
        logger.warning(f"Token subject {claims.subject} has no local user record")
    else:
        if current_user.deleted_at is not None:
            logger.warning(f"Rejected deleted user {current_user.id}")
            raise Unauthenticated("User not found")
        if current_user.status in BLOCKED_STATUSES:
            logger.warning(f"Rejected user {current_user.id} with status {current_user.status}")
            raise Unauthenticated("User is not active. Please contact support.")

    impersonated_user = await _load_impersonated_user(claims, current_user, store)
    auth = AuthenticatedRequest(
        claims=claims,
        current_user=current_user,
        impersonated_user=impersonated_user,
        is_impersonating=impersonated_user is not None,
    )
    request.state.auth = auth
    request.state.current_user = current_user
    return auth


async def get_acting_context(
    request: Request,
    auth: Annotated[AuthenticatedRequest, Depends(get_authenticated_request)],
) -> ActingContext:
    """Effective user and customer for the request."""
    context = resolve_acting_context(
        auth, requested_customer_id=request.headers.get(settings.CUSTOMER_CONTEXT_HEADER)
    )
    request.state.acting_context = context
    return context


async def get_current_user(
    auth: Annotated[AuthenticatedRequest, Depends(get_authenticated_request)],
) -> User:
    """Authenticated user with a local record; routes that need one use this."""
    if auth.current_user is None:
        raise Unauthenticated("User not registered in application")
    return auth.current_user


# Type aliases for dependencies
Authenticated = Annotated[AuthenticatedRequest, Depends(get_authenticated_request)]
ActingContextDep = Annotated[ActingContext, Depends(get_acting_context)]
CurrentUser = Annotated[User, Depends(get_current_user)]
