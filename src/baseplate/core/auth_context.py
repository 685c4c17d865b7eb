"""Resolution of the acting user and customer for a request.

The effective user is the impersonated user when an impersonation is active,
the authenticated user otherwise. The effective customer comes from the
verified token claim first, then from the effective user's own customer.
Client supplied customer headers are kept for display only and never take
part in authorization decisions.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from src.baseplate.models.core import User
from src.baseplate.schemas.auth import TokenClaims
from src.baseplate.utils.validation import parse_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedRequest:
    """Output of the authentication guard."""
    claims: TokenClaims
    current_user: Optional[User]
    impersonated_user: Optional[User] = None
    is_impersonating: bool = False


@dataclass(frozen=True)
class ActingContext:
    """Request-scoped acting identity. Never persisted."""
    effective_user: Optional[User]
    effective_customer_id: Optional[UUID]
    is_impersonating: bool
    real_user: Optional[User] = None
    requested_customer_id: Optional[str] = None

    @property
    def identity_label(self) -> str:
        email = self.effective_user.email if self.effective_user else "unknown"
        if self.is_impersonating:
            return f"impersonated user ({email})"
        return f"user ({email})"


def resolve_effective_user(auth: AuthenticatedRequest) -> tuple[Optional[User], bool]:
    if auth.is_impersonating and auth.impersonated_user is not None:
        return auth.impersonated_user, True
    return auth.current_user, False


def resolve_effective_customer_id(
    claims: TokenClaims, effective_user: Optional[User]
) -> Optional[UUID]:
    claimed = claims.app_metadata.customer_id
    if claimed:
        parsed = parse_uuid(claimed)
        if parsed is not None:
            return parsed
        logger.warning(f"Ignoring malformed customer_id claim: {claimed}")
    if effective_user is not None and effective_user.customer_id is not None:
        return effective_user.customer_id
    return None


def resolve_acting_context(
    auth: AuthenticatedRequest, requested_customer_id: Optional[str] = None
) -> ActingContext:
    """Derive the acting context of an authenticated request.

    Args:
        auth: Result of the authentication guard
        requested_customer_id: Customer id sent by the client in a header,
            recorded but not trusted

    Returns:
        ActingContext: effective user, effective customer and impersonation flag
    """
    effective_user, is_impersonating = resolve_effective_user(auth)
    effective_customer_id = resolve_effective_customer_id(auth.claims, effective_user)

    if requested_customer_id and str(effective_customer_id) != requested_customer_id:
        logger.info(
            f"Client requested customer {requested_customer_id}, "
            f"acting on {effective_customer_id} from verified context"
        )

    return ActingContext(
        effective_user=effective_user,
        effective_customer_id=effective_customer_id,
        is_impersonating=is_impersonating,
        real_user=auth.current_user,
        requested_customer_id=requested_customer_id,
    )
