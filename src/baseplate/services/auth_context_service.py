import logging
import time
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession
from supabase import Client, create_client

from src.baseplate.core.config import settings
from src.baseplate.core.exceptions import Forbidden
from src.baseplate.core.system_roles import (
    is_customer_success,
    is_system_administrator,
)
from src.baseplate.crud.crud_authz import AuthorizationStore
from src.baseplate.models.core import User
from src.baseplate.schemas.auth import RefreshContextRequest, RefreshContextResponse
from src.baseplate.schemas.enums import UserStatus
from src.baseplate.utils.validation import parse_uuid


def get_supabase_admin_client() -> Client:
    """Supabase client authenticated with the service role key."""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)


class AuthContextService:
    """Validates and writes the customer / impersonation claims of a user.

    The claims live in Supabase ``app_metadata``; this is the only code path
    that sets them. Clients refresh their session afterwards to receive a
    token carrying the new claims.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.logger = logging.getLogger(__name__)

    async def refresh_context(
        self, db: AsyncSession, user: User, requested: RefreshContextRequest
    ) -> RefreshContextResponse:
        """Validate the requested context and store it in app_metadata.

        Args:
            db: Database session
            user: Authenticated (real, not impersonated) user
            requested: Requested customer and impersonation target

        Returns:
            RefreshContextResponse: Confirmation; the client must refresh its session

        Raises:
            Forbidden: If the user may not use the requested context or Supabase rejects the update
        """
        if not user.auth_uid:
            raise Forbidden("User not found or not authenticated", reason="user_not_found")

        store = AuthorizationStore(db)

        validated_customer_id: Optional[str] = None
        validated_customer_ids: list[str] = []
        if requested.customer_id:
            await self._validate_customer_access(store, user, requested.customer_id)
            validated_customer_id = requested.customer_id
            if is_system_administrator(user):
                validated_customer_ids = [requested.customer_id]

        validated_impersonated_user_id: Optional[str] = None
        if requested.impersonated_user_id:
            await self._validate_impersonation_access(store, user, requested.impersonated_user_id)
            validated_impersonated_user_id = requested.impersonated_user_id

        await self._update_app_metadata(
            user,
            {
                "customer_id": validated_customer_id,
                "customer_ids": validated_customer_ids,
                "impersonated_user_id": validated_impersonated_user_id,
                "impersonation_allowed": is_system_administrator(user) or is_customer_success(user),
                "context_validated_at": int(time.time() * 1000),
            },
        )
        self.logger.info(
            f"Context updated for user {user.id}: customer={validated_customer_id}, "
            f"impersonation={validated_impersonated_user_id}"
        )
        return RefreshContextResponse(
            updated=True,
            message="Context updated successfully. Please refresh your session.",
        )

    async def clear_context(self, user: User) -> RefreshContextResponse:
        if not user.auth_uid:
            raise Forbidden("User not found or not authenticated", reason="user_not_found")
        await self._update_app_metadata(
            user,
            {
                "customer_id": None,
                "customer_ids": [],
                "impersonated_user_id": None,
                "impersonation_allowed": False,
                "context_validated_at": None,
            },
        )
        self.logger.info(f"Context cleared for user {user.id}")
        return RefreshContextResponse(
            updated=True,
            message="Context cleared. Please refresh your session.",
        )

    async def _update_app_metadata(self, user: User, app_metadata: dict[str, Any]) -> None:
        try:
            response = await run_in_threadpool(
                self.supabase.auth.admin.update_user_by_id,
                user.auth_uid,
                {"app_metadata": app_metadata},
            )
        except Exception as e:
            self.logger.error(f"Failed to update app_metadata for user {user.id}: {str(e)}")
            raise Forbidden("Failed to update user context")

        if not response or not response.user:
            self.logger.error(f"Supabase returned no user for app_metadata update of {user.id}")
            raise Forbidden("Failed to retrieve updated user")

    async def _validate_customer_access(
        self, store: AuthorizationStore, user: User, customer_id: str
    ) -> None:
        if is_system_administrator(user):
            if await store.find_customer_by_id(customer_id) is None:
                raise Forbidden("Customer does not exist", reason="customer_not_found")
            return

        if is_customer_success(user):
            assigned = await store.is_customer_success_assigned(user.id, customer_id)
            if not assigned and user.customer_id != parse_uuid(customer_id):
                raise Forbidden("You do not have access to this customer", reason="customer_denied")
            return

        # customer administrators and regular users alike
        if user.customer_id is None or user.customer_id != parse_uuid(customer_id):
            raise Forbidden("You can only access your own customer", reason="customer_denied")

    async def _validate_impersonation_access(
        self, store: AuthorizationStore, user: User, target_user_id: str
    ) -> None:
        if not is_system_administrator(user) and not is_customer_success(user):
            raise Forbidden("No impersonation permissions", reason="impersonation_denied")

        target = await store.find_user_by_id(target_user_id)
        if target is None:
            raise Forbidden("Target user not found", reason="impersonation_denied")
        if is_system_administrator(target):
            raise Forbidden("Cannot impersonate system administrator", reason="impersonation_denied")
        if target.id == user.id:
            raise Forbidden("Cannot impersonate yourself", reason="impersonation_denied")
        if is_customer_success(user) and not is_system_administrator(user):
            if target.customer_id != user.customer_id:
                raise Forbidden(
                    "Cannot impersonate users from other customers", reason="impersonation_denied"
                )
        if target.status != UserStatus.ACTIVE.value:
            raise Forbidden("Cannot impersonate inactive user", reason="impersonation_denied")
