import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.exceptions import BadRequest, Forbidden, NotFound
from src.baseplate.core.system_roles import is_system_administrator
from src.baseplate.crud.crud_role import role as crud_role
from src.baseplate.crud.crud_user import user as crud_user
from src.baseplate.models.core import User
from src.baseplate.schemas.enums import UserStatus
from src.baseplate.schemas.user import UserUpdate
from src.baseplate.services.role_service import is_system_role

logger = logging.getLogger(__name__)

CUSTOMER_REQUIRED = "customer_required"


def scoped_customer_id(context: ActingContext) -> Optional[UUID]:
    """Customer that bounds what the acting user may see.

    ``None`` means every customer, which only system administrators get.
    Anyone else without an effective customer is refused.
    """
    if context.effective_customer_id is not None:
        return context.effective_customer_id
    if context.effective_user is not None and is_system_administrator(context.effective_user):
        return None
    logger.warning(f"Refused cross-customer access for {context.identity_label}: no customer selected")
    raise Forbidden("Access denied: no customer selected", reason=CUSTOMER_REQUIRED)


def ensure_in_scope(context: ActingContext, target: User) -> None:
    """Users outside the acting customer are reported as missing."""
    customer_id = scoped_customer_id(context)
    if customer_id is not None and target.customer_id != customer_id:
        raise NotFound("User not found")


class UserService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def list_users(
        self, db: AsyncSession, context: ActingContext, skip: int = 0, limit: int = 100
    ) -> list[User]:
        return await crud_user.get_multi_for_customer(
            db, customer_id=scoped_customer_id(context), skip=skip, limit=limit
        )

    async def get_user(self, db: AsyncSession, context: ActingContext, user_id: UUID) -> User:
        user = await crud_user.get(db, id=user_id)
        if not user or user.deleted_at is not None:
            raise NotFound("User not found")
        ensure_in_scope(context, user)
        return user

    async def update_user(
        self, db: AsyncSession, context: ActingContext, user_id: UUID, user_in: UserUpdate
    ) -> User:
        """Edit a user of the acting customer, including role assignment.

        Raises:
            NotFound: If the user does not exist or is outside the acting customer
            BadRequest: If the role does not exist
            Forbidden: If a non system administrator assigns a system role, or
                users change their own role
        """
        user = await self.get_user(db, context, user_id)
        values = user_in.model_dump(exclude_unset=True)

        if "role_id" in values and values["role_id"] != user.role_id:
            if context.effective_user is not None and user.id == context.effective_user.id:
                raise Forbidden("Users cannot change their own role", reason="self_role_change")
            if values["role_id"] is not None:
                role = await crud_role.get(db, id=values["role_id"])
                if role is None:
                    raise BadRequest(f"Role {values['role_id']} does not exist")
                if is_system_role(role) and not is_system_administrator(context.effective_user):
                    self.logger.warning(
                        f"{context.identity_label} tried to assign system role {role.id} to user {user.id}"
                    )
                    raise Forbidden(
                        "Only system administrators can assign system roles", reason="system_role"
                    )

        user = await crud_user.update(db, db_obj=user, values=values)
        self.logger.info(f"User {user.id} updated by {context.identity_label}: {sorted(values)}")
        return user

    async def update_status(
        self, db: AsyncSession, context: ActingContext, user_id: UUID, status: UserStatus
    ) -> User:
        user = await self.get_user(db, context, user_id)
        if context.effective_user is not None and user.id == context.effective_user.id:
            raise Forbidden("Users cannot change their own status", reason="self_status_change")
        return await crud_user.set_status(db, db_obj=user, status=status)


user_service = UserService()
