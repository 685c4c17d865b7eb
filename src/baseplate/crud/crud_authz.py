"""Read-only lookups used by the authentication and permission guards."""
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.crud.crud_customer import customer as crud_customer
from src.baseplate.crud.crud_role import role as crud_role
from src.baseplate.crud.crud_user import user as crud_user
from src.baseplate.models.core import Customer, User
from src.baseplate.models.role import Role
from src.baseplate.utils.validation import parse_uuid


class AuthorizationStore:
    """Point reads against the role/permission/customer tables.

    Ids arriving from token claims are strings; malformed ids resolve to
    ``None`` instead of reaching the database.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_user_by_id(self, user_id: Any) -> Optional[User]:
        parsed = parse_uuid(user_id)
        if parsed is None:
            return None
        return await crud_user.get(self.db, id=parsed)

    async def find_user_by_auth_uid(self, auth_uid: str) -> Optional[User]:
        return await crud_user.get_by_auth_uid(self.db, auth_uid=auth_uid)

    async def find_role_by_id(self, role_id: int) -> Optional[Role]:
        return await crud_role.get_with_permissions(self.db, id=role_id)

    async def find_customer_by_id(self, customer_id: Any) -> Optional[Customer]:
        parsed = parse_uuid(customer_id)
        if parsed is None:
            return None
        return await crud_customer.get(self.db, id=parsed)

    async def is_customer_success_assigned(self, user_id: Any, customer_id: Any) -> bool:
        parsed_user, parsed_customer = parse_uuid(user_id), parse_uuid(customer_id)
        if parsed_user is None or parsed_customer is None:
            return False
        return await crud_customer.is_customer_success_assigned(
            self.db, user_id=parsed_user, customer_id=parsed_customer
        )
