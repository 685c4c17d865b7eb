from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.crud.base import CRUDBase
from src.baseplate.models.core import User
from src.baseplate.schemas.enums import UserStatus


class CRUDUser(CRUDBase[User]):
    """CRUD operations for user management."""

    async def get_by_auth_uid(self, db: AsyncSession, *, auth_uid: str) -> Optional[User]:
        """Get a user by identity-provider subject."""
        stmt = select(User).where(User.auth_uid == auth_uid)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email."""
        stmt = select(User).where(User.email == email)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_multi_for_customer(
        self,
        db: AsyncSession,
        *,
        customer_id: Optional[UUID],
        skip: int = 0,
        limit: int = 100,
    ) -> list[User]:
        """List users of one customer, or every user when no customer is given."""
        stmt = select(User).where(User.deleted_at.is_(None))
        if customer_id is not None:
            stmt = stmt.where(User.customer_id == customer_id)
        stmt = stmt.order_by(User.email).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def update(self, db: AsyncSession, *, db_obj: User, values: dict) -> User:
        for field, value in values.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def set_status(self, db: AsyncSession, *, db_obj: User, status: UserStatus) -> User:
        """Soft status transition."""
        db_obj.status = status.value
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj


user = CRUDUser(User)
