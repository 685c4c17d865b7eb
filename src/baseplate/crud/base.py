from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.models.base import Base

SQLModelType = TypeVar("SQLModelType", bound=Base)


class CRUDBase(Generic[SQLModelType]):
    def __init__(self, sql_model: Type[SQLModelType]):
        """
        CRUD object with default read methods shared by the stores.
        **Parameters**
        * `sql_model`: A SQLAlchemy model class
        """
        self.sql_model = sql_model

    async def exists(self, db: AsyncSession, *, id: Any) -> bool:
        """Check if an object exists."""
        stmt = select(self.sql_model.id).where(self.sql_model.id == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count(self, db: AsyncSession) -> int:
        """Count all objects."""
        stmt = select(func.count()).select_from(self.sql_model)
        result = await db.execute(stmt)
        return result.scalar_one()

    async def get(self, db: AsyncSession, *, id: Any) -> Optional[SQLModelType]:
        """Get a single object by ID."""
        stmt = select(self.sql_model).where(self.sql_model.id == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100
    ) -> list[SQLModelType]:
        """Get multiple objects."""
        stmt = select(self.sql_model).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_key(self, db: AsyncSession, *, key_field: str, key_value: Any) -> Optional[SQLModelType]:
        """Get by key field and value"""
        stmt = select(self.sql_model).where(getattr(self.sql_model, key_field) == key_value)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()
