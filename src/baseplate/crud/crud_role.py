from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.baseplate.core.config import settings
from src.baseplate.crud.base import CRUDBase
from src.baseplate.models.core import User
from src.baseplate.models.role import Permission, Role
from src.baseplate.models.role_permission import RolePermission


class CRUDRole(CRUDBase[Role]):
    """CRUD operations for roles and their permission sets."""

    async def get_with_permissions(
        self, db: AsyncSession, *, id: int, refresh: bool = False
    ) -> Optional[Role]:
        """Get a role with its permissions loaded.

        ``refresh`` overwrites an instance already held by the session, which
        is needed after the permission set changed.
        """
        stmt = select(Role).options(selectinload(Role.permissions)).where(Role.id == id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_multi_with_permissions(
        self, db: AsyncSession, *, search: Optional[str] = None
    ) -> list[Role]:
        stmt = select(Role).options(selectinload(Role.permissions)).order_by(Role.id)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(Role.name.ilike(pattern) | Role.description.ilike(pattern))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_users(self, db: AsyncSession, *, role_id: int) -> int:
        stmt = select(func.count()).select_from(User).where(User.role_id == role_id)
        result = await db.execute(stmt)
        return result.scalar_one()

    async def next_custom_id(self, db: AsyncSession) -> int:
        """Next free id above the reserved system range."""
        result = await db.execute(select(func.max(Role.id)))
        current_max = result.scalar_one_or_none() or 0
        return max(current_max, settings.CUSTOM_ROLE_ID_START - 1) + 1

    async def create(
        self, db: AsyncSession, *, name: str, description: Optional[str] = None
    ) -> Role:
        """Create a custom role. System roles are only created by seeding."""
        role = Role(
            id=await self.next_custom_id(db),
            name=name,
            description=description,
            is_system_role=False,
        )
        db.add(role)
        await db.commit()
        return await self.get_with_permissions(db, id=role.id)

    async def update(self, db: AsyncSession, *, db_obj: Role, values: dict) -> Role:
        for field, value in values.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.commit()
        return await self.get_with_permissions(db, id=db_obj.id)

    async def replace_permissions(
        self, db: AsyncSession, *, role_id: int, permissions: list[Permission]
    ) -> Role:
        """Replace the permission set of a role in a single transaction."""
        await db.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
        db.add_all(
            RolePermission(role_id=role_id, permission_id=permission.id)
            for permission in permissions
        )
        await db.commit()
        return await self.get_with_permissions(db, id=role_id, refresh=True)

    async def remove(self, db: AsyncSession, *, db_obj: Role) -> Role:
        await db.delete(db_obj)
        await db.commit()
        return db_obj


class CRUDPermission(CRUDBase[Permission]):
    """Read access to the permission reference table."""

    async def get_all(self, db: AsyncSession) -> list[Permission]:
        stmt = select(Permission).order_by(Permission.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_names(self, db: AsyncSession, *, names: list[str]) -> list[Permission]:
        if not names:
            return []
        stmt = select(Permission).where(Permission.name.in_(names))
        result = await db.execute(stmt)
        return list(result.scalars().all())


role = CRUDRole(Role)
permission = CRUDPermission(Permission)
