import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.core.system_modules import all_permissions
from src.baseplate.core.system_roles import SYSTEM_ROLES
from src.baseplate.db.session import AsyncSessionLocal
from src.baseplate.models.role import Permission, Role

logger = logging.getLogger(__name__)


async def _upsert_permissions(db: AsyncSession) -> int:
    """Create permissions from the system module registry, keyed by name.

    Existing rows keep their id; only the label is refreshed.

    Returns:
        int: Number of permissions created
    """
    result = await db.execute(select(Permission))
    existing = {permission.name: permission for permission in result.scalars().all()}

    created = 0
    for module_permission in all_permissions():
        permission = existing.get(module_permission.name)
        if permission is None:
            db.add(Permission(name=module_permission.name, label=module_permission.label))
            created += 1
            logger.info(f"Created permission: {module_permission.name}")
        elif permission.label != module_permission.label:
            permission.label = module_permission.label
            logger.info(f"Updated permission label: {module_permission.name}")
    await db.flush()
    return created


async def _create_system_roles(db: AsyncSession) -> None:
    """Create system roles if they don't exist."""
    for role_id, role_name, description in SYSTEM_ROLES:
        role = await db.get(Role, role_id)
        if role is None:
            db.add(Role(id=role_id, name=role_name, description=description, is_system_role=True))
            logger.info(f"Created system role: {role_name} with id: {role_id}")
        else:
            logger.info(f"System role already exists: {role_name} - skipping")
    await db.flush()


async def seed(db: AsyncSession) -> None:
    """Seed reference data. Safe to run repeatedly."""
    created = await _upsert_permissions(db)
    await _create_system_roles(db)
    await db.commit()
    logger.info(f"Seeding finished, {created} new permission(s)")


async def init_db() -> None:
    """Initialize the database with seed data."""
    async with AsyncSessionLocal() as db:
        try:
            await seed(db)
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            await db.rollback()
            raise


def main() -> None:
    """Main function to run database initialization."""
    try:
        asyncio.run(init_db())
        print("✅ Database initialization completed successfully!")
    except Exception as e:
        print(f"❌ Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
