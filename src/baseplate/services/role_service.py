import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.core.config import settings
from src.baseplate.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from src.baseplate.crud.crud_role import permission as crud_permission
from src.baseplate.crud.crud_role import role as crud_role
from src.baseplate.models.role import Permission, Role
from src.baseplate.schemas.role import RoleCreate, RoleResponse, RoleUpdate


def is_system_role(role: Role) -> bool:
    """System roles are flagged, or sit inside the reserved id range."""
    return bool(role.is_system_role) or role.id <= settings.SYSTEM_ROLE_MAX_ID


def to_response(role: Role, user_count: int = 0) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description,
        is_system_role=is_system_role(role),
        permissions=sorted(permission.name for permission in role.permissions),
        user_count=user_count,
    )


class RoleService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def _get_or_404(self, db: AsyncSession, role_id: int) -> Role:
        role = await crud_role.get_with_permissions(db, id=role_id)
        if not role:
            raise NotFound("Role not found")
        return role

    def _ensure_mutable(self, role: Role, action: str) -> None:
        if is_system_role(role):
            self.logger.warning(f"Refused to {action} system role {role.id} ({role.name})")
            raise Forbidden(
                f'Cannot {action} system role "{role.name}". System roles are protected.',
                reason="system_role",
            )

    async def list_roles(self, db: AsyncSession, search: Optional[str] = None) -> list[RoleResponse]:
        roles = await crud_role.get_multi_with_permissions(db, search=search)
        return [
            to_response(role, await crud_role.count_users(db, role_id=role.id))
            for role in roles
        ]

    async def get_role(self, db: AsyncSession, role_id: int) -> RoleResponse:
        role = await self._get_or_404(db, role_id)
        return to_response(role, await crud_role.count_users(db, role_id=role.id))

    async def list_permissions(self, db: AsyncSession) -> list[Permission]:
        return await crud_permission.get_all(db)

    async def get_role_permissions(self, db: AsyncSession, role_id: int) -> list[Permission]:
        role = await self._get_or_404(db, role_id)
        return sorted(role.permissions, key=lambda permission: permission.id)

    async def create_role(self, db: AsyncSession, role_in: RoleCreate) -> RoleResponse:
        if await crud_role.get_by_name(db, name=role_in.name):
            raise Conflict("Role with name already exists")
        role = await crud_role.create(db, name=role_in.name, description=role_in.description)
        self.logger.info(f"Created custom role {role.id} ({role.name})")
        return to_response(role)

    async def update_role(self, db: AsyncSession, role_id: int, role_in: RoleUpdate) -> RoleResponse:
        role = await self._get_or_404(db, role_id)
        self._ensure_mutable(role, "modify")

        values = role_in.model_dump(exclude_unset=True)
        if values.get("name") and values["name"] != role.name:
            if await crud_role.get_by_name(db, name=values["name"]):
                raise Conflict("Role with name already exists")
        role = await crud_role.update(db, db_obj=role, values=values)
        return to_response(role, await crud_role.count_users(db, role_id=role.id))

    async def update_role_permissions(
        self, db: AsyncSession, role_id: int, permission_names: list[str]
    ) -> Role:
        """Replace the permissions of a custom role by permission name.

        Raises:
            NotFound: If the role does not exist
            Forbidden: If the role is a system role
            BadRequest: If any permission name is unknown
        """
        role = await self._get_or_404(db, role_id)
        self._ensure_mutable(role, "modify permissions for")

        names = list(dict.fromkeys(permission_names))
        permissions = await crud_permission.get_by_names(db, names=names)
        found = {permission.name for permission in permissions}
        missing = [name for name in names if name not in found]
        if missing:
            raise BadRequest(f"Invalid permission names: {', '.join(missing)}")

        role = await crud_role.replace_permissions(db, role_id=role_id, permissions=permissions)
        self.logger.info(f"Permissions updated for role {role_id}: {sorted(found)}")
        return role

    async def delete_role(self, db: AsyncSession, role_id: int) -> None:
        role = await self._get_or_404(db, role_id)
        self._ensure_mutable(role, "delete")

        user_count = await crud_role.count_users(db, role_id=role_id)
        if user_count:
            raise Conflict(f"Role is assigned to {user_count} user(s) and cannot be deleted")

        await crud_role.remove(db, db_obj=role)
        self.logger.info(f"Deleted role {role_id} ({role.name})")


role_service = RoleService()
