"""Static registry of system modules and the permissions they expose.

The registry is read from ``system_modules.yaml`` once, at import time, and
exposed as an immutable tuple. It feeds permission seeding and the
customer-success allowlist of the permission guard.
"""
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict
from yaml import safe_load

logger = logging.getLogger(__name__)

MODULES_FILE = Path(__file__).with_name("system_modules.yaml")

USER_MANAGEMENT_MODULE = "UserManagement"
CUSTOMER_MANAGEMENT_MODULE = "CustomerManagement"
ROLE_MANAGEMENT_MODULE = "RoleManagement"
DOCUMENTS_MODULE = "Documents"


def permission_name(module: str, action: str) -> str:
    return f"{module}:{action}"


class SystemModulePermission(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    order: int


class SystemModule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    enabled: bool = False
    permissions: tuple[SystemModulePermission, ...] = ()

    @property
    def permission_names(self) -> frozenset[str]:
        return frozenset(p.name for p in self.permissions)


def load_system_modules(path: Path = MODULES_FILE) -> tuple[SystemModule, ...]:
    """Parse a module definition file into frozen ``SystemModule`` objects.

    Permission names are built from the module name and the action, and
    ``order`` follows the position inside the module.
    """
    with open(path, "r") as f:
        raw = safe_load(f) or {}

    modules = []
    for module in raw.get("modules", []):
        permissions = tuple(
            SystemModulePermission(
                name=permission_name(module["name"], perm["action"]),
                label=perm["label"],
                order=index,
            )
            for index, perm in enumerate(module.get("permissions") or [], start=1)
        )
        modules.append(
            SystemModule(
                name=module["name"],
                label=module["label"],
                enabled=module.get("enabled", False),
                permissions=permissions,
            )
        )
    logger.info(f"Loaded {len(modules)} system modules from {path}")
    return tuple(modules)


SYSTEM_MODULES: tuple[SystemModule, ...] = load_system_modules()


def list_enabled_modules() -> list[SystemModule]:
    return [module for module in SYSTEM_MODULES if module.enabled]


def find_module_by_name(name: str) -> Optional[SystemModule]:
    return next((module for module in SYSTEM_MODULES if module.name == name), None)


def all_permissions() -> list[SystemModulePermission]:
    """Every permission of every module, enabled or not, in registry order."""
    return [perm for module in SYSTEM_MODULES for perm in module.permissions]


def user_management_permission_names() -> frozenset[str]:
    module = find_module_by_name(USER_MANAGEMENT_MODULE)
    return module.permission_names if module else frozenset()
