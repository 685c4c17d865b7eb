from .base import Base
from .core import User, Customer, CustomerSuccessOwnedCustomer
from .role import Role, Permission
from .role_permission import RolePermission

__all__ = [
    "Base",
    "User",
    "Customer",
    "CustomerSuccessOwnedCustomer",
    "Role",
    "Permission",
    "RolePermission",
]
