"""Roles shipped with the system. Their ids are fixed and they cannot be edited."""
from src.baseplate.models.core import User

SYSTEM_ADMINISTRATOR_ROLE_ID = 1
CUSTOMER_SUCCESS_ROLE_ID = 2
CUSTOMER_ADMINISTRATOR_ROLE_ID = 3

SYSTEM_ROLES: list[tuple[int, str, str]] = [
    (SYSTEM_ADMINISTRATOR_ROLE_ID, "System Administrator", "Role with full system access and control"),
    (CUSTOMER_SUCCESS_ROLE_ID, "Customer Success", "Role focused on ensuring customer satisfaction and retention"),
    (CUSTOMER_ADMINISTRATOR_ROLE_ID, "Customer Administrator", "Role for managing customer-specific configurations and settings"),
]


def is_system_administrator(user: User) -> bool:
    return bool(user.is_superadmin) or user.role_id == SYSTEM_ADMINISTRATOR_ROLE_ID


def is_customer_success(user: User) -> bool:
    return bool(user.is_customer_success) or user.role_id == CUSTOMER_SUCCESS_ROLE_ID
