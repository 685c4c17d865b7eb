from enum import Enum


class UserStatus(str, Enum):
    """Lifecycle status of a user. Users are never physically deleted."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    INVITED = "invited"
    SUSPENDED = "suspended"


# Statuses that are refused at authentication time
BLOCKED_STATUSES = frozenset({UserStatus.INACTIVE.value, UserStatus.SUSPENDED.value})
