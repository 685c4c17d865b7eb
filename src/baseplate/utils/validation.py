import uuid
from typing import Any, Optional


def is_valid_uuid(uuid_string: str) -> bool:
    try:
        uuid.UUID(uuid_string)
    except (TypeError, ValueError, AttributeError):
        return False
    return True


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return ``value`` as a UUID, or None when it is empty or malformed."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    if not is_valid_uuid(value):
        return None
    return uuid.UUID(value)
