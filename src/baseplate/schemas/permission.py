from .base import BaseSchema


class PermissionResponse(BaseSchema):
    id: int
    name: str
    label: str
