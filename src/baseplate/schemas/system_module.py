from pydantic import BaseModel


class SystemModulePermissionResponse(BaseModel):
    name: str
    label: str
    order: int


class SystemModuleResponse(BaseModel):
    name: str
    label: str
    enabled: bool
    permissions: list[SystemModulePermissionResponse]
