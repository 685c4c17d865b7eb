from fastapi import APIRouter

from src.baseplate.api.auth_deps import Authenticated
from src.baseplate.core.system_modules import list_enabled_modules
from src.baseplate.schemas.system_module import SystemModuleResponse

router = APIRouter()


@router.get("", response_model=list[SystemModuleResponse])
async def read_system_modules(auth: Authenticated) -> list[SystemModuleResponse]:
    """Enabled system modules and their permissions."""
    return [
        SystemModuleResponse.model_validate(module.model_dump())
        for module in list_enabled_modules()
    ]
