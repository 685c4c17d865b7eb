from fastapi import APIRouter

from src.baseplate.api.api_v1.endpoints import (
    auth,
    customer_success,
    role_permissions,
    roles,
    system_modules,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(role_permissions.router, prefix="/role-permissions", tags=["role-permissions"])
api_router.include_router(
    customer_success.router, prefix="/customer-success-assignments", tags=["customer-success"]
)
api_router.include_router(system_modules.router, prefix="/system-modules", tags=["system-modules"])
