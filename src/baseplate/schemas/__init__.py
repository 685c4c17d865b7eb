from .base import BaseSchema, TimestampSchema, IDSchema, BaseResponseSchema, MessageResponse
from .enums import UserStatus
from .user import UserPublic, UserResponse, UserStatusUpdate, UserUpdate, ActingContextResponse
from .role import RoleCreate, RoleUpdate, RolePermissionsUpdate, RoleResponse, RolePermissionsUpdateResponse
from .auth import AppMetadata, TokenClaims, RefreshContextRequest, RefreshContextResponse
from .system_module import SystemModuleResponse, SystemModulePermissionResponse
from .customer import CustomerSuccessAssignmentCreate, CustomerSuccessAssignmentResponse
from .permission import PermissionResponse
