"""Permission guard.

Every guarded route declares the permission names it accepts in
``permission_registry`` under an explicit route key. At request time the
guard looks the key up and decides:

1. no declared permissions: allow;
2. no effective user: deny;
3. the short-circuit rules of ``DEFAULT_RULES``, in order, first match allows;
4. otherwise the effective user's role must hold one of the declared
   permissions (or the ``*`` wildcard).
"""
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Annotated, Awaitable, Callable, Iterable, Mapping, Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from src.baseplate.api.auth_deps import get_acting_context
from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.config import settings
from src.baseplate.core.exceptions import Forbidden, ServiceUnavailable
from src.baseplate.core.system_modules import DOCUMENTS_MODULE, user_management_permission_names
from src.baseplate.core.system_roles import is_system_administrator
from src.baseplate.crud.crud_authz import AuthorizationStore
from src.baseplate.db.session import SessionDep
from src.baseplate.models.core import Customer
from src.baseplate.models.role import Role

logger = logging.getLogger(__name__)

WILDCARD_PERMISSION = "*"
DOCUMENTS_PREFIX = f"{DOCUMENTS_MODULE}:"

# Deny reasons
USER_NOT_FOUND = "user_not_found"
NO_ROLE = "no_role"
ROLE_NOT_FOUND = "role_not_found"
NO_PERMISSIONS = "no_permissions"
PERMISSION_MISMATCH = "permission_mismatch"
STORE_ERROR = "store_error"


class PermissionRegistry:
    """Route key -> accepted permission names, filled while routers are built."""

    def __init__(self):
        self._routes: dict[str, frozenset[str]] = {}
        self._frozen = False

    def register(self, route_key: str, permissions: Iterable[str]) -> frozenset[str]:
        if self._frozen:
            raise RuntimeError(f"Permission registry is frozen, cannot register {route_key}")
        names = frozenset(permissions)
        existing = self._routes.get(route_key)
        if existing is not None and existing != names:
            raise ValueError(f"Route {route_key} already registered with {sorted(existing)}")
        self._routes[route_key] = names
        return names

    def required_for(self, route_key: str) -> frozenset[str]:
        return self._routes.get(route_key, frozenset())

    def freeze(self) -> None:
        self._frozen = True

    @property
    def routes(self) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(self._routes)


permission_registry = PermissionRegistry()


@dataclass(frozen=True)
class Decision:
    allowed: bool
    rule: str
    reason: Optional[str] = None


RulePredicate = Callable[["PermissionGuard", frozenset[str], ActingContext], Awaitable[bool]]


@dataclass(frozen=True)
class AccessRule:
    """A named short-circuit: when ``applies`` is true the request is allowed."""
    name: str
    applies: RulePredicate


async def _is_superadmin(guard: "PermissionGuard", required: frozenset[str], context: ActingContext) -> bool:
    return bool(context.effective_user.is_superadmin)


async def _customer_success_scope(guard: "PermissionGuard", required: frozenset[str], context: ActingContext) -> bool:
    if not context.effective_user.is_customer_success:
        return False
    user_management = user_management_permission_names()
    return any(
        name in user_management or name.startswith(DOCUMENTS_PREFIX)
        for name in required
    )


async def _customer_owner(guard: "PermissionGuard", required: frozenset[str], context: ActingContext) -> bool:
    if context.effective_customer_id is None:
        return False
    customer = await guard.find_customer(context.effective_customer_id)
    return customer is not None and customer.owner_id == context.effective_user.id


async def _system_admin_wildcard(guard: "PermissionGuard", required: frozenset[str], context: ActingContext) -> bool:
    return WILDCARD_PERMISSION in required and is_system_administrator(context.effective_user)


DEFAULT_RULES: tuple[AccessRule, ...] = (
    AccessRule("superadmin", _is_superadmin),
    AccessRule("customer_success", _customer_success_scope),
    AccessRule("customer_owner", _customer_owner),
    AccessRule("system_admin_wildcard", _system_admin_wildcard),
)


class PermissionGuard:
    """Grants or denies access to a route for the acting user."""

    def __init__(
        self,
        store: AuthorizationStore,
        rules: tuple[AccessRule, ...] = DEFAULT_RULES,
        store_error_policy: Optional[str] = None,
    ):
        self.store = store
        self.rules = rules
        self.store_error_policy = store_error_policy or settings.STORE_ERROR_POLICY

    def _store_failure(self, what: str, exc: SQLAlchemyError) -> None:
        logger.error(f"Authorization store failure during {what} lookup: {str(exc)}")
        if self.store_error_policy == "unavailable":
            raise ServiceUnavailable(f"Authorization store unavailable during {what} lookup")
        raise Forbidden(f"Access denied: {what} lookup failed", reason=STORE_ERROR)

    async def find_customer(self, customer_id) -> Optional[Customer]:
        try:
            return await self.store.find_customer_by_id(customer_id)
        except SQLAlchemyError as e:
            self._store_failure("customer", e)

    async def find_role(self, role_id: int) -> Optional[Role]:
        try:
            return await self.store.find_role_by_id(role_id)
        except SQLAlchemyError as e:
            self._store_failure("role", e)

    async def check(self, required: Iterable[str], context: ActingContext) -> Decision:
        """Decide whether the acting user may use a route.

        Args:
            required: Permission names declared by the route; any one suffices
            context: Acting context of the request

        Returns:
            Decision: The allowing decision and the rule that produced it

        Raises:
            Forbidden: If access is denied
            ServiceUnavailable: If a lookup failed and the policy is "unavailable"
        """
        required = frozenset(required)
        if not required:
            return Decision(allowed=True, rule="no_permissions_required")

        user = context.effective_user
        if user is None:
            logger.warning("Permission denied: no effective user for request")
            raise Forbidden("Access denied: user not found", reason=USER_NOT_FOUND)

        for rule in self.rules:
            if await rule.applies(self, required, context):
                logger.info(
                    f"Permission granted to {context.identity_label} [{user.id}] by rule {rule.name}"
                )
                return Decision(allowed=True, rule=rule.name)

        return await self._check_role(required, context)

    async def _check_role(self, required: frozenset[str], context: ActingContext) -> Decision:
        user = context.effective_user
        if user.role_id is None:
            self._deny(context, NO_ROLE)
            raise Forbidden("Access denied: user has no role assigned", reason=NO_ROLE)

        role = await self.find_role(user.role_id)
        if role is None:
            self._deny(context, ROLE_NOT_FOUND)
            raise Forbidden("Access denied: role not found", reason=ROLE_NOT_FOUND)

        granted = {permission.name for permission in role.permissions}
        if not granted:
            self._deny(context, NO_PERMISSIONS)
            raise Forbidden("Access denied: permissions not found", reason=NO_PERMISSIONS)

        if WILDCARD_PERMISSION in granted or granted & required:
            logger.info(f"Permission granted to {context.identity_label} [{user.id}] by role {role.name}")
            return Decision(allowed=True, rule="role_permission")

        missing = sorted(required - granted)
        self._deny(context, PERMISSION_MISMATCH)
        raise Forbidden(
            f"Access denied for {context.identity_label}: "
            f"missing required permission(s): {', '.join(missing)}",
            reason=PERMISSION_MISMATCH,
        )

    @staticmethod
    def _deny(context: ActingContext, reason: str) -> None:
        logger.warning(
            f"Permission denied for {context.identity_label} "
            f"[{context.effective_user.id}]: {reason}"
        )


def require_permissions(route_key: str, *permissions: str):
    """Declare the permissions of a route and return the guarding dependency."""
    permission_registry.register(route_key, permissions)

    async def permission_dependency(
        context: Annotated[ActingContext, Depends(get_acting_context)],
        db: SessionDep,
    ) -> ActingContext:
        guard = PermissionGuard(AuthorizationStore(db))
        await guard.check(permission_registry.required_for(route_key), context)
        return context

    return permission_dependency
