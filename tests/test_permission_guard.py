import uuid

import pytest
from sqlalchemy.exc import OperationalError

from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.exceptions import Forbidden, ServiceUnavailable
from src.baseplate.core.permissions import (
    DEFAULT_RULES,
    NO_PERMISSIONS,
    NO_ROLE,
    PERMISSION_MISMATCH,
    ROLE_NOT_FOUND,
    STORE_ERROR,
    USER_NOT_FOUND,
    AccessRule,
    PermissionGuard,
)
from src.baseplate.core.system_roles import (
    CUSTOMER_ADMINISTRATOR_ROLE_ID,
    CUSTOMER_SUCCESS_ROLE_ID,
    SYSTEM_ADMINISTRATOR_ROLE_ID,
)
from src.baseplate.crud.crud_authz import AuthorizationStore


def _context(user, customer_id=None, impersonating=False) -> ActingContext:
    if customer_id is None and user is not None:
        customer_id = user.customer_id
    return ActingContext(
        effective_user=user,
        effective_customer_id=customer_id,
        is_impersonating=impersonating,
        real_user=user,
    )


@pytest.fixture
def guard(seeded):
    return PermissionGuard(AuthorizationStore(seeded))


class FailingStore(AuthorizationStore):
    async def find_role_by_id(self, role_id):
        raise OperationalError("SELECT roles", {}, Exception("connection refused"))

    async def find_customer_by_id(self, customer_id):
        raise OperationalError("SELECT customers", {}, Exception("connection refused"))


def test_rule_order():
    assert [rule.name for rule in DEFAULT_RULES] == [
        "superadmin",
        "customer_success",
        "customer_owner",
        "system_admin_wildcard",
    ]


async def test_empty_requirements_always_allow(guard):
    decision = await guard.check(set(), _context(None))
    assert decision.allowed
    assert decision.rule == "no_permissions_required"


async def test_missing_user_is_denied(guard):
    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:viewArticles"}, _context(None))
    assert exc_info.value.reason == USER_NOT_FOUND
    assert exc_info.value.status_code == 403


async def test_superadmin_allowed_for_anything(guard, make_user):
    user = await make_user(is_superadmin=True)

    decision = await guard.check({"UserManagement:deleteUser"}, _context(user))

    assert decision.rule == "superadmin"


@pytest.mark.parametrize(
    "required, allowed",
    [
        ({"Documents:createArticles"}, True),
        ({"UserManagement:inviteUser"}, True),
        ({"CustomerManagement:deleteCustomer", "Documents:viewCategories"}, True),
        ({"CustomerManagement:deleteCustomer"}, False),
        ({"RoleManagement:editRoles"}, False),
    ],
)
async def test_customer_success_scope(guard, make_user, required, allowed):
    user = await make_user(is_customer_success=True)

    if allowed:
        decision = await guard.check(required, _context(user))
        assert decision.rule == "customer_success"
    else:
        with pytest.raises(Forbidden) as exc_info:
            await guard.check(required, _context(user))
        assert exc_info.value.reason == NO_ROLE


async def test_customer_owner_allowed_without_role(guard, make_user, make_customer):
    user = await make_user()
    customer = await make_customer(owner=user)
    user.customer_id = customer.id

    decision = await guard.check({"RoleManagement:deleteRoles"}, _context(user))

    assert decision.rule == "customer_owner"


async def test_owner_check_uses_claimed_customer(guard, make_user, make_customer):
    user = await make_user()
    owned = await make_customer("C1", owner=user)
    foreign = await make_customer("C2")
    user.customer_id = foreign.id

    decision = await guard.check({"Documents:editArticles"}, _context(user, customer_id=owned.id))

    assert decision.rule == "customer_owner"


async def test_owner_of_stored_customer_is_not_owner_of_claimed_one(guard, make_user, make_customer):
    user = await make_user()
    owned = await make_customer("C2", owner=user)
    foreign = await make_customer("C1")
    user.customer_id = owned.id

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:editArticles"}, _context(user, customer_id=foreign.id))
    assert exc_info.value.reason == NO_ROLE


async def test_no_role_assigned(guard, make_user):
    user = await make_user()

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:viewArticles"}, _context(user))

    assert exc_info.value.reason == NO_ROLE
    assert exc_info.value.detail == "Access denied: user has no role assigned"


async def test_role_not_found(guard, make_user):
    user = await make_user(role_id=4242)

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:viewArticles"}, _context(user))

    assert exc_info.value.reason == ROLE_NOT_FOUND


async def test_role_without_permissions(guard, make_user, make_role):
    role = await make_role("Empty", [])
    user = await make_user(role=role)

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:viewArticles"}, _context(user))

    assert exc_info.value.reason == NO_PERMISSIONS


async def test_role_permission_grants_access(guard, make_user, make_role):
    role = await make_role("Editor", ["Documents:viewArticles", "Documents:editArticles"])
    user = await make_user(role=role)

    decision = await guard.check({"Documents:editArticles", "Documents:deleteArticles"}, _context(user))

    assert decision.rule == "role_permission"


async def test_editor_missing_permission(guard, make_user, make_role):
    role = await make_role("Editor", ["Documents:viewArticles"])
    user = await make_user(email="editor@example.com", role=role)

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:editArticles"}, _context(user))

    assert exc_info.value.reason == PERMISSION_MISMATCH
    assert exc_info.value.detail == (
        "Access denied for user (editor@example.com): "
        "missing required permission(s): Documents:editArticles"
    )


async def test_denial_names_impersonated_identity(guard, make_user, make_role):
    role = await make_role("Viewer", ["Documents:viewArticles"])
    target = await make_user(email="target@example.com", role=role)

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"UserManagement:editUser"}, _context(target, impersonating=True))

    assert "impersonated user (target@example.com)" in exc_info.value.detail


async def test_impersonated_user_attributes_decide(guard, make_user, make_role):
    role = await make_role("Viewer", ["Documents:viewArticles"])
    admin = await make_user(is_superadmin=True)
    target = await make_user(role=role)
    context = ActingContext(
        effective_user=target,
        effective_customer_id=None,
        is_impersonating=True,
        real_user=admin,
    )

    with pytest.raises(Forbidden):
        await guard.check({"UserManagement:deleteUser"}, context)


async def test_role_wildcard_permission(guard, make_user, make_role, seeded):
    from src.baseplate.models.role import Permission

    seeded.add(Permission(name="*", label="Everything"))
    await seeded.commit()
    role = await make_role("Everything", ["*"])
    user = await make_user(role=role)

    decision = await guard.check({"CustomerManagement:deleteCustomer"}, _context(user))

    assert decision.rule == "role_permission"


async def test_wildcard_requirement_for_system_admin(guard, make_user, seeded):
    from src.baseplate.models.role import Role

    role = await seeded.get(Role, SYSTEM_ADMINISTRATOR_ROLE_ID)
    user = await make_user(role=role)

    decision = await guard.check({"*"}, _context(user))

    assert decision.rule == "system_admin_wildcard"


async def test_wildcard_requirement_denied_for_customer_user(guard, make_user, make_role, make_customer):
    role = await make_role("Editor", ["Documents:viewArticles"])
    customer = await make_customer()
    user = await make_user(role=role, customer=customer)

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"*"}, _context(user))

    assert exc_info.value.reason == PERMISSION_MISMATCH


@pytest.mark.parametrize("role_id", [CUSTOMER_SUCCESS_ROLE_ID, CUSTOMER_ADMINISTRATOR_ROLE_ID])
async def test_wildcard_requirement_denied_for_other_system_roles(guard, make_user, role_id):
    user = await make_user(role_id=role_id)

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"*"}, _context(user))

    assert exc_info.value.reason == NO_PERMISSIONS


async def test_custom_rule_order(seeded, make_user):
    async def never(guard, required, context):
        return False

    async def always(guard, required, context):
        return True

    user = await make_user()
    guard = PermissionGuard(
        AuthorizationStore(seeded),
        rules=(AccessRule("never", never), AccessRule("always", always)),
    )

    decision = await guard.check({"Documents:viewArticles"}, _context(user))

    assert decision.rule == "always"


async def test_store_error_denies_by_default(seeded, make_user):
    user = await make_user(role_id=200, customer_id=uuid.uuid4())
    guard = PermissionGuard(FailingStore(seeded), store_error_policy="deny")

    with pytest.raises(Forbidden) as exc_info:
        await guard.check({"Documents:viewArticles"}, _context(user))

    assert exc_info.value.reason == STORE_ERROR


async def test_store_error_unavailable_policy(seeded, make_user):
    user = await make_user(role_id=200)
    guard = PermissionGuard(FailingStore(seeded), store_error_policy="unavailable")

    with pytest.raises(ServiceUnavailable) as exc_info:
        await guard.check({"Documents:viewArticles"}, _context(user))

    assert exc_info.value.status_code == 503
