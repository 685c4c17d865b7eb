import pytest

from src.baseplate.core.permissions import PermissionRegistry, permission_registry


def test_register_and_lookup():
    registry = PermissionRegistry()
    registry.register("articles:edit", ["Documents:editArticles", "Documents:viewArticles"])

    assert registry.required_for("articles:edit") == frozenset(
        {"Documents:editArticles", "Documents:viewArticles"}
    )


def test_unknown_route_requires_nothing():
    assert PermissionRegistry().required_for("nope") == frozenset()


def test_same_declaration_twice_is_accepted():
    registry = PermissionRegistry()
    registry.register("articles:edit", ["Documents:editArticles"])
    registry.register("articles:edit", ["Documents:editArticles"])

    assert len(registry.routes) == 1


def test_conflicting_declaration_is_rejected():
    registry = PermissionRegistry()
    registry.register("articles:edit", ["Documents:editArticles"])

    with pytest.raises(ValueError):
        registry.register("articles:edit", ["Documents:deleteArticles"])


def test_frozen_registry_rejects_new_routes():
    registry = PermissionRegistry()
    registry.freeze()

    with pytest.raises(RuntimeError):
        registry.register("articles:edit", ["Documents:editArticles"])


def test_routes_view_is_read_only():
    registry = PermissionRegistry()
    registry.register("articles:edit", ["Documents:editArticles"])

    with pytest.raises(TypeError):
        registry.routes["articles:delete"] = frozenset()


def test_application_routes_are_registered_and_frozen(client):
    assert permission_registry.required_for("users:list") == frozenset({"UserManagement:viewUsers"})
    assert "roles:create" in permission_registry.routes
    with pytest.raises(RuntimeError):
        permission_registry.register("late:route", ["Documents:viewArticles"])
