"""Customer-success assignment endpoints."""
import uuid
from unittest.mock import MagicMock

import pytest

from src.baseplate.schemas.auth import RefreshContextRequest
from src.baseplate.services.auth_context_service import AuthContextService

API = "/api/v1/customer-success-assignments"

CUSTOMER_MANAGEMENT = ["CustomerManagement:listCustomers", "CustomerManagement:editCustomer"]


@pytest.fixture
async def admin(seeded, make_user):
    return await make_user(email="admin@example.com", is_superadmin=True)


@pytest.fixture
async def agent(seeded, make_user):
    return await make_user(email="cs@example.com", is_customer_success=True)


async def test_assign_and_list(client, admin, agent, make_customer, auth_headers):
    acme = await make_customer("Acme")

    created = await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(acme.id)}, headers=auth_headers(admin)
    )
    listed = await client.get(API, params={"user_id": str(agent.id)}, headers=auth_headers(admin))

    assert created.status_code == 201
    assert created.json()["customer_id"] == str(acme.id)
    assert [a["id"] for a in listed.json()] == [created.json()["id"]]


async def test_assignment_opens_customer_context(client, admin, agent, make_customer, auth_headers, db_session):
    acme = await make_customer("Acme")
    await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(acme.id)}, headers=auth_headers(admin)
    )
    supabase = MagicMock()
    supabase.auth.admin.update_user_by_id.return_value = MagicMock(user=MagicMock())

    result = await AuthContextService(supabase).refresh_context(
        db_session, agent, RefreshContextRequest(customer_id=str(acme.id))
    )

    assert result.updated is True


async def test_duplicate_assignment(client, admin, agent, make_customer, auth_headers):
    acme = await make_customer("Acme")
    body = {"user_id": str(agent.id), "customer_id": str(acme.id)}

    await client.post(API, json=body, headers=auth_headers(admin))
    response = await client.post(API, json=body, headers=auth_headers(admin))

    assert response.status_code == 409


async def test_only_customer_success_users_can_be_assigned(client, admin, make_user, make_customer, auth_headers):
    acme = await make_customer("Acme")
    regular = await make_user()

    response = await client.post(
        API, json={"user_id": str(regular.id), "customer_id": str(acme.id)}, headers=auth_headers(admin)
    )

    assert response.status_code == 400


async def test_unknown_customer(client, admin, agent, auth_headers):
    response = await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(uuid.uuid4())}, headers=auth_headers(admin)
    )

    assert response.status_code == 404


async def test_customer_success_cannot_assign_itself(client, agent, make_customer, auth_headers):
    acme = await make_customer("Acme")

    response = await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(acme.id)}, headers=auth_headers(agent)
    )

    assert response.status_code == 403


async def test_customer_manager_limited_to_own_customer(
    client, agent, make_role, make_user, make_customer, auth_headers
):
    acme = await make_customer("Acme")
    globex = await make_customer("Globex")
    manager = await make_user(role=await make_role("Customer Manager", CUSTOMER_MANAGEMENT), customer=acme)

    foreign = await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(globex.id)}, headers=auth_headers(manager)
    )
    own = await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(acme.id)}, headers=auth_headers(manager)
    )
    listed = await client.get(API, params={"customer_id": str(globex.id)}, headers=auth_headers(manager))

    assert foreign.status_code == 403
    assert foreign.json()["reason"] == "customer_denied"
    assert own.status_code == 201
    assert listed.status_code == 403


async def test_remove_assignment(client, admin, agent, make_customer, auth_headers):
    acme = await make_customer("Acme")
    created = await client.post(
        API, json={"user_id": str(agent.id), "customer_id": str(acme.id)}, headers=auth_headers(admin)
    )

    response = await client.delete(f"{API}/{created.json()['id']}", headers=auth_headers(admin))
    listed = await client.get(API, headers=auth_headers(admin))

    assert response.status_code == 200
    assert listed.json() == []


async def test_remove_missing_assignment(client, admin, auth_headers):
    response = await client.delete(f"{API}/{uuid.uuid4()}", headers=auth_headers(admin))

    assert response.status_code == 404
