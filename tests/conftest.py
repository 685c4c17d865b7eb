"""Pytest fixtures for API testing."""
import os
import time
import uuid

# Settings are validated at import time
TEST_JWT_SECRET = "test-supabase-jwt-secret-0123456789abcdef"
os.environ["SUPABASE_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.baseplate.crud.crud_role import role as crud_role
from src.baseplate.db.init_db import seed
from src.baseplate.db.session import get_db
from src.baseplate.main import app
from src.baseplate.models import Base, Customer, Permission, Role, RolePermission, User
from src.baseplate.schemas.enums import UserStatus

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Test client with database override."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seeded(db_session):
    """Permissions from the module registry and the three system roles."""
    await seed(db_session)
    return db_session


@pytest.fixture
def make_token():
    """Mint Supabase-shaped access tokens signed with the test secret."""
    def _make_token(
        sub: str,
        app_metadata: dict | None = None,
        expires_in: int = 3600,
        secret: str = TEST_JWT_SECRET,
        audience: str = "authenticated",
        **claims,
    ) -> str:
        now = int(time.time())
        payload = {
            "sub": sub,
            "aud": audience,
            "iat": now,
            "exp": now + expires_in,
            "email": claims.pop("email", f"{sub}@example.com"),
            "app_metadata": app_metadata or {},
            "user_metadata": claims.pop("user_metadata", {"full_name": "Test User"}),
            **claims,
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def auth_headers(make_token):
    def _auth_headers(user: User, **kwargs) -> dict:
        return {"Authorization": f"Bearer {make_token(user.auth_uid, **kwargs)}"}

    return _auth_headers


@pytest.fixture
def make_customer(db_session):
    async def _make_customer(name: str = "Acme", owner: User | None = None) -> Customer:
        customer = Customer(name=name, owner_id=owner.id if owner else None)
        db_session.add(customer)
        await db_session.commit()
        return customer

    return _make_customer


@pytest.fixture
def make_role(db_session):
    async def _make_role(name: str, permission_names: list[str], role_id: int | None = None) -> Role:
        role = Role(
            id=role_id or await crud_role.next_custom_id(db_session),
            name=name,
            is_system_role=False,
        )
        db_session.add(role)
        await db_session.flush()
        if permission_names:
            result = await db_session.execute(
                select(Permission).where(Permission.name.in_(permission_names))
            )
            permissions = list(result.scalars().all())
            assert len(permissions) == len(set(permission_names)), "unknown permission in fixture"
            db_session.add_all(
                RolePermission(role_id=role.id, permission_id=permission.id)
                for permission in permissions
            )
        await db_session.commit()
        return role

    return _make_role


@pytest.fixture
def grant_permissions(db_session):
    """Attach permissions to an existing role, system roles included."""
    async def _grant(role_id: int, permission_names: list[str]) -> None:
        result = await db_session.execute(
            select(Permission).where(Permission.name.in_(permission_names))
        )
        db_session.add_all(
            RolePermission(role_id=role_id, permission_id=permission.id)
            for permission in result.scalars().all()
        )
        await db_session.commit()

    return _grant


@pytest.fixture
def make_user(db_session):
    async def _make_user(
        email: str | None = None,
        role: Role | None = None,
        customer: Customer | None = None,
        status: UserStatus = UserStatus.ACTIVE,
        **fields,
    ) -> User:
        suffix = uuid.uuid4().hex[:8]
        if role is not None:
            fields["role_id"] = role.id
        if customer is not None:
            fields["customer_id"] = customer.id
        user = User(
            auth_uid=fields.pop("auth_uid", f"auth-{suffix}"),
            email=email or f"user-{suffix}@example.com",
            name=fields.pop("name", "Test User"),
            status=status.value,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user
