import os
import tempfile
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timezone
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="skillharbor-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'test.db'}"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["JWT_SECRET"] = "test-secret-key-for-tests-please-change"
os.environ["SESSION_FILE"] = str(_TEST_DIR / "session.json")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from skillharbor.core.database.engine import AsyncSessionLocal, drop_db, init_db
from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission, Role
from skillharbor.features.permissions.registry import resolve_permissions
from skillharbor.features.users.models import User
from skillharbor.features.users.passwords import hash_password
from skillharbor.main import app


# email -> (name, role, department, password, is_active)
SEEDED_USERS = {
    "admin@skillharbor.io": ("Ada Admin", Role.ADMIN, "IT", "admin-password", True),
    "hr@skillharbor.io": ("Harriet HR", Role.HR_MANAGER, "Human Resources", "hr-password", True),
    "lead@skillharbor.io": ("John Smith", Role.TEAM_LEAD, "Engineering", "lead-password", True),
    "employee@skillharbor.io": ("Sarah Johnson", Role.EMPLOYEE, "Design", "employee-password", True),
    "other@skillharbor.io": ("Omar Other", Role.EMPLOYEE, "Design", "other-password", True),
    "former@skillharbor.io": ("Former Employee", Role.EMPLOYEE, "Design", "former-password", False),
}


def make_principal(
    role: Role = Role.EMPLOYEE,
    email: str = "sarah.johnson@example.com",
    permissions: tuple[Permission, ...] | None = None,
    **overrides,
) -> Principal:
    fields = dict(
        id="01HZZZZZZZZZZZZZZZZZZZZZZZ",
        email=email,
        name="Sarah Johnson",
        role=role,
        department="Design",
        permissions=resolve_permissions(role) if permissions is None else permissions,
        is_active=True,
        created_at=datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc),
        last_login=datetime(2024, 6, 1, 8, 0, 5, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return Principal(**fields)


@pytest.fixture
def principal_factory() -> Callable[..., Principal]:
    return make_principal


@pytest_asyncio.fixture
async def seeded_users() -> AsyncIterator[dict[str, str]]:
    """Fresh schema with SEEDED_USERS; yields email -> user id."""
    await drop_db()
    await init_db()
    ids = {}
    async with AsyncSessionLocal() as db:
        for email, (name, role, department, password, is_active) in SEEDED_USERS.items():
            user = User(
                email=email,
                name=name,
                role=role.value,
                department=department,
                password_hash=hash_password(password),
                is_active=is_active,
            )
            db.add(user)
            await db.flush()
            ids[email] = user.id
        await db.commit()
    yield ids
    await drop_db()


@pytest_asyncio.fixture
async def client(seeded_users) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def login(client: AsyncClient) -> Callable:
    """Log a seeded user in; returns Authorization headers."""

    async def _login(email: str) -> dict[str, str]:
        password = SEEDED_USERS[email][3]
        response = await client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
