import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import pytest

from skillharbor.features.auth.exceptions import AuthenticationFailure, SessionCorruption
from skillharbor.features.auth.principal import Principal
from skillharbor.features.auth.session import SessionManager, authenticate_user
from skillharbor.features.auth.session_store import FileSessionStore, InMemorySessionStore
from skillharbor.features.permissions.catalog import Permission, Role
from skillharbor.features.permissions.registry import resolve_permissions
from skillharbor.features.users.passwords import hash_password


NOW = datetime(2024, 6, 1, 8, 0, 5, 123000, tzinfo=timezone.utc)


@dataclass
class FakeUser:
    id: str
    email: str
    name: str
    password_hash: str
    role: str
    department: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class FakeUserStore:
    def __init__(self, *users: FakeUser):
        self.users = {user.email: user for user in users}
        self.logins = []

    async def get_by_email(self, email: str) -> Optional[FakeUser]:
        return self.users.get(email.strip().lower())

    async def record_login(self, user_id: str, when: datetime) -> None:
        self.logins.append((user_id, when))


def fake_user(email="sarah.johnson@example.com", password="employee-password", role="employee", **overrides):
    fields = dict(
        id="01HX0000000000000000000001",
        email=email,
        name="Sarah Johnson",
        password_hash=hash_password(password),
        role=role,
        department="Design",
        is_active=True,
        created_at=datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return FakeUser(**fields)


@pytest.fixture
def user_store():
    return FakeUserStore(
        fake_user(),
        fake_user(email="john.smith@example.com", password="lead-password", role="team_lead",
                  id="01HX0000000000000000000002", name="John Smith"),
        fake_user(email="former@example.com", password="former-password", is_active=False,
                  id="01HX0000000000000000000003"),
        fake_user(email="ghost@example.com", password="ghost-password", role="superuser",
                  id="01HX0000000000000000000004"),
    )


@pytest.fixture
def sessions(user_store):
    return SessionManager(user_store, InMemorySessionStore(), clock=lambda: NOW)


async def test_authenticate_builds_principal_from_registry(user_store):
    principal = await authenticate_user(user_store, "john.smith@example.com", "lead-password", clock=lambda: NOW)

    assert principal.role is Role.TEAM_LEAD
    assert principal.permissions == resolve_permissions(Role.TEAM_LEAD)
    assert principal.last_login == NOW
    assert principal.is_active
    assert user_store.logins == [("01HX0000000000000000000002", NOW)]


@pytest.mark.parametrize(
    "email, password, reason",
    [
        ("nobody@example.com", "whatever", "unknown_email"),
        ("former@example.com", "former-password", "inactive"),
        ("sarah.johnson@example.com", "wrong-password", "bad_credential"),
        ("ghost@example.com", "ghost-password", "unknown_role"),
    ],
)
async def test_authenticate_failures_share_one_message(user_store, email, password, reason):
    with pytest.raises(AuthenticationFailure) as excinfo:
        await authenticate_user(user_store, email, password)

    assert excinfo.value.reason == reason
    assert str(excinfo.value) == "Invalid credentials"
    assert excinfo.value.code == "INVALID_CREDENTIALS"
    assert user_store.logins == []


async def test_session_survives_restart(user_store, sessions):
    principal = await sessions.authenticate("sarah.johnson@example.com", "employee-password")

    # A new manager over the same store stands in for a restarted process
    restarted = SessionManager(user_store, sessions.session_store)
    restored = restarted.restore_session()

    assert restored == principal
    assert restored.last_login == NOW
    assert restored.created_at == principal.created_at
    assert restarted.principal == principal


async def test_failed_login_keeps_previous_session(sessions):
    principal = await sessions.authenticate("sarah.johnson@example.com", "employee-password")
    with pytest.raises(AuthenticationFailure):
        await sessions.authenticate("john.smith@example.com", "nope")

    assert sessions.principal == principal
    assert sessions.restore_session() == principal


async def test_end_session_clears_store(sessions):
    await sessions.authenticate("sarah.johnson@example.com", "employee-password")
    sessions.end_session()

    assert sessions.principal is None
    assert sessions.session_store.get() is None
    assert sessions.restore_session() is None


def test_end_session_without_session_is_a_noop(sessions):
    sessions.end_session()
    sessions.end_session()
    assert sessions.restore_session() is None


def test_restore_with_nothing_stored(sessions):
    assert sessions.restore_session() is None
    assert sessions.principal is None


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"id": "x"}),
        "[]",
    ],
)
def test_corrupted_snapshot_is_discarded(user_store, raw):
    store = InMemorySessionStore(raw)
    sessions = SessionManager(user_store, store)

    assert sessions.restore_session() is None
    assert store.get() is None


def test_snapshot_with_unknown_permission_is_discarded(user_store, principal_factory):
    data = json.loads(principal_factory().to_snapshot())
    data["permissions"].append("launch_rockets")
    store = InMemorySessionStore(json.dumps(data))

    assert SessionManager(user_store, store).restore_session() is None
    assert store.get() is None


def test_snapshot_with_unknown_role_is_discarded(user_store, principal_factory):
    data = json.loads(principal_factory().to_snapshot())
    data["role"] = "superuser"
    store = InMemorySessionStore(json.dumps(data))

    assert SessionManager(user_store, store).restore_session() is None


def test_snapshot_keeps_permissions_as_issued(principal_factory):
    # Restoring does not re-derive permissions from the role
    principal = principal_factory(Role.ADMIN, permissions=(Permission.VIEW_OWN_PROFILE,))
    restored = Principal.from_snapshot(principal.to_snapshot())
    assert restored.permissions == (Permission.VIEW_OWN_PROFILE,)


def test_snapshot_uses_iso_timestamps(principal_factory):
    data = json.loads(principal_factory().to_snapshot())
    assert data["created_at"].startswith("2024-01-15T09:30:00")
    assert data["last_login"].startswith("2024-06-01T08:00:05")
    assert data["role"] == "employee"
    assert data["permissions"][0] == "view_own_profile"


def test_from_claims_rejects_garbage():
    with pytest.raises(SessionCorruption):
        Principal.from_claims(None)
    with pytest.raises(SessionCorruption):
        Principal.from_claims({"id": "x", "email": "x@example.com"})


def test_file_store_round_trip(tmp_path, principal_factory):
    store = FileSessionStore(tmp_path / "nested" / "session.json")
    assert store.get() is None

    snapshot = principal_factory().to_snapshot()
    store.set(snapshot)
    assert store.get() == snapshot
    assert list(store.path.parent.glob(".session-*")) == []

    store.clear()
    assert store.get() is None
    store.clear()


async def test_file_store_session_survives_restart(tmp_path, user_store):
    path = tmp_path / "session.json"
    first = SessionManager(user_store, FileSessionStore(path), clock=lambda: NOW)
    principal = await first.authenticate("john.smith@example.com", "lead-password")

    second = SessionManager(user_store, FileSessionStore(path))
    assert second.restore_session() == principal

    second.end_session()
    assert not path.exists()


def test_unreadable_file_store_is_discarded(tmp_path, user_store):
    path = tmp_path / "session.json"
    path.mkdir()
    sessions = SessionManager(user_store, FileSessionStore(path))

    assert sessions.restore_session() is None


def test_undecodable_file_store_is_discarded(tmp_path, user_store):
    path = tmp_path / "session.json"
    path.write_bytes(b'{"id": "\xff\xfe truncated')
    sessions = SessionManager(user_store, FileSessionStore(path))

    assert sessions.restore_session() is None
    assert not path.exists()


@pytest.mark.parametrize(
    "field, value",
    [
        ("is_active", "yes"),
        ("created_at", 1705311000),
        ("permissions", "view_own_profile"),
        ("id", 42),
    ],
)
def test_mistyped_snapshot_is_discarded(user_store, principal_factory, field, value):
    data = json.loads(principal_factory().to_snapshot())
    data[field] = value
    store = InMemorySessionStore(json.dumps(data))

    assert SessionManager(user_store, store).restore_session() is None
    assert store.get() is None


def test_inactive_snapshot_is_discarded(user_store, principal_factory):
    store = InMemorySessionStore(principal_factory(is_active=False).to_snapshot())
    sessions = SessionManager(user_store, store)

    assert sessions.restore_session() is None
    assert sessions.principal is None
    assert store.get() is None
