"""
Session lifecycle: turning credentials into a Principal, and keeping that
Principal across restarts through a SessionStore.
"""
from datetime import datetime, timezone
from typing import Callable, Optional

from skillharbor.features.auth.exceptions import AuthenticationFailure, SessionCorruption
from skillharbor.features.auth.principal import Principal
from skillharbor.features.auth.session_store import SessionStore
from skillharbor.features.permissions.catalog import parse_role
from skillharbor.features.permissions.registry import resolve_permissions
from skillharbor.features.users.passwords import verify_password
from skillharbor.features.users.store import UserStore
from skillharbor.utils import get_logger


log = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def authenticate_user(
    user_store: UserStore,
    email: str,
    credential: str,
    clock: Callable[[], datetime] = utcnow,
) -> Principal:
    """
    Verify credentials and build a Principal.

    Single attempt, no retries. On success the user's last login is stamped in
    the store and the Principal carries a copy of the role's permissions as
    registered right now.

    Raises:
        AuthenticationFailure: unknown email, inactive account, wrong
            credential, or a role the registry does not know
    """
    record = await user_store.get_by_email(email)
    if record is None:
        log.info(f"Login failed for {email!r}: no such user")
        raise AuthenticationFailure("unknown_email", email)

    if not record.is_active:
        log.info(f"Login failed for {email!r}: account {record.id} is inactive")
        raise AuthenticationFailure("inactive", email)

    if not verify_password(credential, record.password_hash):
        log.info(f"Login failed for {email!r}: bad credential")
        raise AuthenticationFailure("bad_credential", email)

    role = parse_role(record.role)
    if role is None:
        log.error(f"Login failed for {email!r}: user {record.id} has unknown role {record.role!r}")
        raise AuthenticationFailure("unknown_role", email)

    now = clock()
    await user_store.record_login(record.id, now)

    principal = Principal(
        id=record.id,
        email=record.email,
        name=record.name,
        role=role,
        department=record.department or "",
        permissions=resolve_permissions(role),
        is_active=record.is_active,
        created_at=record.created_at,
        last_login=now,
    )
    log.info(f"User {principal.id} logged in as {principal.role.value}")
    return principal


class SessionManager:
    """
    Owns the current Principal for one client session.

    Usage:
        sessions = SessionManager(SqlUserStore(db), FileSessionStore(path))
        principal = sessions.restore_session()
        if principal is None:
            principal = await sessions.authenticate(email, password)
    """

    def __init__(
        self,
        user_store: UserStore,
        session_store: SessionStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.user_store = user_store
        self.session_store = session_store
        self.clock = clock
        self.principal: Optional[Principal] = None

    async def authenticate(self, email: str, credential: str) -> Principal:
        """
        Log in and persist the new session, replacing any previous snapshot.

        Raises:
            AuthenticationFailure: see authenticate_user()
        """
        principal = await authenticate_user(self.user_store, email, credential, self.clock)
        self.session_store.set(principal.to_snapshot())
        self.principal = principal
        return principal

    def restore_session(self) -> Optional[Principal]:
        """
        Load the persisted session.

        Returns None when nothing is stored. A snapshot that cannot be read or
        parsed, or that belongs to an inactive account, is cleared and also
        yields None.
        """
        try:
            raw = self.session_store.get()
        except (OSError, UnicodeDecodeError) as e:
            log.warning(f"Session store unreadable, discarding session: {e}")
            self._discard()
            return None

        if raw is None:
            self.principal = None
            return None

        try:
            principal = Principal.from_snapshot(raw)
        except SessionCorruption as e:
            log.warning(f"Discarding corrupted session snapshot: {e}")
            self._discard()
            return None

        # Login never issues a principal for an inactive account
        if not principal.is_active:
            log.warning(f"Discarding session snapshot of inactive user {principal.id}")
            self._discard()
            return None

        self.principal = principal
        return principal

    def end_session(self, principal: Optional[Principal] = None) -> None:
        """Log out. Safe to call when no session exists."""
        principal = principal or self.principal
        self.session_store.clear()
        self.principal = None
        if principal is not None:
            log.info(f"User {principal.id} logged out")

    def _discard(self) -> None:
        self.principal = None
        try:
            self.session_store.clear()
        except OSError as e:
            log.error(f"Could not clear session store: {e}")
