"""
Command-line session client.

Logs in against the user database directly and keeps the session in
SESSION_FILE, so it survives between invocations.

Usage:
    uv run python -m scripts.session_cli login admin@example.com
    uv run python -m scripts.session_cli whoami
    uv run python -m scripts.session_cli check --resource employees --action view
    uv run python -m scripts.session_cli check --permission manage_users
    uv run python -m scripts.session_cli logout
"""
import argparse
import asyncio
import getpass
import sys

from skillharbor.core import config
from skillharbor.core.database.engine import AsyncSessionLocal, init_db
from skillharbor.features.auth.exceptions import AuthenticationFailure
from skillharbor.features.auth.session import SessionManager
from skillharbor.features.auth.session_store import FileSessionStore
from skillharbor.features.permissions.catalog import Permission
from skillharbor.features.permissions.guard import AccessRequest, authorize
from skillharbor.features.users.store import SqlUserStore


async def login(sessions: SessionManager, email: str) -> int:
    password = getpass.getpass("Password: ")
    try:
        principal = await sessions.authenticate(email, password)
    except AuthenticationFailure as e:
        print(e.message, file=sys.stderr)
        return 1
    print(f"Logged in as {principal.name} <{principal.email}> ({principal.role.value})")
    return 0


def whoami(sessions: SessionManager) -> int:
    principal = sessions.restore_session()
    if principal is None:
        print("Not logged in", file=sys.stderr)
        return 1
    print(f"{principal.name} <{principal.email}>")
    print(f"  role:        {principal.role.value}")
    print(f"  department:  {principal.department}")
    print(f"  last login:  {principal.last_login.isoformat() if principal.last_login else '-'}")
    print(f"  permissions: {', '.join(p.value for p in principal.permissions)}")
    return 0


def check(sessions: SessionManager, args: argparse.Namespace) -> int:
    principal = sessions.restore_session()
    access_request = AccessRequest(
        permissions=args.permission or [],
        resource=args.resource,
        action=args.action,
        allow_self_access=args.self_access,
        target_email=args.target,
    )
    decision = authorize(principal, access_request)
    print(f"{'allowed' if decision.allowed else 'denied'} ({decision.reason})")
    return 0 if decision.allowed else 2


async def run(args: argparse.Namespace) -> int:
    await init_db()
    async with AsyncSessionLocal() as db:
        sessions = SessionManager(SqlUserStore(db), FileSessionStore(config.SESSION_FILE))
        if args.command == "login":
            return await login(sessions, args.email)
        if args.command == "whoami":
            return whoami(sessions)
        if args.command == "check":
            return check(sessions, args)
        sessions.end_session(sessions.restore_session())
        print("Logged out")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SkillHarbor session client")
    commands = parser.add_subparsers(dest="command", required=True)

    login_parser = commands.add_parser("login", help="log in and store the session")
    login_parser.add_argument("email")

    commands.add_parser("whoami", help="show the stored session")
    commands.add_parser("logout", help="clear the stored session")

    check_parser = commands.add_parser("check", help="evaluate an access request for the stored session")
    check_parser.add_argument(
        "--permission",
        action="append",
        choices=[permission.value for permission in Permission],
        help="required permission (repeatable, any-of)",
    )
    check_parser.add_argument("--resource")
    check_parser.add_argument("--action")
    check_parser.add_argument("--self-access", action="store_true")
    check_parser.add_argument("--target", help="email of the record being accessed")
    return parser


if __name__ == "__main__":
    sys.exit(asyncio.run(run(build_parser().parse_args())))
