"""
Seed script to populate demo accounts, one per role.

Run this script after database initialization to create the accounts below.
Existing accounts (matched by email) are left alone.

Usage:
    uv run python -m scripts.seed_users
    uv run python -m scripts.seed_users --reset   # drop and recreate tables first
"""
import argparse
import asyncio
from sqlalchemy import select

from skillharbor.core.database.engine import AsyncSessionLocal, drop_db, init_db
from skillharbor.features.permissions.catalog import Role
from skillharbor.features.users.models import User
from skillharbor.features.users.passwords import hash_password
from skillharbor.utils import get_logger


log = get_logger(__name__)


# (email, name, role, department, password, is_active)
DEFAULT_USERS = [
    ("admin@example.com", "System Administrator", Role.ADMIN, "IT", "admin-password", True),
    ("hr.manager@example.com", "HR Manager", Role.HR_MANAGER, "Human Resources", "hr-password", True),
    ("dept.manager@example.com", "Dana Department", Role.DEPARTMENT_MANAGER, "Engineering", "dept-password", True),
    ("john.smith@example.com", "John Smith", Role.TEAM_LEAD, "Engineering", "lead-password", True),
    ("assessor@example.com", "Alex Assessor", Role.ASSESSOR, "Engineering", "assessor-password", True),
    ("sarah.johnson@example.com", "Sarah Johnson", Role.EMPLOYEE, "Design", "employee-password", True),
    ("former.employee@example.com", "Former Employee", Role.EMPLOYEE, "Design", "former-password", False),
]


async def seed_users(users=DEFAULT_USERS) -> int:
    """Create missing users. Returns the number created."""
    created = 0
    async with AsyncSessionLocal() as db:
        for email, name, role, department, password, is_active in users:
            result = await db.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none() is not None:
                log.info(f"User {email} already exists, skipping")
                continue

            db.add(User(
                email=email,
                name=name,
                role=role.value,
                department=department,
                password_hash=hash_password(password),
                is_active=is_active,
            ))
            created += 1
            log.info(f"Created {role.value} account {email}")

        await db.commit()
    return created


async def main(reset: bool = False):
    if reset:
        log.warning("Dropping all tables")
        await drop_db()
    await init_db()
    created = await seed_users()
    log.info(f"Seeding complete: {created} user(s) created")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo user accounts")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args()
    asyncio.run(main(reset=args.reset))
