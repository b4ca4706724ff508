"""
Create or promote the admin account that settles provider payouts.

Credentials default to ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME from the
environment. Running it again is a no-op, so it is safe on every container
start.

Usage:
    python scripts/seed_admin.py [--email EMAIL] [--name NAME] [--promote]

Options:
    --email EMAIL   Admin e-mail (overrides ADMIN_EMAIL)
    --name NAME     Display name for a newly created admin
    --promote       Grant the admin role if the e-mail belongs to an existing user
"""

import asyncio
import argparse
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import AsyncSessionLocal
from app.models.user import User
from app.auth.security import hash_password
from app.config import settings
from app.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def seed_admin(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    promote: bool = False,
) -> str:
    """Ensure ``email`` is an admin. Returns "created", "promoted" or "unchanged"."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is not None:
        if user.user_role == "admin":
            logger.info(f"Admin user {email} already exists, skipping")
            return "unchanged"
        if not promote:
            logger.warning(f"User {email} exists without the admin role; pass --promote to grant it")
            return "unchanged"
        user.user_role = "admin"
        await db.commit()
        logger.info(f"Promoted existing user {email} to admin")
        return "promoted"

    db.add(User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        user_role="admin",
        status="active",
    ))
    await db.commit()
    logger.info(f"Admin user created: {email}")
    return "created"


async def main(email: str, name: str, promote: bool) -> None:
    async with AsyncSessionLocal() as db:
        await seed_admin(db, email, settings.ADMIN_PASSWORD, name, promote=promote)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote the payout admin account")
    parser.add_argument("--email", type=str, default=settings.ADMIN_EMAIL, help="Admin e-mail address")
    parser.add_argument("--name", type=str, default=settings.ADMIN_NAME, help="Name for a new admin")
    parser.add_argument("--promote", action="store_true", help="Promote an existing user to admin")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    asyncio.run(main(email=args.email, name=args.name, promote=args.promote))
