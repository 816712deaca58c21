"""
Create Admin Script
===================
Creates an admin account, or promotes and resets an existing account.

Run with: python -m app.scripts.create_admin --email admin@example.com --name "Site Admin"
The password is read from --password or prompted for.
"""

import argparse
import asyncio
import getpass
import sys

from sqlalchemy import select

from app.core.database import get_session_local, init_db
from app.core.logging_config import logger
from app.core.security import get_password_hash
from app.models.user import User, UserRole


async def create_admin(email: str, password: str, full_name: str = None) -> User:
    await init_db()

    session_local = get_session_local()
    async with session_local() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user:
            user.role = UserRole.ADMIN
            user.is_active = True
            user.hashed_password = get_password_hash(password)
            if full_name:
                user.full_name = full_name
            logger.info(f"[CreateAdmin] Promoted existing user {email} to admin")
        else:
            user = User(
                email=email,
                full_name=full_name,
                hashed_password=get_password_hash(password),
                role=UserRole.ADMIN,
                is_active=True,
            )
            db.add(user)
            logger.info(f"[CreateAdmin] Created admin {email}")

        await db.commit()
        return user


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", dest="full_name")
    parser.add_argument("--password")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters", file=sys.stderr)
        return 1

    asyncio.run(create_admin(args.email, password, args.full_name))
    print(f"Admin ready: {args.email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
