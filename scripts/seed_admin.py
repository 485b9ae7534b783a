#!/usr/bin/env python3
"""Seed script to create a moderator (admin) account and print a dev token."""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.security import create_access_token
from app.database import async_session_maker
from app.models.user import User
from app.services import user_service


async def create_admin_user(
    email: str = "moderator@unishare.dev",
    name: str = "Moderation Team",
) -> None:
    """Create an admin user if it doesn't exist."""
    async with async_session_maker() as db:
        existing_user = await user_service.get_user_by_email(db, email)

        if existing_user:
            if existing_user.is_admin:
                print(f"Admin user already exists: {email}")
            else:
                existing_user.is_admin = True
                await db.commit()
                print(f"Upgraded existing user to admin: {email}")
            admin = existing_user
        else:
            admin = User(email=email, name=name, is_admin=True, status="active")
            db.add(admin)
            await db.commit()
            print(f"Created admin user: {email}")

        print("\nDevelopment bearer token:")
        print(create_access_token(str(admin.id)))


async def make_user_admin(email: str) -> None:
    """Make an existing user an admin."""
    async with async_session_maker() as db:
        user = await user_service.get_user_by_email(db, email)

        if not user:
            print(f"User not found: {email}")
            return

        if user.is_admin:
            print(f"User is already an admin: {email}")
            return

        user.is_admin = True
        await db.commit()
        print(f"Made user admin: {email}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Moderator account seeder")
    parser.add_argument(
        "--email",
        default="moderator@unishare.dev",
        help="Admin email (default: moderator@unishare.dev)",
    )
    parser.add_argument(
        "--name",
        default="Moderation Team",
        help="Display name (default: Moderation Team)",
    )
    parser.add_argument(
        "--make-admin",
        metavar="EMAIL",
        help="Make an existing user an admin by email",
    )

    args = parser.parse_args()

    if args.make_admin:
        asyncio.run(make_user_admin(args.make_admin))
    else:
        asyncio.run(create_admin_user(args.email, args.name))


if __name__ == "__main__":
    main()
