#!/usr/bin/env python3
"""
CLI script to create a super admin user.

Usage (interactive):
    python scripts/create_super_admin.py

Usage (non-interactive, for container startup):
    python scripts/create_super_admin.py --email admin@example.com --password Secret123 --name "Site Admin"
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from getpass import getpass
from sqlalchemy import select

from app.database import async_session_factory, engine
from app.exceptions import AppException
from app.models import User
from app.models.base import utcnow
from app.models.user import Role
from app.services.account_service import get_account_service, normalize_email
from app.services.password_policy import load_password_policy


async def create_super_admin(
    email: str | None = None,
    password: str | None = None,
    name: str | None = None,
    interactive: bool = True,
    force: bool = False,
) -> bool:
    """Create a super admin user."""
    print("\n" + "=" * 50)
    print("Super Admin Setup")
    print("=" * 50 + "\n")

    if not email:
        while True:
            email = input("Enter email address: ")
            if "@" in email and "." in email:
                break
            print("Please enter a valid email address.")
    email = normalize_email(email)
    if "@" not in email or "." not in email:
        print("Invalid email address.")
        return False

    confirmation = None
    if not password:
        password = getpass("Enter password: ")
        confirmation = getpass("Confirm password: ")

    if not name:
        name = input("Enter name: ").strip() if interactive else ""
    name = name or "Super Admin"

    async with async_session_factory() as session:
        result = await session.execute(
            select(User).where(User.role == Role.SUPER_ADMIN.value).limit(1)
        )
        existing = result.scalar_one_or_none()

        if existing and not force:
            print(f"\nA super admin already exists: {existing.email}")
            if interactive:
                confirm = input("Create another super admin? (y/n): ").strip().lower()
                if confirm != "y":
                    print("Aborting.")
                    return False
            else:
                print("Use --force to create another super admin.")
                return False

        try:
            policy = await load_password_policy(session)
            policy.enforce(password, confirmation)
            user = await get_account_service().register(
                session, name=name, email=email, password=password, role=Role.SUPER_ADMIN
            )
        except AppException as e:
            print(f"\n{e.message}")
            for error in getattr(e, "errors", []):
                print(f"  - {error['message']}")
            return False

        user.email_verified_at = utcnow()
        await session.commit()

        print("\n" + "=" * 50)
        print("Super Admin Created Successfully!")
        print("=" * 50)
        print(f"  Email: {user.email}")
        print(f"  Name: {user.name}")
        print(f"  ID: {user.id}")
        print("=" * 50 + "\n")

        return True


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create a super admin user")
    parser.add_argument("--email", "-e", help="Admin email address")
    parser.add_argument("--password", "-p", help="Admin password (must satisfy the password policy)")
    parser.add_argument("--name", "-n", help="Display name", default=None)
    parser.add_argument("--force", action="store_true", help="Force creation even if super admin exists")

    args = parser.parse_args()

    # Determine if running interactively
    interactive = not (args.email and args.password)

    try:
        success = await create_super_admin(
            email=args.email,
            password=args.password,
            name=args.name,
            interactive=interactive,
            force=args.force,
        )
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nAborted by user.")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
