#!/usr/bin/env python3
"""
Container entrypoint.

Applies migrations, seeds the settings catalog when the table is empty,
bootstraps a super admin from SUPER_ADMIN_* variables and then replaces the
process with uvicorn.
"""

import asyncio
import os
import subprocess
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))


def migrate() -> None:
    """Run Alembic; a failed migration stops the container."""
    print("\n=== Running database migrations ===")
    result = subprocess.run(["alembic", "upgrade", "head"])
    if result.returncode != 0:
        print(f"Migrations failed with code {result.returncode}")
        sys.exit(result.returncode)


async def bootstrap() -> None:
    """Seed defaults and create the configured super admin in one event loop."""
    from app.database import engine
    from create_super_admin import create_super_admin
    from seed import seed

    try:
        print("\n=== Seeding default settings ===")
        await seed(reset=False)

        email = os.environ.get("SUPER_ADMIN_EMAIL", "").strip()
        password = os.environ.get("SUPER_ADMIN_PASSWORD", "").strip()
        if not (email and password):
            print("\nSkipping super admin creation (SUPER_ADMIN_EMAIL/PASSWORD not set)")
            return

        created = await create_super_admin(
            email=email,
            password=password,
            name=os.environ.get("SUPER_ADMIN_NAME", "Super Admin").strip(),
            interactive=False,
        )
        if not created:
            print("Super admin not created; continuing startup")
    finally:
        await engine.dispose()


def serve() -> None:
    host = os.environ.get("HOST", "0.0.0.0")
    port = os.environ.get("PORT", "8000")
    print(f"\n=== Starting uvicorn on {host}:{port} ===\n")
    os.execvp("uvicorn", ["uvicorn", "app.main:app", "--host", host, "--port", port])


def main():
    migrate()
    asyncio.run(bootstrap())
    serve()


if __name__ == "__main__":
    main()
