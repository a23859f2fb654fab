#!/usr/bin/env python3
"""
Seed the settings table with the built-in defaults.

Existing settings are kept unless --reset is given, in which case the whole
table is replaced by the default catalog.

Usage:
    python scripts/seed.py
    python scripts/seed.py --reset
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, select

from app.database import async_session_factory, engine
from app.models import Setting
from app.services.setting_service import get_setting_service


async def seed(reset: bool = False) -> int:
    """Seed default settings; returns how many were written."""
    async with async_session_factory() as session:
        existing = (await session.execute(select(func.count(Setting.id)))).scalar() or 0

        if existing and not reset:
            print(f"Settings table already has {existing} entries, skipping (use --reset to replace)")
            return 0

        count = await get_setting_service().reset_to_defaults(session)
        print(f"Seeded {count} default settings")
        return count


async def main():
    parser = argparse.ArgumentParser(description="Seed default application settings")
    parser.add_argument("--reset", action="store_true", help="Replace existing settings with the defaults")
    args = parser.parse_args()

    try:
        await seed(reset=args.reset)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
