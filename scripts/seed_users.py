#!/usr/bin/env python3
"""
Seed the demo portal accounts.

Creates the ADMIN and ASHA demo users when they do not exist yet. Reads
DATABASE_URL (and the rest of the identity settings) from .env.

Usage:
    python -m scripts.seed_users            # create missing demo accounts
    python -m scripts.seed_users --reset    # wipe users + OTPs, then seed
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add backend root to path so imports resolve without an editable install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "services" / "identity"))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "shared"))

from app.admin.service import DEMO_USERS, delete_all_users, seed_users
from app.config import Settings
from app.database import init_db
from shared.database import create_all, dispose

logger = logging.getLogger("seed_users")


async def main(reset: bool) -> None:
    settings = Settings()
    session_factory = init_db(settings.database_url)
    try:
        await create_all(session_factory)
        async with session_factory() as session:
            if reset:
                removed = await delete_all_users(session)
                logger.info("Removed %d existing account(s)", removed)
            created = await seed_users(session)
            await session.commit()

        for user in created:
            logger.info("Created %s (%s)", user.email, user.role.value)
        skipped = len(DEMO_USERS) - len(created)
        if skipped:
            logger.info("%d demo account(s) already present, left untouched", skipped)
    finally:
        await dispose(session_factory)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--reset",
        action="store_true",
        help="delete every user and OTP before seeding",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s: %(message)s")
    asyncio.run(main(args.reset))
