"""Seed an admin account for the back office.

Usage:
    python scripts/create_admin.py --email ops@speakabout.ai --name "Ops" --password ...

Omit --password to be prompted for it.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
logger = logging.getLogger(__name__)


async def create(email: str, name: str, password: str) -> None:
    from speaker_bureau.infra.database import async_session, init_db
    from speaker_bureau.services.auth_service import create_admin, get_admin_by_email

    await init_db()

    async with async_session() as db:
        if await get_admin_by_email(db, email):
            logger.error("Admin %s already exists. Nothing to do.", email)
            return
        admin = await create_admin(db, email, password, name)
        logger.info("Created admin %d (%s).", admin.id, admin.email)


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a back office admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--password", help="prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        parser.error("password must be at least 8 characters")

    asyncio.run(create(args.email, args.name, password))


if __name__ == "__main__":
    main()
