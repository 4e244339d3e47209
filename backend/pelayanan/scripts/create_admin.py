"""
Create the initial administrator account.

Connects with retries, makes sure the tables exist, and inserts the admin
unless the username is already taken. Safe to run repeatedly.
"""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

from pelayanan.config import settings
from pelayanan.database import Database
from pelayanan.repositories.admin_repository import admin_repository
from pelayanan.services.auth_service import hash_password

logger = logging.getLogger("pelayanan.scripts.create_admin")


async def create_admin(
    database: Database,
    username: str,
    email: str,
    password: str,
) -> bool:
    """Returns True when a new account was created, False if it already existed."""
    await database.connect()
    await database.create_tables()

    async with database.session() as session:
        existing = await admin_repository.get_by_login(session, username)
        if existing is not None:
            logger.info("Admin '%s' already exists (%s)", existing.username, existing.email)
            return False

        await admin_repository.create(session, username, email, hash_password(password))

    logger.info("Admin '%s' created with email %s", username, email)
    return True


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the default administrator account.")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", default="admin@diskominfo-bogor.go.id")
    parser.add_argument(
        "--password",
        default=None,
        help="Plain password; prompted for when omitted",
    )
    return parser.parse_args(argv)


async def _main(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password for %s: " % args.username)
    if not password:
        logger.error("Password must not be empty")
        return 2

    database = Database.from_settings(settings)
    try:
        await create_admin(database, args.username, args.email, password)
    finally:
        await database.dispose()
    return 0


def main(argv: Optional[list] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return asyncio.run(_main(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
