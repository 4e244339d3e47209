"""
Drop and recreate every table. All submissions, notification logs and admin
accounts are lost; run create_admin afterwards.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from pelayanan.config import settings
from pelayanan.database import Database

logger = logging.getLogger("pelayanan.scripts.reset_database")


async def reset_database(database: Database) -> None:
    await database.connect()
    await database.drop_tables()
    await database.create_tables()
    logger.info("Database reset completed")


async def _main() -> int:
    database = Database.from_settings(settings)
    try:
        await reset_database(database)
    finally:
        await database.dispose()
    return 0


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Drop and recreate all tables.")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm that ALL data will be deleted",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not args.yes:
        logger.error("Refusing to reset without --yes (this deletes ALL data)")
        return 1

    return asyncio.run(_main())


if __name__ == "__main__":
    sys.exit(main())
