"""Database reset script.

Drops all tables and reinitializes the database with the default seed.
This deletes every template and every generated letter.

Usage:
    python -m scripts.reset_db
"""

import asyncio

from church_letters.core.config import get_settings
from church_letters.db.session import close_db, drop_all_tables, init_db


async def main() -> None:
    """Reset the database by dropping all tables and reinitializing."""
    settings = get_settings()

    print("Dropping all database tables...")
    await drop_all_tables(settings)
    print("All tables dropped successfully!")

    print("Reinitializing database with default data...")
    await init_db(settings)
    await close_db(settings)
    print("Database reinitialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
