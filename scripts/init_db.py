"""Database initialization script.

Creates the tables and seeds a default church, administrator, member and
starter letter templates when the database is empty.

Usage:
    python -m scripts.init_db
"""

import asyncio

from church_letters.core.config import get_settings
from church_letters.db.session import DEFAULT_ORG_ID, close_db, init_db


async def main() -> None:
    """Initialize the database."""
    settings = get_settings()
    await init_db(settings)
    await close_db(settings)
    print(f"Database initialized successfully! Default organization: {DEFAULT_ORG_ID}")


if __name__ == "__main__":
    asyncio.run(main())
