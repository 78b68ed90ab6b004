"""Async engine, sessions and first-run data for the letters database.

One engine per process. Each request gets its own ``AsyncSession`` through
``get_async_session``; ``init_db`` creates the tables and seeds a starter
church the first time the service starts.
"""

import logging
import uuid
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel, select

from church_letters.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_ORG_ID = uuid.UUID("bf0d03fb-d8ea-4377-a991-b3b5818e71ec")
DEFAULT_USER_ID = uuid.UUID("3c5ff1b3-b0d6-4dba-b254-a2be667bbd52")
DEFAULT_PERSON_ID = uuid.UUID("6a1e3f2c-4b7d-4c8e-9f10-2d3e4f5a6b7c")

STARTER_TEMPLATES = (
    (
        "Carta de bienvenida",
        "carta",
        "{{fecha}}\n\nQuerido(a) {{nombre}}:\n\n"
        "Con gran alegría te damos la bienvenida a {{iglesia}}.\n\n"
        "Bendiciones,\n{{pastor}}",
    ),
    (
        "Certificado de servicio",
        "certificado",
        "{{iglesia}} certifica que {{nombre}} sirve fielmente en el "
        "ministerio de {{ministerio}}.\n\nExpedido el {{fecha}}.\n\n{{pastor}}",
    ),
)

# Global engine and session maker
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Return the process-wide engine, creating it on first use.

    SQLite URLs are created without pool sizing arguments.
    """
    global _engine

    try:
        if _engine is None:
            settings = settings or get_settings()

            logger.info(f"Creating database engine for {settings.database_url.split(':', 1)[0]}")

            engine_kwargs = {
                "echo": settings.log_level == "DEBUG",
                "pool_pre_ping": True,
            }
            if not settings.database_url.startswith("sqlite"):
                engine_kwargs.update(pool_size=10, max_overflow=20)

            _engine = create_async_engine(settings.database_url, **engine_kwargs)

        return _engine

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def get_session_maker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the shared engine."""
    global _async_session_maker

    try:
        if _async_session_maker is None:
            engine = get_engine(settings)

            _async_session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

        return _async_session_maker

    except Exception as e:
        logger.error(f"Failed to create session maker: {e}", exc_info=True)
        raise


async def get_async_session(settings: Settings | None = None) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session and roll it back if the request fails."""
    session_maker = get_session_maker(settings)
    async with session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}", exc_info=True)
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


async def create_all_tables(settings: Settings | None = None) -> None:
    """Create any missing tables. Existing tables are left as they are."""
    try:
        from church_letters.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.info(f"Creating tables: {', '.join(SQLModel.metadata.tables)}")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    except Exception as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise


async def drop_all_tables(settings: Settings | None = None) -> None:
    """Drop every table. Generated letter history is lost too."""
    try:
        from church_letters.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.warning("Dropping all database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)

        logger.warning("All database tables dropped")

    except Exception as e:
        logger.error(f"Failed to drop database tables: {e}", exc_info=True)
        raise


async def seed_defaults(session: AsyncSession) -> bool:
    """Seed a default church, administrator, member and starter templates.

    Does nothing when any organization already exists.

    Returns:
        True if data was seeded.
    """
    from church_letters.db.models import LetterTemplate, Organization, Person, User
    from church_letters.strategies.template_engine.variables import extract_variables

    result = await session.execute(select(Organization).limit(1))
    if result.scalars().first() is not None:
        return False

    logger.info("Seeding initial organization...")
    organization = Organization(
        id=DEFAULT_ORG_ID,
        name="Iglesia Central",
        slug="iglesia-central",
        pastor_name="Pastor Juan Gómez",
    )
    session.add(organization)
    await session.flush()

    session.add(
        User(
            id=DEFAULT_USER_ID,
            org_id=DEFAULT_ORG_ID,
            email="admin@example.com",
            full_name="Administrador",
        )
    )
    session.add(
        Person(
            id=DEFAULT_PERSON_ID,
            org_id=DEFAULT_ORG_ID,
            full_name="Ana Pérez",
            ministry="Alabanza",
            phone="555-0100",
            email="ana@example.com",
        )
    )
    for name, category, content in STARTER_TEMPLATES:
        session.add(
            LetterTemplate(
                org_id=DEFAULT_ORG_ID,
                name=name,
                category=category,
                content=content,
                variables=extract_variables(content),
                created_by=DEFAULT_USER_ID,
            )
        )

    await session.commit()
    logger.info(f"Created default organization: {organization.id}")
    return True


async def init_db(settings: Settings | None = None) -> None:
    """Create tables and seed the starter church on an empty database."""
    try:
        await create_all_tables(settings)

        session_maker = get_session_maker(settings)
        async with session_maker() as session:
            try:
                await seed_defaults(session)
            except Exception as e:
                logger.error(f"Error seeding initial data: {e}", exc_info=True)
                await session.rollback()
                raise

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise


async def close_db(settings: Settings | None = None) -> None:
    """Dispose of the engine so the next call to ``get_engine`` starts fresh."""
    global _engine, _async_session_maker

    try:
        if _engine is not None:
            logger.info("Closing database engine...")
            await _engine.dispose()
            _engine = None
            _async_session_maker = None
            logger.info("Database engine closed")

    except Exception as e:
        logger.error(f"Error closing database engine: {e}", exc_info=True)
        raise
