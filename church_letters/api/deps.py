"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Organization and user context
- Template store and generation ledger services
"""

import logging
import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from church_letters.core.config import Settings, get_settings
from church_letters.core.factory import ComponentFactory, get_factory
from church_letters.db.session import get_async_session
from church_letters.interfaces.exporter import BaseLetterExporter
from church_letters.services.ledger import GenerationLedger
from church_letters.services.template_store import TemplateStore
from church_letters.strategies.stores.sql import (
    SqlDirectory,
    SqlLetterRepository,
    SqlTemplateRepository,
)

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with, or the global ones."""
    return getattr(request.app.state, "settings", None) or get_settings()


async def get_db(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Args:
        settings: Application settings.

    Yields:
        An async database session.
    """
    async for session in get_async_session(settings):
        yield session


def _parse_uuid_header(value: str, header: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError as e:
        logger.warning(f"Invalid {header} header: {value}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header} format",
        ) from e


async def get_org_id(
    x_org_id: str | None = Header(default=None, description="Organization ID for multi-tenancy"),
) -> uuid.UUID:
    """Dependency for extracting organization ID from headers.

    Args:
        x_org_id: The organization ID from X-Org-ID header.

    Returns:
        The organization UUID.

    Raises:
        HTTPException: If org_id is missing or invalid.
    """
    if not x_org_id:
        logger.warning("X-Org-ID header is missing")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Org-ID header is required",
        )
    return _parse_uuid_header(x_org_id, "X-Org-ID")


async def get_user_id(
    x_user_id: str | None = Header(default=None, description="Acting user ID"),
) -> uuid.UUID | None:
    """Dependency for the acting user recorded as creator or generator.

    Returns:
        The user UUID, or None when the header is absent.
    """
    if not x_user_id:
        return None
    return _parse_uuid_header(x_user_id, "X-User-ID")


def get_component_factory(request: Request) -> ComponentFactory:
    """Dependency for the app's strategy factory."""
    return getattr(request.app.state, "factory", None) or get_factory()


async def get_template_store(
    session: AsyncSession = Depends(get_db),
    org_id: uuid.UUID = Depends(get_org_id),
    settings: Settings = Depends(get_app_settings),
) -> TemplateStore:
    """Dependency for the organization's template store."""
    return TemplateStore(
        SqlTemplateRepository(session, org_id),
        default_category=settings.default_category,
    )


async def get_ledger(
    session: AsyncSession = Depends(get_db),
    org_id: uuid.UUID = Depends(get_org_id),
    factory: ComponentFactory = Depends(get_component_factory),
) -> GenerationLedger:
    """Dependency for the organization's generation ledger."""
    return GenerationLedger(
        templates=SqlTemplateRepository(session, org_id),
        letters=SqlLetterRepository(session, org_id),
        directory=SqlDirectory(session, org_id),
        resolver=factory.get_variable_resolver(),
        renderer=factory.get_renderer(),
    )


def get_exporter(
    factory: ComponentFactory = Depends(get_component_factory),
) -> BaseLetterExporter:
    """Dependency for the .docx letter exporter."""
    return factory.get_exporter("docx")
