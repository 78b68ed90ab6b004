"""Database models and session management."""

from church_letters.db.models import (
    GeneratedLetter,
    GeneratedLetterRead,
    LetterPreview,
    LetterTemplate,
    Organization,
    OrganizationContext,
    Person,
    RecipientContext,
    TemplateRead,
    User,
)
from church_letters.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    get_async_session,
    init_db,
)

__all__ = [
    # Models
    "GeneratedLetter",
    "GeneratedLetterRead",
    "LetterPreview",
    "LetterTemplate",
    "Organization",
    "OrganizationContext",
    "Person",
    "RecipientContext",
    "TemplateRead",
    "User",
    # Session
    "AsyncSession",
    "close_db",
    "create_all_tables",
    "get_async_session",
    "init_db",
]
