"""Persistence interfaces for templates and generated letters.

Repositories are scoped to a single organization when they are built, so
none of the methods below take an organization argument.
"""

import datetime
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from church_letters.db.models import GeneratedLetterRead, TemplateRead


@dataclass(frozen=True)
class TemplateFilter:
    """Template list filter.

    Attributes:
        search: Case-insensitive substring of the template name.
        category: Exact category match.
    """

    search: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class LetterFilter:
    """Generated letter list filter."""

    template_id: uuid.UUID | None = None
    recipient_id: uuid.UUID | None = None


class BaseTemplateRepository(ABC):
    """Abstract base class for template persistence."""

    @abstractmethod
    async def create_template(
        self,
        *,
        name: str,
        category: str,
        content: str,
        variables: list[str],
        created_by: uuid.UUID | None = None,
    ) -> TemplateRead:
        """Persist a new template and return it with its assigned id.

        Raises:
            ConflictError: If the name is already taken.
            StoreError: If the store is unavailable.
        """

    @abstractmethod
    async def update_template(
        self,
        template_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> TemplateRead:
        """Apply field changes to a template and bump ``updated_at``.

        Raises:
            NotFoundError: If the template does not exist.
        """

    @abstractmethod
    async def delete_template(self, template_id: uuid.UUID) -> None:
        """Delete a template.

        Raises:
            NotFoundError: If the template does not exist.
        """

    @abstractmethod
    async def get_template(self, template_id: uuid.UUID) -> TemplateRead:
        """Fetch a template by id.

        Raises:
            NotFoundError: If the template does not exist.
        """

    @abstractmethod
    async def find_template_by_name(self, name: str) -> TemplateRead | None:
        """Return the template with exactly this name, if any."""

    @abstractmethod
    async def list_templates(self, filter: TemplateFilter | None = None) -> list[TemplateRead]:
        """List templates matching the filter, ordered by name."""


class BaseLetterRepository(ABC):
    """Abstract base class for the append-only generated letter store."""

    @abstractmethod
    async def create_generated_letter(
        self,
        *,
        template_id: uuid.UUID,
        template_name: str,
        recipient_id: uuid.UUID,
        recipient_name: str,
        content: str,
        generated_by: uuid.UUID | None,
        created_at: datetime.datetime,
    ) -> GeneratedLetterRead:
        """Persist a generated letter snapshot."""

    @abstractmethod
    async def list_generated_letters(
        self,
        filter: LetterFilter | None = None,
    ) -> list[GeneratedLetterRead]:
        """List generated letters, most recent first."""

    @abstractmethod
    async def get_generated_letter(self, letter_id: uuid.UUID) -> GeneratedLetterRead:
        """Fetch a generated letter by id.

        Raises:
            NotFoundError: If the letter does not exist.
        """
