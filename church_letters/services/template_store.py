"""Template store service.

Validates template input and keeps the derived ``variables`` list in
step with ``content`` before anything reaches the repository.
"""

import logging
import uuid
from typing import Any

from church_letters.core.exceptions import ConflictError, ValidationError
from church_letters.db.models import TemplateRead
from church_letters.interfaces.store import BaseTemplateRepository, TemplateFilter
from church_letters.strategies.template_engine.variables import extract_variables

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "category", "content"})

SUGGESTED_CATEGORIES = ("carta", "certificado", "invitacion", "constancia", "general")


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"Template {field} is required", field=field)
    return value


class TemplateStore:
    """Create, edit, delete and search letter templates."""

    def __init__(
        self,
        repository: BaseTemplateRepository,
        default_category: str = "general",
    ) -> None:
        self._repository = repository
        self._default_category = default_category

    def _category(self, category: str | None) -> str:
        return (category or "").strip() or self._default_category

    async def _ensure_unique_name(self, name: str, exclude_id: uuid.UUID | None = None) -> None:
        existing = await self._repository.find_template_by_name(name)
        if existing is not None and existing.id != exclude_id:
            logger.warning(f"Template name already exists: {name}")
            raise ConflictError(f"Template name already exists: {name}", name=name)

    async def create(
        self,
        name: str | None,
        category: str | None,
        content: str | None,
        created_by: uuid.UUID | None = None,
    ) -> TemplateRead:
        """Create a template.

        Args:
            name: Template name, unique within the organization.
            category: Free-form category. Blank falls back to the default.
            content: Template text with ``{{token}}`` placeholders.
            created_by: Id of the creating user.

        Returns:
            The stored template with its derived variables.

        Raises:
            ValidationError: If name or content is empty.
            ConflictError: If the name is already in use.
        """
        name = _require(name, "name").strip()
        content = _require(content, "content")
        await self._ensure_unique_name(name)

        template = await self._repository.create_template(
            name=name,
            category=self._category(category),
            content=content,
            variables=extract_variables(content),
            created_by=created_by,
        )
        logger.info(f"Created template {template.id} ({template.name}): {template.variables}")
        return template

    async def update(self, template_id: uuid.UUID, changes: dict[str, Any]) -> TemplateRead:
        """Apply a partial update.

        ``variables`` is recomputed whenever ``content`` is part of the
        update; stale variables never survive a content change.

        Raises:
            NotFoundError: If the template does not exist.
            ValidationError: If a field is unknown or a required one is blank.
            ConflictError: If the new name is already in use.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                fields=sorted(unknown),
            )

        current = await self._repository.get_template(template_id)

        fields: dict[str, Any] = {}
        if "name" in changes:
            name = _require(changes["name"], "name").strip()
            if name != current.name:
                await self._ensure_unique_name(name, exclude_id=template_id)
            fields["name"] = name
        if "category" in changes:
            fields["category"] = self._category(changes["category"])
        if "content" in changes:
            content = _require(changes["content"], "content")
            fields["content"] = content
            fields["variables"] = extract_variables(content)

        if not fields:
            return current

        template = await self._repository.update_template(template_id, fields)
        logger.info(f"Updated template {template_id}: {sorted(fields)}")
        return template

    async def delete(self, template_id: uuid.UUID) -> None:
        """Delete a template. Letters generated from it are kept."""
        await self._repository.delete_template(template_id)
        logger.info(f"Deleted template {template_id}")

    async def get(self, template_id: uuid.UUID) -> TemplateRead:
        return await self._repository.get_template(template_id)

    async def list(
        self,
        search: str | None = None,
        category: str | None = None,
    ) -> list[TemplateRead]:
        """List templates by name substring and/or exact category."""
        filter = TemplateFilter(
            search=search.strip() if search and search.strip() else None,
            category=category.strip() if category and category.strip() else None,
        )
        templates = await self._repository.list_templates(filter)
        logger.debug(f"Listed {len(templates)} templates with {filter}")
        return templates
