"""In-memory persistence strategy.

Dictionary backed repositories for tests and local experiments. Records
are copied on the way in and out so callers can never mutate stored
state.
"""

import datetime
import logging
import uuid
from typing import Any

from church_letters.core.exceptions import ConflictError, NotFoundError
from church_letters.db.models import (
    GeneratedLetterRead,
    OrganizationContext,
    RecipientContext,
    TemplateRead,
    utcnow,
)
from church_letters.interfaces.directory import BaseDirectory
from church_letters.interfaces.store import (
    BaseLetterRepository,
    BaseTemplateRepository,
    LetterFilter,
    TemplateFilter,
)

logger = logging.getLogger(__name__)


class MemoryTemplateRepository(BaseTemplateRepository):
    """Template repository backed by a dict."""

    def __init__(self, org_id: uuid.UUID | None = None) -> None:
        self.org_id = org_id or uuid.uuid4()
        self._templates: dict[uuid.UUID, TemplateRead] = {}

    async def create_template(
        self,
        *,
        name: str,
        category: str,
        content: str,
        variables: list[str],
        created_by: uuid.UUID | None = None,
    ) -> TemplateRead:
        if await self.find_template_by_name(name) is not None:
            raise ConflictError(f"Template name already exists: {name}", name=name)

        now = utcnow()
        template = TemplateRead(
            id=uuid.uuid4(),
            org_id=self.org_id,
            name=name,
            category=category,
            content=content,
            variables=list(variables),
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self._templates[template.id] = template
        return template.model_copy(deep=True)

    async def update_template(
        self,
        template_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> TemplateRead:
        current = self._templates.get(template_id)
        if current is None:
            raise NotFoundError("Template", template_id)

        new_name = changes.get("name")
        if new_name is not None and new_name != current.name:
            existing = await self.find_template_by_name(new_name)
            if existing is not None:
                raise ConflictError(f"Template name already exists: {new_name}", name=new_name)

        updated = current.model_copy(update={**changes, "updated_at": utcnow()}, deep=True)
        self._templates[template_id] = updated
        return updated.model_copy(deep=True)

    async def delete_template(self, template_id: uuid.UUID) -> None:
        if self._templates.pop(template_id, None) is None:
            raise NotFoundError("Template", template_id)

    async def get_template(self, template_id: uuid.UUID) -> TemplateRead:
        template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return template.model_copy(deep=True)

    async def find_template_by_name(self, name: str) -> TemplateRead | None:
        for template in self._templates.values():
            if template.name == name:
                return template.model_copy(deep=True)
        return None

    async def list_templates(self, filter: TemplateFilter | None = None) -> list[TemplateRead]:
        filter = filter or TemplateFilter()
        search = filter.search.lower() if filter.search else None

        results = [
            template.model_copy(deep=True)
            for template in self._templates.values()
            if (search is None or search in template.name.lower())
            and (not filter.category or template.category == filter.category)
        ]
        return sorted(results, key=lambda t: t.name)


class MemoryLetterRepository(BaseLetterRepository):
    """Append-only generated letter repository backed by a list."""

    def __init__(self, org_id: uuid.UUID | None = None) -> None:
        self.org_id = org_id or uuid.uuid4()
        self._letters: list[GeneratedLetterRead] = []

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
        letter = GeneratedLetterRead(
            id=uuid.uuid4(),
            org_id=self.org_id,
            template_id=template_id,
            template_name=template_name,
            recipient_id=recipient_id,
            recipient_name=recipient_name,
            content=content,
            generated_by=generated_by,
            created_at=created_at,
        )
        self._letters.append(letter)
        return letter.model_copy(deep=True)

    async def list_generated_letters(
        self,
        filter: LetterFilter | None = None,
    ) -> list[GeneratedLetterRead]:
        filter = filter or LetterFilter()
        # Newest insertion first so equal timestamps keep that order
        results = [
            letter.model_copy(deep=True)
            for letter in reversed(self._letters)
            if (filter.template_id is None or letter.template_id == filter.template_id)
            and (filter.recipient_id is None or letter.recipient_id == filter.recipient_id)
        ]
        return sorted(results, key=lambda letter: letter.created_at, reverse=True)

    async def get_generated_letter(self, letter_id: uuid.UUID) -> GeneratedLetterRead:
        for letter in self._letters:
            if letter.id == letter_id:
                return letter.model_copy(deep=True)
        raise NotFoundError("GeneratedLetter", letter_id)


class MemoryDirectory(BaseDirectory):
    """Directory of people and one organization held in memory."""

    def __init__(
        self,
        organization: OrganizationContext,
        people: list[RecipientContext] | None = None,
    ) -> None:
        self._organization = organization
        self._people = {person.id: person for person in people or []}

    def add_person(self, person: RecipientContext) -> RecipientContext:
        self._people[person.id] = person
        return person

    async def get_person(self, person_id: uuid.UUID) -> RecipientContext:
        person = self._people.get(person_id)
        if person is None:
            raise NotFoundError("Person", person_id)
        return person.model_copy()

    async def get_organization(self) -> OrganizationContext:
        return self._organization.model_copy()
