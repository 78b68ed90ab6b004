"""SQL persistence strategy.

Async SQLModel/SQLAlchemy repositories. Each mutating call is a single
transaction that is committed before returning or rolled back on error.
Driver failures are wrapped in ``StoreError``; no retries happen here.
"""

import datetime
import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from church_letters.core.exceptions import (
    ConflictError,
    LetterServiceError,
    NotFoundError,
    StoreError,
)
from church_letters.db.models import (
    GeneratedLetter,
    GeneratedLetterRead,
    LetterTemplate,
    Organization,
    OrganizationContext,
    Person,
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

UPDATABLE_TEMPLATE_FIELDS = frozenset({"name", "category", "content", "variables"})


class _SqlRepository:
    """Shared session handling for organization-scoped repositories."""

    def __init__(self, session: AsyncSession, org_id: uuid.UUID) -> None:
        self._session = session
        self._org_id = org_id

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {e}", exc_info=True)

    async def _store_failure(self, action: str, error: SQLAlchemyError) -> StoreError:
        logger.error(f"Database error while {action}: {error}", exc_info=True)
        await self._rollback()
        return StoreError(f"Store unavailable while {action}", action=action)


class SqlTemplateRepository(_SqlRepository, BaseTemplateRepository):
    """Template repository backed by the ``letter_templates`` table."""

    async def _integrity_failure(
        self,
        action: str,
        name: str | None,
        error: IntegrityError,
        template_id: uuid.UUID | None = None,
    ) -> LetterServiceError:
        """Classify a constraint violation once the transaction is rolled back.

        Only the per-organization name constraint is a conflict. A missing
        organization row is reported as not found, anything else as a
        store failure.
        """
        await self._rollback()

        try:
            if name is not None and await self._name_taken(name, template_id):
                logger.warning(f"Template name conflict: {name}")
                return ConflictError(f"Template name already exists: {name}", name=name)

            organization = await self._session.get(Organization, self._org_id)
        except SQLAlchemyError as e:
            return await self._store_failure(action, e)

        if organization is None:
            logger.warning(f"Organization not found while {action}: {self._org_id}")
            return NotFoundError("Organization", self._org_id)
        return await self._store_failure(action, error)

    async def _name_taken(self, name: str, exclude_id: uuid.UUID | None = None) -> bool:
        query = select(LetterTemplate.id).where(
            LetterTemplate.org_id == self._org_id,
            LetterTemplate.name == name,
        )
        if exclude_id is not None:
            query = query.where(LetterTemplate.id != exclude_id)
        result = await self._session.execute(query)
        return result.first() is not None

    async def _get_row(self, template_id: uuid.UUID) -> LetterTemplate:
        query = select(LetterTemplate).where(
            LetterTemplate.id == template_id,
            LetterTemplate.org_id == self._org_id,
        )
        result = await self._session.execute(query)
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Template", template_id)
        return row

    async def create_template(
        self,
        *,
        name: str,
        category: str,
        content: str,
        variables: list[str],
        created_by: uuid.UUID | None = None,
    ) -> TemplateRead:
        try:
            row = LetterTemplate(
                org_id=self._org_id,
                name=name,
                category=category,
                content=content,
                variables=list(variables),
                created_by=created_by,
            )
            self._session.add(row)
            await self._session.commit()
            await self._session.refresh(row)
            return TemplateRead.model_validate(row, from_attributes=True)

        except IntegrityError as e:
            raise await self._integrity_failure("creating template", name, e) from e
        except SQLAlchemyError as e:
            raise await self._store_failure("creating template", e) from e

    async def update_template(
        self,
        template_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> TemplateRead:
        try:
            row = await self._get_row(template_id)

            for field, value in changes.items():
                if field in UPDATABLE_TEMPLATE_FIELDS:
                    setattr(row, field, list(value) if field == "variables" else value)
            row.updated_at = utcnow()

            self._session.add(row)
            await self._session.commit()
            await self._session.refresh(row)
            return TemplateRead.model_validate(row, from_attributes=True)

        except IntegrityError as e:
            raise await self._integrity_failure(
                "updating template", changes.get("name"), e, template_id
            ) from e
        except SQLAlchemyError as e:
            raise await self._store_failure("updating template", e) from e

    async def delete_template(self, template_id: uuid.UUID) -> None:
        try:
            row = await self._get_row(template_id)
            await self._session.delete(row)
            await self._session.commit()

        except SQLAlchemyError as e:
            raise await self._store_failure("deleting template", e) from e

    async def get_template(self, template_id: uuid.UUID) -> TemplateRead:
        try:
            row = await self._get_row(template_id)
            return TemplateRead.model_validate(row, from_attributes=True)
        except SQLAlchemyError as e:
            raise await self._store_failure("fetching template", e) from e

    async def find_template_by_name(self, name: str) -> TemplateRead | None:
        try:
            query = select(LetterTemplate).where(
                LetterTemplate.org_id == self._org_id,
                LetterTemplate.name == name,
            )
            result = await self._session.execute(query)
            row = result.scalar_one_or_none()
            return TemplateRead.model_validate(row, from_attributes=True) if row else None
        except SQLAlchemyError as e:
            raise await self._store_failure("fetching template by name", e) from e

    async def list_templates(self, filter: TemplateFilter | None = None) -> list[TemplateRead]:
        filter = filter or TemplateFilter()
        try:
            query = select(LetterTemplate).where(LetterTemplate.org_id == self._org_id)
            if filter.search:
                query = query.where(
                    LetterTemplate.name.icontains(filter.search, autoescape=True)
                )
            if filter.category:
                query = query.where(LetterTemplate.category == filter.category)
            query = query.order_by(LetterTemplate.name)

            result = await self._session.execute(query)
            return [
                TemplateRead.model_validate(row, from_attributes=True)
                for row in result.scalars().all()
            ]
        except SQLAlchemyError as e:
            raise await self._store_failure("listing templates", e) from e


class SqlLetterRepository(_SqlRepository, BaseLetterRepository):
    """Generated letter repository backed by the ``generated_letters`` table."""

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
        try:
            row = GeneratedLetter(
                org_id=self._org_id,
                template_id=template_id,
                template_name=template_name,
                recipient_id=recipient_id,
                recipient_name=recipient_name,
                content=content,
                generated_by=generated_by,
                created_at=created_at,
            )
            self._session.add(row)
            await self._session.commit()
            await self._session.refresh(row)
            return GeneratedLetterRead.model_validate(row, from_attributes=True)

        except SQLAlchemyError as e:
            raise await self._store_failure("storing generated letter", e) from e

    async def list_generated_letters(
        self,
        filter: LetterFilter | None = None,
    ) -> list[GeneratedLetterRead]:
        filter = filter or LetterFilter()
        try:
            query = select(GeneratedLetter).where(GeneratedLetter.org_id == self._org_id)
            if filter.template_id is not None:
                query = query.where(GeneratedLetter.template_id == filter.template_id)
            if filter.recipient_id is not None:
                query = query.where(GeneratedLetter.recipient_id == filter.recipient_id)
            query = query.order_by(
                GeneratedLetter.created_at.desc(),
                GeneratedLetter.sequence.desc(),
            )

            result = await self._session.execute(query)
            return [
                GeneratedLetterRead.model_validate(row, from_attributes=True)
                for row in result.scalars().all()
            ]
        except SQLAlchemyError as e:
            raise await self._store_failure("listing generated letters", e) from e

    async def get_generated_letter(self, letter_id: uuid.UUID) -> GeneratedLetterRead:
        try:
            query = select(GeneratedLetter).where(
                GeneratedLetter.id == letter_id,
                GeneratedLetter.org_id == self._org_id,
            )
            result = await self._session.execute(query)
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise await self._store_failure("fetching generated letter", e) from e

        if row is None:
            raise NotFoundError("GeneratedLetter", letter_id)
        return GeneratedLetterRead.model_validate(row, from_attributes=True)


class SqlDirectory(_SqlRepository, BaseDirectory):
    """Person and organization lookups backed by ``people`` and ``organizations``."""

    async def get_person(self, person_id: uuid.UUID) -> RecipientContext:
        try:
            query = select(Person).where(
                Person.id == person_id,
                Person.org_id == self._org_id,
            )
            result = await self._session.execute(query)
            person = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise await self._store_failure("fetching person", e) from e

        if person is None:
            raise NotFoundError("Person", person_id)
        return RecipientContext(
            id=person.id,
            full_name=person.full_name,
            ministry=person.ministry,
            phone=person.phone,
            email=person.email,
        )

    async def get_organization(self) -> OrganizationContext:
        try:
            query = select(Organization).where(Organization.id == self._org_id)
            result = await self._session.execute(query)
            organization = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise await self._store_failure("fetching organization", e) from e

        if organization is None:
            raise NotFoundError("Organization", self._org_id)
        return OrganizationContext(
            name=organization.name,
            pastor_name=organization.pastor_name,
        )
