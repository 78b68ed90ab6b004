"""Generation ledger service.

Resolves, renders and records letters. The ledger only appends: there is
no update or delete, a generated letter keeps the content it was issued
with.
"""

import datetime
import logging
import uuid
from collections.abc import Callable

from church_letters.db.models import (
    GeneratedLetterRead,
    LetterPreview,
    RecipientContext,
    TemplateRead,
    utcnow,
)
from church_letters.interfaces.directory import BaseDirectory
from church_letters.interfaces.store import (
    BaseLetterRepository,
    BaseTemplateRepository,
    LetterFilter,
)
from church_letters.interfaces.template import BaseTemplateRenderer, BaseVariableResolver
from church_letters.strategies.template_engine.variables import extract_variables

logger = logging.getLogger(__name__)


class GenerationLedger:
    """Generate letters from templates and keep an immutable history.

    Example:
        ```python
        ledger = GenerationLedger(templates, letters, directory, resolver, renderer)
        letter = await ledger.generate(template_id, person_id, generated_by=user_id)
        history = await ledger.list(LetterFilter(recipient_id=person_id))
        ```
    """

    def __init__(
        self,
        templates: BaseTemplateRepository,
        letters: BaseLetterRepository,
        directory: BaseDirectory,
        resolver: BaseVariableResolver,
        renderer: BaseTemplateRenderer,
        now: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._templates = templates
        self._letters = letters
        self._directory = directory
        self._resolver = resolver
        self._renderer = renderer
        self._now = now or utcnow

    async def _render(
        self,
        template_id: uuid.UUID,
        recipient_id: uuid.UUID,
    ) -> tuple[TemplateRead, RecipientContext, list[str], str]:
        template = await self._templates.get_template(template_id)
        recipient = await self._directory.get_person(recipient_id)
        organization = await self._directory.get_organization()

        variables = extract_variables(template.content)
        substitutions = self._resolver.resolve(variables, recipient, organization)
        content = self._renderer.render(template.content, substitutions)
        return template, recipient, variables, content

    async def generate(
        self,
        template_id: uuid.UUID,
        recipient_id: uuid.UUID,
        generated_by: uuid.UUID | None = None,
    ) -> GeneratedLetterRead:
        """Render a template for a recipient and store the result.

        Args:
            template_id: Source template.
            recipient_id: Person the letter is addressed to.
            generated_by: Id of the user generating the letter.

        Returns:
            The stored letter snapshot.

        Raises:
            NotFoundError: If the template or the recipient does not exist.
            UnknownVariableError: In strict mode, if the template uses
                unknown variables.
        """
        template, recipient, _, content = await self._render(template_id, recipient_id)

        letter = await self._letters.create_generated_letter(
            template_id=template.id,
            template_name=template.name,
            recipient_id=recipient.id,
            recipient_name=recipient.full_name,
            content=content,
            generated_by=generated_by,
            created_at=self._now(),
        )
        logger.info(
            f"Generated letter {letter.id} from template {template.id} "
            f"for recipient {recipient.id}"
        )
        return letter

    async def preview(self, template_id: uuid.UUID, recipient_id: uuid.UUID) -> LetterPreview:
        """Render a template for a recipient without storing anything."""
        template, recipient, variables, content = await self._render(template_id, recipient_id)
        return LetterPreview(
            template_id=template.id,
            template_name=template.name,
            recipient_id=recipient.id,
            recipient_name=recipient.full_name,
            variables=variables,
            content=content,
        )

    async def list(self, filter: LetterFilter | None = None) -> list[GeneratedLetterRead]:
        """List generated letters, most recent first."""
        return await self._letters.list_generated_letters(filter)

    async def get(self, letter_id: uuid.UUID) -> GeneratedLetterRead:
        return await self._letters.get_generated_letter(letter_id)
