"""Variable resolver strategy.

Maps the fixed variable vocabulary to recipient, organization and date
values. Adding a variable only requires a new entry in
``VARIABLE_RESOLVERS``; the renderer is unaware of the vocabulary.
"""

import datetime
import logging
from collections.abc import Callable

from church_letters.core.exceptions import UnknownVariableError
from church_letters.db.models import OrganizationContext, RecipientContext
from church_letters.interfaces.directory import Clock, system_clock
from church_letters.interfaces.template import BaseVariableResolver

logger = logging.getLogger(__name__)


SPANISH_MONTHS = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


def format_spanish_date(value: datetime.date) -> str:
    """Format a date the way it is written in a letter, e.g. '5 de mayo de 2024'."""
    return f"{value.day} de {SPANISH_MONTHS[value.month - 1]} de {value.year}"


VariableFn = Callable[[RecipientContext, OrganizationContext, datetime.date], str]

VARIABLE_RESOLVERS: dict[str, VariableFn] = {
    "nombre": lambda person, org, today: person.full_name,
    "fecha": lambda person, org, today: format_spanish_date(today),
    "iglesia": lambda person, org, today: org.name,
    "pastor": lambda person, org, today: org.pastor_name,
    "ministerio": lambda person, org, today: person.ministry,
    "telefono": lambda person, org, today: person.phone,
    "email": lambda person, org, today: person.email,
}


class VariableResolver(BaseVariableResolver):
    """Resolves template variables against a recipient and organization.

    In lenient mode (the default) unknown tokens resolve to an empty
    string. In strict mode they raise ``UnknownVariableError`` before any
    value is produced.

    Example:
        ```python
        resolver = VariableResolver(clock=lambda: datetime.date(2024, 1, 1))
        resolver.resolve(["nombre", "fecha"], recipient, organization)
        # {"nombre": "Ana Pérez", "fecha": "1 de enero de 2024"}
        ```
    """

    def __init__(
        self,
        strict: bool = False,
        clock: Clock | None = None,
        resolvers: dict[str, VariableFn] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            strict: Reject unknown tokens instead of rendering them empty.
            clock: Returns the date used for ``fecha``. Defaults to today.
            resolvers: Vocabulary override. Defaults to ``VARIABLE_RESOLVERS``.
        """
        self.strict = strict
        self._clock = clock or system_clock
        self._resolvers = resolvers if resolvers is not None else VARIABLE_RESOLVERS

    def known_variables(self) -> list[str]:
        return list(self._resolvers)

    def unknown_variables(self, variables: list[str]) -> list[str]:
        """Return the variables outside the vocabulary, keeping their order."""
        return [name for name in variables if name not in self._resolvers]

    def resolve(
        self,
        variables: list[str],
        recipient: RecipientContext,
        organization: OrganizationContext,
    ) -> dict[str, str]:
        unknown = self.unknown_variables(variables)
        if unknown:
            if self.strict:
                logger.warning(f"Rejecting unknown variables: {unknown}")
                raise UnknownVariableError(unknown)
            logger.info(f"Unknown variables resolve to empty: {unknown}")

        today = self._clock()
        values: dict[str, str] = {}
        for name in variables:
            fn = self._resolvers.get(name)
            values[name] = fn(recipient, organization, today) if fn else ""
        return values
