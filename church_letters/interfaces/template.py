"""Template rendering interfaces.

Defines abstract base classes for variable resolution and rendering.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from church_letters.db.models import (
    OrganizationContext,
    RecipientContext,
)


class BaseVariableResolver(ABC):
    """Abstract base class for variable resolution strategies.

    Turns the variables used by a template into a substitution map for a
    specific recipient and organization.
    """

    @abstractmethod
    def resolve(
        self,
        variables: list[str],
        recipient: RecipientContext,
        organization: OrganizationContext,
    ) -> dict[str, str]:
        """Resolve each variable to its value.

        Args:
            variables: Token names used by the template.
            recipient: The person the letter is addressed to.
            organization: The issuing organization.

        Returns:
            Mapping of token name to resolved value.

        Raises:
            UnknownVariableError: If the strategy rejects unknown tokens.
        """

    @abstractmethod
    def known_variables(self) -> list[str]:
        """Return the token names this resolver understands."""


class BaseTemplateRenderer(ABC):
    """Abstract base class for substitution strategies."""

    @abstractmethod
    def render(self, content: str, substitutions: Mapping[str, Any]) -> str:
        """Replace every token in ``content`` with its value.

        Args:
            content: Template content.
            substitutions: Token name to value mapping.

        Returns:
            The rendered text.
        """
