"""Template renderer strategy.

Substitutes ``{{token}}`` placeholders with values from a mapping.
"""

import logging
from collections.abc import Mapping
from typing import Any

from church_letters.interfaces.template import BaseTemplateRenderer
from church_letters.strategies.template_engine.variables import TOKEN_PATTERN, token_name

logger = logging.getLogger(__name__)


class TemplateRenderer(BaseTemplateRenderer):
    """Single-pass token substitution.

    Each match is replaced as a whole and the inserted value is never
    scanned again, so a value containing ``{{...}}`` lands in the output
    verbatim. Keys missing from the mapping render as an empty string.
    Braces that do not form a token are left alone.
    """

    def render(self, content: str, substitutions: Mapping[str, Any]) -> str:
        """Replace every token in ``content`` with its value.

        Args:
            content: Template content.
            substitutions: Token name to value mapping. Non-string values
                are converted with ``str``; ``None`` renders as empty.

        Returns:
            The rendered text.
        """
        missing: set[str] = set()

        def _replace(match) -> str:
            name = token_name(match.group(1))
            if name not in substitutions:
                missing.add(name)
                return ""
            value = substitutions[name]
            return "" if value is None else str(value)

        rendered = TOKEN_PATTERN.sub(_replace, content or "")

        if missing:
            logger.debug(f"Rendered missing tokens as empty: {sorted(missing)}")

        return rendered
