"""Template engine strategies.

Implements token extraction, variable resolution and substitution for
letter templates.
"""

from church_letters.strategies.template_engine.renderer import TemplateRenderer
from church_letters.strategies.template_engine.resolver import (
    VARIABLE_RESOLVERS,
    VariableResolver,
    format_spanish_date,
)
from church_letters.strategies.template_engine.variables import TOKEN_PATTERN, extract_variables

__all__ = [
    "TOKEN_PATTERN",
    "VARIABLE_RESOLVERS",
    "TemplateRenderer",
    "VariableResolver",
    "extract_variables",
    "format_spanish_date",
]
