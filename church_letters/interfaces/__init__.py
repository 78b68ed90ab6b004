"""Abstract base classes for the letter pipeline collaborators."""

from church_letters.interfaces.directory import BaseDirectory, Clock, system_clock
from church_letters.interfaces.exporter import BaseLetterExporter
from church_letters.interfaces.store import (
    BaseLetterRepository,
    BaseTemplateRepository,
    LetterFilter,
    TemplateFilter,
)
from church_letters.interfaces.template import BaseTemplateRenderer, BaseVariableResolver

__all__ = [
    "BaseDirectory",
    "BaseLetterExporter",
    "BaseLetterRepository",
    "BaseTemplateRepository",
    "BaseTemplateRenderer",
    "BaseVariableResolver",
    "Clock",
    "LetterFilter",
    "TemplateFilter",
    "system_clock",
]
