"""Concrete strategy implementations."""

from church_letters.strategies.exporters import DocxLetterExporter
from church_letters.strategies.stores import (
    MemoryDirectory,
    MemoryLetterRepository,
    MemoryTemplateRepository,
    SqlDirectory,
    SqlLetterRepository,
    SqlTemplateRepository,
)
from church_letters.strategies.template_engine import TemplateRenderer, VariableResolver

__all__ = [
    "DocxLetterExporter",
    "MemoryDirectory",
    "MemoryLetterRepository",
    "MemoryTemplateRepository",
    "SqlDirectory",
    "SqlLetterRepository",
    "SqlTemplateRepository",
    "TemplateRenderer",
    "VariableResolver",
]
