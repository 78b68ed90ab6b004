"""Persistence strategy implementations."""

from church_letters.strategies.stores.memory import (
    MemoryDirectory,
    MemoryLetterRepository,
    MemoryTemplateRepository,
)
from church_letters.strategies.stores.sql import (
    SqlDirectory,
    SqlLetterRepository,
    SqlTemplateRepository,
)

__all__ = [
    "MemoryDirectory",
    "MemoryLetterRepository",
    "MemoryTemplateRepository",
    "SqlDirectory",
    "SqlLetterRepository",
    "SqlTemplateRepository",
]
