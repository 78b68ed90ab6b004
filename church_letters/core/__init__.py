"""Core configuration, errors and factory components."""

from church_letters.core.config import Settings, get_settings
from church_letters.core.exceptions import (
    ConflictError,
    LetterServiceError,
    NotFoundError,
    StoreError,
    UnknownVariableError,
    ValidationError,
)
from church_letters.core.factory import ComponentFactory, get_factory

__all__ = [
    "ComponentFactory",
    "ConflictError",
    "LetterServiceError",
    "NotFoundError",
    "Settings",
    "StoreError",
    "UnknownVariableError",
    "ValidationError",
    "get_factory",
    "get_settings",
]
