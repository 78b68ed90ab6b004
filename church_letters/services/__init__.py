"""Letter pipeline services."""

from church_letters.services.ledger import GenerationLedger
from church_letters.services.template_store import SUGGESTED_CATEGORIES, TemplateStore

__all__ = [
    "GenerationLedger",
    "SUGGESTED_CATEGORIES",
    "TemplateStore",
]
