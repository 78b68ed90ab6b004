"""FastAPI routers and dependencies."""

from church_letters.api.deps import (
    get_db,
    get_ledger,
    get_org_id,
    get_template_store,
    get_user_id,
)
from church_letters.api.letters import router as letters_router
from church_letters.api.templates import router as templates_router

__all__ = [
    "get_db",
    "get_ledger",
    "get_org_id",
    "get_template_store",
    "get_user_id",
    "letters_router",
    "templates_router",
]
