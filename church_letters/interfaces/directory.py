"""Lookup interfaces for recipients and the organization context."""

import datetime
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable

from church_letters.db.models import (
    OrganizationContext,
    RecipientContext,
)

# Returns the date used for the ``fecha`` variable.
Clock = Callable[[], datetime.date]


def system_clock() -> datetime.date:
    """Return today's local date."""
    return datetime.date.today()


class BaseDirectory(ABC):
    """Abstract base class for recipient and organization lookups."""

    @abstractmethod
    async def get_person(self, person_id: uuid.UUID) -> RecipientContext:
        """Fetch the recipient supplying substitution values.

        Raises:
            NotFoundError: If the person does not exist.
        """

    @abstractmethod
    async def get_organization(self) -> OrganizationContext:
        """Fetch the organization the directory is scoped to.

        Raises:
            NotFoundError: If the organization does not exist.
        """
