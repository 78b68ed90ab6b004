"""Shared fixtures for the letter pipeline tests."""

import datetime
import itertools
import os
import tempfile
import uuid

import pytest

# Keep test runs from writing log files into the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="church-letters-logs-"))

from church_letters.db.models import OrganizationContext, RecipientContext  # noqa: E402
from church_letters.services.ledger import GenerationLedger  # noqa: E402
from church_letters.services.template_store import TemplateStore  # noqa: E402
from church_letters.strategies.stores.memory import (  # noqa: E402
    MemoryDirectory,
    MemoryLetterRepository,
    MemoryTemplateRepository,
)
from church_letters.strategies.template_engine import (  # noqa: E402
    TemplateRenderer,
    VariableResolver,
)

FIXED_DATE = datetime.date(2024, 1, 1)


def ticking_clock(start: datetime.datetime | None = None):
    """Return a ``now`` function that advances one second per call."""
    start = start or datetime.datetime(2024, 1, 1, 9, 0, tzinfo=datetime.timezone.utc)
    ticks = itertools.count()
    return lambda: start + datetime.timedelta(seconds=next(ticks))


@pytest.fixture
def org_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def organization() -> OrganizationContext:
    return OrganizationContext(name="Iglesia Central", pastor_name="Pastor Juan Gómez")


@pytest.fixture
def recipient() -> RecipientContext:
    return RecipientContext(
        id=uuid.uuid4(),
        full_name="Ana Pérez",
        ministry="Alabanza",
        phone="555-0100",
        email="ana@example.com",
    )


@pytest.fixture
def bare_recipient() -> RecipientContext:
    """Recipient without optional contact fields."""
    return RecipientContext(id=uuid.uuid4(), full_name="Luis Díaz", ministry=None)


@pytest.fixture
def template_repository(org_id) -> MemoryTemplateRepository:
    return MemoryTemplateRepository(org_id)


@pytest.fixture
def letter_repository(org_id) -> MemoryLetterRepository:
    return MemoryLetterRepository(org_id)


@pytest.fixture
def directory(organization, recipient, bare_recipient) -> MemoryDirectory:
    return MemoryDirectory(organization, [recipient, bare_recipient])


@pytest.fixture
def store(template_repository) -> TemplateStore:
    return TemplateStore(template_repository)


@pytest.fixture
def resolver() -> VariableResolver:
    return VariableResolver(clock=lambda: FIXED_DATE)


@pytest.fixture
def ledger(template_repository, letter_repository, directory, resolver) -> GenerationLedger:
    return GenerationLedger(
        templates=template_repository,
        letters=letter_repository,
        directory=directory,
        resolver=resolver,
        renderer=TemplateRenderer(),
        now=ticking_clock(),
    )
