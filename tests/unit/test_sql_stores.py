"""Unit tests for the SQL repositories, run against in-memory SQLite."""

import asyncio
import datetime
import uuid

import pytest
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from church_letters.core.exceptions import ConflictError, NotFoundError, StoreError
from church_letters.db.models import Organization, Person
from church_letters.db.session import STARTER_TEMPLATES, seed_defaults
from church_letters.interfaces.store import LetterFilter, TemplateFilter
from church_letters.services.ledger import GenerationLedger
from church_letters.services.template_store import TemplateStore
from church_letters.strategies.stores.sql import (
    SqlDirectory,
    SqlLetterRepository,
    SqlTemplateRepository,
)
from church_letters.strategies.template_engine import TemplateRenderer, VariableResolver


def run_with_session(test_fn, foreign_keys: bool = False):
    """Run ``test_fn(session, org_id)`` against a fresh in-memory database.

    SQLite only enforces foreign keys when ``foreign_keys`` is set.
    """

    async def runner():
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        if foreign_keys:

            @event.listens_for(engine.sync_engine, "connect")
            def enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        try:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

            session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            async with session_maker() as session:
                organization = Organization(
                    name="Iglesia Central",
                    slug="iglesia-central",
                    pastor_name="Pastor Juan Gómez",
                )
                session.add(organization)
                await session.commit()

                await test_fn(session, organization.id)
        finally:
            await engine.dispose()

    asyncio.run(runner())


async def _add_person(session, org_id, **fields) -> uuid.UUID:
    person = Person(org_id=org_id, **fields)
    session.add(person)
    await session.commit()
    return person.id


class TestSqlTemplateRepository:
    """Test suite for SqlTemplateRepository."""

    def test_create_and_get(self):
        async def run_test(session, org_id):
            repo = SqlTemplateRepository(session, org_id)

            created = await repo.create_template(
                name="Carta",
                category="carta",
                content="{{nombre}} {{fecha}}",
                variables=["nombre", "fecha"],
            )
            fetched = await repo.get_template(created.id)

            assert fetched.id == created.id
            assert fetched.org_id == org_id
            assert fetched.variables == ["nombre", "fecha"]
            assert fetched.content == "{{nombre}} {{fecha}}"

        run_with_session(run_test)

    def test_duplicate_name_conflicts(self):
        async def run_test(session, org_id):
            repo = SqlTemplateRepository(session, org_id)
            await repo.create_template(name="Carta", category="carta", content="a", variables=[])

            with pytest.raises(ConflictError):
                await repo.create_template(name="Carta", category="otro", content="b", variables=[])

            # Session is usable after the rollback
            assert [t.name for t in await repo.list_templates()] == ["Carta"]

        run_with_session(run_test)

    def test_update_and_delete(self):
        async def run_test(session, org_id):
            repo = SqlTemplateRepository(session, org_id)
            created = await repo.create_template(
                name="Carta", category="carta", content="{{nombre}}", variables=["nombre"]
            )

            updated = await repo.update_template(
                created.id, {"content": "{{pastor}}", "variables": ["pastor"]}
            )
            assert updated.content == "{{pastor}}"
            assert updated.variables == ["pastor"]
            assert updated.name == "Carta"

            await repo.delete_template(created.id)
            with pytest.raises(NotFoundError):
                await repo.get_template(created.id)
            with pytest.raises(NotFoundError):
                await repo.update_template(created.id, {"name": "x"})
            with pytest.raises(NotFoundError):
                await repo.delete_template(created.id)

        run_with_session(run_test)

    def test_list_filters(self):
        async def run_test(session, org_id):
            repo = SqlTemplateRepository(session, org_id)
            for name, category in [
                ("Certificado de Bautismo", "certificado"),
                ("Carta de bienvenida", "carta"),
                ("Certificado 100%", "certificado"),
            ]:
                await repo.create_template(name=name, category=category, content="x", variables=[])

            names = [t.name for t in await repo.list_templates(TemplateFilter(search="certificado"))]
            assert names == ["Certificado 100%", "Certificado de Bautismo"]

            names = [t.name for t in await repo.list_templates(TemplateFilter(category="carta"))]
            assert names == ["Carta de bienvenida"]

            # Wildcards in the search term are literal
            names = [t.name for t in await repo.list_templates(TemplateFilter(search="100%"))]
            assert names == ["Certificado 100%"]

            assert len(await repo.list_templates()) == 3

        run_with_session(run_test)

    def test_scoped_to_organization(self):
        async def run_test(session, org_id):
            other_org = Organization(name="Otra", slug="otra")
            session.add(other_org)
            await session.commit()

            mine = SqlTemplateRepository(session, org_id)
            theirs = SqlTemplateRepository(session, other_org.id)
            created = await mine.create_template(name="Carta", category="c", content="x", variables=[])

            # Same name is allowed in another organization
            await theirs.create_template(name="Carta", category="c", content="y", variables=[])

            with pytest.raises(NotFoundError):
                await theirs.get_template(created.id)
            assert [t.content for t in await theirs.list_templates()] == ["y"]

        run_with_session(run_test)

    def test_unknown_organization_is_not_a_conflict(self):
        async def run_test(session, org_id):
            missing_org = uuid.uuid4()
            repo = SqlTemplateRepository(session, missing_org)

            with pytest.raises(NotFoundError) as exc_info:
                await repo.create_template(name="Carta", category="carta", content="x", variables=[])

            assert exc_info.value.entity == "Organization"
            assert exc_info.value.entity_id == missing_org

            # The existing organization can still use the name
            created = await SqlTemplateRepository(session, org_id).create_template(
                name="Carta", category="carta", content="x", variables=[]
            )
            assert created.org_id == org_id

        run_with_session(run_test, foreign_keys=True)

    def test_rename_to_taken_name_conflicts(self):
        async def run_test(session, org_id):
            repo = SqlTemplateRepository(session, org_id)
            await repo.create_template(name="Carta", category="carta", content="a", variables=[])
            other = await repo.create_template(
                name="Constancia", category="constancia", content="b", variables=[]
            )

            with pytest.raises(ConflictError):
                await repo.update_template(other.id, {"name": "Carta"})

            assert (await repo.get_template(other.id)).name == "Constancia"

        run_with_session(run_test, foreign_keys=True)

    def test_missing_table_raises_store_error(self):
        async def run_test(session, org_id):
            await session.execute(text("DROP TABLE letter_templates"))
            await session.commit()

            with pytest.raises(StoreError) as exc_info:
                await SqlTemplateRepository(session, org_id).list_templates()

            assert exc_info.value.error_code == "STORE_ERROR"
            assert exc_info.value.status_code == 503
            assert exc_info.value.context == {"action": "listing templates"}

            # Rolled back, so the session keeps working
            organization = await SqlDirectory(session, org_id).get_organization()
            assert organization.name == "Iglesia Central"

        run_with_session(run_test)


class TestSqlLetterRepositoryAndDirectory:
    """Test suite for SqlLetterRepository and SqlDirectory."""

    def test_letters_most_recent_first(self):
        async def run_test(session, org_id):
            repo = SqlLetterRepository(session, org_id)
            template_id, recipient_id = uuid.uuid4(), uuid.uuid4()
            base = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)

            ids = []
            for minutes in (0, 5, 10):
                letter = await repo.create_generated_letter(
                    template_id=template_id,
                    template_name="Carta",
                    recipient_id=recipient_id if minutes != 5 else uuid.uuid4(),
                    recipient_name="Ana",
                    content=f"v{minutes}",
                    generated_by=None,
                    created_at=base + datetime.timedelta(minutes=minutes),
                )
                ids.append(letter.id)

            assert [l.id for l in await repo.list_generated_letters()] == ids[::-1]

            filtered = await repo.list_generated_letters(LetterFilter(recipient_id=recipient_id))
            assert [l.content for l in filtered] == ["v10", "v0"]

            assert (await repo.get_generated_letter(ids[1])).content == "v5"
            with pytest.raises(NotFoundError):
                await repo.get_generated_letter(uuid.uuid4())

        run_with_session(run_test)

    def test_equal_timestamps_newest_insertion_first(self):
        async def run_test(session, org_id):
            repo = SqlLetterRepository(session, org_id)
            created_at = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)

            ids = []
            for index in range(3):
                letter = await repo.create_generated_letter(
                    template_id=uuid.uuid4(),
                    template_name="Carta",
                    recipient_id=uuid.uuid4(),
                    recipient_name="Ana",
                    content=f"v{index}",
                    generated_by=None,
                    created_at=created_at,
                )
                ids.append(letter.id)

            assert [l.id for l in await repo.list_generated_letters()] == ids[::-1]

        run_with_session(run_test)

    def test_missing_table_raises_store_error(self):
        async def run_test(session, org_id):
            repo = SqlLetterRepository(session, org_id)
            await session.execute(text("DROP TABLE generated_letters"))
            await session.commit()

            with pytest.raises(StoreError):
                await repo.list_generated_letters()
            with pytest.raises(StoreError):
                await repo.get_generated_letter(uuid.uuid4())

            # Templates live in another table and are unaffected
            assert await SqlTemplateRepository(session, org_id).list_templates() == []

        run_with_session(run_test)

        run_with_session(run_test)

    def test_directory_lookups(self):
        async def run_test(session, org_id):
            directory = SqlDirectory(session, org_id)
            person_id = await _add_person(session, org_id, full_name="Luis Díaz")

            person = await directory.get_person(person_id)
            assert person.full_name == "Luis Díaz"
            assert (person.ministry, person.phone, person.email) == ("", "", "")

            organization = await directory.get_organization()
            assert organization.name == "Iglesia Central"
            assert organization.pastor_name == "Pastor Juan Gómez"

            with pytest.raises(NotFoundError):
                await directory.get_person(uuid.uuid4())
            with pytest.raises(NotFoundError):
                await SqlDirectory(session, uuid.uuid4()).get_organization()

        run_with_session(run_test)


class TestSqlPipeline:
    """End-to-end generation through the services on the SQL store."""

    def test_generate_then_delete_template(self):
        async def run_test(session, org_id):
            templates = SqlTemplateRepository(session, org_id)
            store = TemplateStore(templates)
            ledger = GenerationLedger(
                templates=templates,
                letters=SqlLetterRepository(session, org_id),
                directory=SqlDirectory(session, org_id),
                resolver=VariableResolver(clock=lambda: datetime.date(2024, 1, 1)),
                renderer=TemplateRenderer(),
            )
            person_id = await _add_person(
                session, org_id, full_name="Ana Pérez", ministry="Alabanza"
            )

            template = await store.create(
                "Servicio", "certificado", "{{nombre}} sirve en {{ministerio}} ({{fecha}})"
            )
            letter = await ledger.generate(template.id, person_id)
            await store.delete(template.id)

            stored = await ledger.get(letter.id)
            assert stored.content == "Ana Pérez sirve en Alabanza (1 de enero de 2024)"
            assert stored.template_name == "Servicio"

        run_with_session(run_test)

    def test_seed_defaults_runs_once(self):
        async def run_test(session, org_id):
            # An organization already exists, so nothing is seeded
            assert await seed_defaults(session) is False
            assert await SqlTemplateRepository(session, org_id).list_templates() == []

        run_with_session(run_test)


class TestSeedDefaults:
    """Test suite for seed_defaults on an empty database."""

    def test_seeds_starter_templates(self):
        async def runner():
            engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all)
                session_maker = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
                async with session_maker() as session:
                    from church_letters.db.session import DEFAULT_ORG_ID

                    assert await seed_defaults(session) is True

                    templates = await SqlTemplateRepository(session, DEFAULT_ORG_ID).list_templates()
                    assert len(templates) == len(STARTER_TEMPLATES)
                    assert all(t.variables for t in templates)
            finally:
                await engine.dispose()

        asyncio.run(runner())
