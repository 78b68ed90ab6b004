"""Unit tests for the variable resolver."""

import datetime

import pytest

from church_letters.core.config import Settings
from church_letters.core.exceptions import UnknownVariableError, ValidationError
from church_letters.core.factory import ComponentFactory, get_factory
from church_letters.db.models import OrganizationContext
from church_letters.strategies.template_engine import resolver as resolver_module
from church_letters.strategies.template_engine import (
    VARIABLE_RESOLVERS,
    VariableResolver,
    format_spanish_date,
)


class TestFormatSpanishDate:
    """Test suite for format_spanish_date."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (datetime.date(2024, 1, 1), "1 de enero de 2024"),
            (datetime.date(2024, 5, 5), "5 de mayo de 2024"),
            (datetime.date(2026, 10, 17), "17 de octubre de 2026"),
            (datetime.date(1999, 12, 31), "31 de diciembre de 1999"),
        ],
    )
    def test_long_form(self, value, expected):
        assert format_spanish_date(value) == expected


class TestVariableResolver:
    """Test suite for VariableResolver."""

    def test_full_vocabulary(self, resolver, recipient, organization):
        """Every known variable resolves from recipient, organization or clock."""
        values = resolver.resolve(list(VARIABLE_RESOLVERS), recipient, organization)

        assert values == {
            "nombre": "Ana Pérez",
            "fecha": "1 de enero de 2024",
            "iglesia": "Iglesia Central",
            "pastor": "Pastor Juan Gómez",
            "ministerio": "Alabanza",
            "telefono": "555-0100",
            "email": "ana@example.com",
        }

    def test_missing_optional_fields_resolve_empty(self, resolver, bare_recipient):
        """Absent ministry, contact fields and pastor become empty strings."""
        organization = OrganizationContext(name="Iglesia Nueva", pastor_name=None)

        values = resolver.resolve(
            ["ministerio", "telefono", "email", "pastor", "iglesia"],
            bare_recipient,
            organization,
        )

        assert values == {
            "ministerio": "",
            "telefono": "",
            "email": "",
            "pastor": "",
            "iglesia": "Iglesia Nueva",
        }

    def test_unknown_variable_resolves_empty(self, resolver, recipient, organization):
        """Lenient mode never fails on unknown tokens."""
        values = resolver.resolve(["nombre", "bautismo"], recipient, organization)

        assert values == {"nombre": "Ana Pérez", "bautismo": ""}

    def test_strict_mode_rejects_unknown(self, recipient, organization):
        """Strict mode lists every unknown token."""
        resolver = VariableResolver(strict=True)

        with pytest.raises(UnknownVariableError) as exc_info:
            resolver.resolve(["nombre", "foo", "bar"], recipient, organization)

        assert exc_info.value.unknown == ["foo", "bar"]
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.to_dict()["error_code"] == "UNKNOWN_VARIABLE"

    def test_strict_mode_accepts_known(self, recipient, organization):
        resolver = VariableResolver(strict=True, clock=lambda: datetime.date(2024, 3, 2))

        values = resolver.resolve(["fecha"], recipient, organization)

        assert values == {"fecha": "2 de marzo de 2024"}

    def test_custom_vocabulary(self, recipient, organization):
        """New variables plug in through the lookup table."""
        resolver = VariableResolver(
            resolvers={**VARIABLE_RESOLVERS, "inicial": lambda p, o, d: p.full_name[0]},
        )

        assert resolver.resolve(["inicial"], recipient, organization) == {"inicial": "A"}
        assert "inicial" in resolver.known_variables()

    def test_known_variables(self, resolver):
        assert resolver.known_variables() == [
            "nombre",
            "fecha",
            "iglesia",
            "pastor",
            "ministerio",
            "telefono",
            "email",
        ]

    def test_default_clock_is_system_clock(self, monkeypatch, recipient, organization):
        monkeypatch.setattr(resolver_module, "system_clock", lambda: datetime.date(2023, 12, 25))

        values = VariableResolver().resolve(["fecha"], recipient, organization)

        assert values == {"fecha": "25 de diciembre de 2023"}


class TestComponentFactory:
    """Test suite for ComponentFactory wiring of the resolver."""

    def test_strictness_follows_settings(self, tmp_path):
        factory = ComponentFactory(Settings(strict_variables=True, log_dir=tmp_path))

        assert factory.get_variable_resolver().strict is True

    def test_override_bypasses_cache(self, tmp_path):
        factory = ComponentFactory(Settings(log_dir=tmp_path))
        cached = factory.get_variable_resolver()

        strict = factory.get_variable_resolver(strict=True)

        assert strict.strict is True
        assert factory.get_variable_resolver() is cached
        assert cached.strict is False

    def test_unknown_export_format(self, tmp_path):
        factory = ComponentFactory(Settings(log_dir=tmp_path))

        with pytest.raises(ValueError):
            factory.get_exporter("pdf")

    def test_global_factory_is_shared(self):
        assert get_factory() is get_factory()
