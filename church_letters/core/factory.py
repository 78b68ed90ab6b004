"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from church_letters.core.config import Settings, get_settings
from church_letters.interfaces.directory import Clock, system_clock
from church_letters.interfaces.exporter import BaseLetterExporter
from church_letters.interfaces.template import BaseTemplateRenderer, BaseVariableResolver
from church_letters.strategies.exporters import DocxLetterExporter
from church_letters.strategies.template_engine import TemplateRenderer, VariableResolver

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        resolver = factory.get_variable_resolver()
        renderer = factory.get_renderer()
        exporter = factory.get_exporter("docx")
        ```
    """

    def __init__(self, settings: Settings | None = None, clock: Clock | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
            clock: Date source for the ``fecha`` variable. Defaults to today.
        """
        self._settings = settings or get_settings()
        self._clock = clock or system_clock
        self._resolver_cache: BaseVariableResolver | None = None
        self._renderer_cache: BaseTemplateRenderer | None = None
        self._exporter_cache: dict[str, BaseLetterExporter] = {}

    def get_variable_resolver(self, strict: bool | None = None) -> BaseVariableResolver:
        """Get a variable resolver.

        Args:
            strict: Override ``settings.strict_variables`` for this instance.

        Returns:
            A BaseVariableResolver implementation instance.
        """
        # Bypass cache when the caller overrides strictness
        if strict is not None:
            logger.info(f"Instantiating variable resolver with strict={strict}")
            return VariableResolver(strict=strict, clock=self._clock)

        if self._resolver_cache is None:
            logger.info(
                f"Instantiating variable resolver: strict={self._settings.strict_variables}"
            )
            self._resolver_cache = VariableResolver(
                strict=self._settings.strict_variables,
                clock=self._clock,
            )

        return self._resolver_cache

    def get_renderer(self) -> BaseTemplateRenderer:
        """Get the template renderer.

        Returns:
            A BaseTemplateRenderer implementation instance.
        """
        if self._renderer_cache is None:
            self._renderer_cache = TemplateRenderer()
        return self._renderer_cache

    def get_exporter(self, export_format: str = "docx") -> BaseLetterExporter:
        """Get an exporter for the requested document format.

        Args:
            export_format: The export format to instantiate.

        Returns:
            A BaseLetterExporter implementation instance.

        Raises:
            ValueError: If the format is unknown.
        """
        if export_format not in self._exporter_cache:
            logger.info(f"Instantiating exporter: {export_format}")

            match export_format:
                case "docx":
                    self._exporter_cache[export_format] = DocxLetterExporter()
                case _:
                    raise ValueError(
                        f"Unknown export format: {export_format}. Valid options: 'docx'"
                    )

        return self._exporter_cache[export_format]

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._resolver_cache = None
        self._renderer_cache = None
        self._exporter_cache.clear()
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
