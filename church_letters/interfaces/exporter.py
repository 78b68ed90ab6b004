"""Letter export interface."""

from abc import ABC, abstractmethod

from church_letters.db.models import GeneratedLetterRead


class BaseLetterExporter(ABC):
    """Abstract base class for generated letter export formats."""

    @abstractmethod
    def export(self, letter: GeneratedLetterRead) -> bytes:
        """Serialize a generated letter to a downloadable document.

        Args:
            letter: The generated letter snapshot.

        Returns:
            The document bytes.
        """

    @property
    @abstractmethod
    def media_type(self) -> str:
        """Return the MIME type of exported documents."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """Return the file extension, including the leading dot."""
