"""Error taxonomy for the letter pipeline.

Every error carries a stable ``error_code`` and an HTTP status so the API
layer can turn it into the standard error envelope without inspecting
messages.
"""

from typing import Any


class LetterServiceError(Exception):
    """Base exception for all letter service errors."""

    error_code = "LETTER_SERVICE_ERROR"
    status_code = 500

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": self.message,
            "error_code": self.error_code,
            "extra": self.context or None,
        }


class ValidationError(LetterServiceError):
    """A required field is empty or otherwise invalid."""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class ConflictError(ValidationError):
    """A template with the same name already exists in the organization."""

    error_code = "CONFLICT"
    status_code = 409


class UnknownVariableError(ValidationError):
    """Template uses tokens outside the known vocabulary (strict mode only)."""

    error_code = "UNKNOWN_VARIABLE"

    def __init__(self, unknown: list[str]) -> None:
        self.unknown = unknown
        super().__init__(
            f"Unknown template variables: {', '.join(unknown)}",
            unknown=unknown,
        )


class NotFoundError(LetterServiceError):
    """Referenced template, recipient or letter does not exist."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} not found: {entity_id}",
            entity=entity,
            id=str(entity_id),
        )


class StoreError(LetterServiceError):
    """The backing store is unavailable. Callers decide whether to retry."""

    error_code = "STORE_ERROR"
    status_code = 503
