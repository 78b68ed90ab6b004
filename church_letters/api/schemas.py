"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Template Schemas
# =============================================================================


class TemplateCreateRequest(BaseModel):
    """Request schema for creating a letter template.

    Emptiness of ``name`` and ``content`` is checked by the template store
    so every client gets the same VALIDATION_ERROR envelope.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255, description="Template name, unique per organization")
    category: str | None = Field(
        default=None,
        max_length=100,
        description="Free-form category such as 'carta' or 'certificado'",
    )
    content: str = Field(description="Template text with {{variable}} placeholders")


class TemplateUpdateRequest(BaseModel):
    """Partial update for a letter template.

    ``variables`` is not accepted: it is always derived from ``content``.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    content: str | None = None


class TemplateResponse(BaseModel):
    """Response schema for a letter template."""

    id: uuid.UUID
    name: str
    category: str
    content: str
    variables: list[str]
    created_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TemplateListResponse(BaseModel):
    """Response for listing templates."""

    templates: list[TemplateResponse]
    total: int


class VariableVocabularyResponse(BaseModel):
    """Variables that resolve to recipient or organization values."""

    variables: list[str]
    categories: list[str]


# =============================================================================
# Letter Schemas
# =============================================================================


class GenerateLetterRequest(BaseModel):
    """Request to render a template for a recipient."""

    template_id: uuid.UUID
    recipient_id: uuid.UUID


class GeneratedLetterResponse(BaseModel):
    """Response schema for a generated letter."""

    id: uuid.UUID
    template_id: uuid.UUID
    template_name: str
    recipient_id: uuid.UUID
    recipient_name: str
    content: str
    generated_by: uuid.UUID | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class GeneratedLetterListResponse(BaseModel):
    """Response for listing generated letters."""

    letters: list[GeneratedLetterResponse]
    total: int


class LetterPreviewResponse(BaseModel):
    """Rendered letter that was not stored."""

    template_id: uuid.UUID
    template_name: str
    recipient_id: uuid.UUID
    recipient_name: str
    variables: list[str]
    content: str

    model_config = {"from_attributes": True}


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")
