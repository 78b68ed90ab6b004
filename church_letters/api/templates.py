"""Letter template API routes.

Handles CRUD and search for letter templates. Domain errors raised by the
template store propagate to the application's exception handlers.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from church_letters.api.deps import get_component_factory, get_template_store, get_user_id
from church_letters.api.schemas import (
    TemplateCreateRequest,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdateRequest,
    VariableVocabularyResponse,
)
from church_letters.core.exceptions import LetterServiceError
from church_letters.core.factory import ComponentFactory
from church_letters.services.template_store import SUGGESTED_CATEGORIES, TemplateStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


def _unexpected(action: str, error: Exception) -> HTTPException:
    logger.error(f"Unexpected error {action}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred",
    )


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    search: str | None = Query(default=None, description="Case-insensitive name substring"),
    category: str | None = Query(default=None, description="Exact category"),
    store: TemplateStore = Depends(get_template_store),
) -> TemplateListResponse:
    """List templates, optionally filtered by name and category."""
    try:
        logger.info(f"Listing templates: search={search!r}, category={category!r}")

        templates = await store.list(search=search, category=category)

        return TemplateListResponse(
            templates=[TemplateResponse.model_validate(t) for t in templates],
            total=len(templates),
        )

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected("listing templates", e) from e


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    request: TemplateCreateRequest,
    store: TemplateStore = Depends(get_template_store),
    user_id: uuid.UUID | None = Depends(get_user_id),
) -> TemplateResponse:
    """Create a letter template.

    The variables list in the response is derived from the content.
    """
    try:
        logger.info(f"Creating template: {request.name!r}")

        template = await store.create(
            name=request.name,
            category=request.category,
            content=request.content,
            created_by=user_id,
        )
        return TemplateResponse.model_validate(template)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected("creating template", e) from e


@router.get("/variables", response_model=VariableVocabularyResponse)
async def list_variables(
    factory: ComponentFactory = Depends(get_component_factory),
) -> VariableVocabularyResponse:
    """List the variables an editor can insert and the suggested categories."""
    return VariableVocabularyResponse(
        variables=factory.get_variable_resolver().known_variables(),
        categories=list(SUGGESTED_CATEGORIES),
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: uuid.UUID,
    store: TemplateStore = Depends(get_template_store),
) -> TemplateResponse:
    """Get a template by ID."""
    try:
        template = await store.get(template_id)
        return TemplateResponse.model_validate(template)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected(f"fetching template {template_id}", e) from e


@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: uuid.UUID,
    request: TemplateUpdateRequest,
    store: TemplateStore = Depends(get_template_store),
) -> TemplateResponse:
    """Update name, category and/or content of a template."""
    try:
        changes = request.model_dump(exclude_unset=True)
        logger.info(f"Updating template {template_id}: {sorted(changes)}")

        template = await store.update(template_id, changes)
        return TemplateResponse.model_validate(template)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected(f"updating template {template_id}", e) from e


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: uuid.UUID,
    store: TemplateStore = Depends(get_template_store),
) -> None:
    """Delete a template. Letters already generated from it are kept."""
    try:
        await store.delete(template_id)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected(f"deleting template {template_id}", e) from e
