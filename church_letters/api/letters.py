"""Generated letter API routes.

Handles letter generation, preview, history and .docx download. There
are no update or delete routes: generated letters are append-only.
"""

import logging
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from church_letters.api.deps import get_exporter, get_ledger, get_user_id
from church_letters.api.schemas import (
    GeneratedLetterListResponse,
    GeneratedLetterResponse,
    GenerateLetterRequest,
    LetterPreviewResponse,
)
from church_letters.core.exceptions import LetterServiceError
from church_letters.interfaces.exporter import BaseLetterExporter
from church_letters.interfaces.store import LetterFilter
from church_letters.services.ledger import GenerationLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/letters", tags=["letters"])


def _unexpected(action: str, error: Exception) -> HTTPException:
    logger.error(f"Unexpected error {action}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred",
    )


def _download_name(template_name: str, recipient_name: str, extension: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9]+", "_", f"{template_name} {recipient_name}").strip("_")
    return f"{stem or 'carta'}{extension}"


@router.post(
    "/generate",
    response_model=GeneratedLetterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_letter(
    request: GenerateLetterRequest,
    ledger: GenerationLedger = Depends(get_ledger),
    user_id: uuid.UUID | None = Depends(get_user_id),
) -> GeneratedLetterResponse:
    """Render a template for a recipient and record the letter."""
    try:
        logger.info(
            f"Generating letter: template={request.template_id}, "
            f"recipient={request.recipient_id}"
        )

        letter = await ledger.generate(
            request.template_id,
            request.recipient_id,
            generated_by=user_id,
        )
        return GeneratedLetterResponse.model_validate(letter)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected("generating letter", e) from e


@router.post("/preview", response_model=LetterPreviewResponse)
async def preview_letter(
    request: GenerateLetterRequest,
    ledger: GenerationLedger = Depends(get_ledger),
) -> LetterPreviewResponse:
    """Render a template for a recipient without recording anything."""
    try:
        preview = await ledger.preview(request.template_id, request.recipient_id)
        return LetterPreviewResponse.model_validate(preview)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected("previewing letter", e) from e


@router.get("", response_model=GeneratedLetterListResponse)
async def list_letters(
    template_id: uuid.UUID | None = Query(default=None),
    recipient_id: uuid.UUID | None = Query(default=None),
    ledger: GenerationLedger = Depends(get_ledger),
) -> GeneratedLetterListResponse:
    """List generated letters, most recent first."""
    try:
        letters = await ledger.list(
            LetterFilter(template_id=template_id, recipient_id=recipient_id)
        )
        return GeneratedLetterListResponse(
            letters=[GeneratedLetterResponse.model_validate(letter) for letter in letters],
            total=len(letters),
        )

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected("listing letters", e) from e


@router.get("/{letter_id}", response_model=GeneratedLetterResponse)
async def get_letter(
    letter_id: uuid.UUID,
    ledger: GenerationLedger = Depends(get_ledger),
) -> GeneratedLetterResponse:
    """Get a generated letter by ID."""
    try:
        letter = await ledger.get(letter_id)
        return GeneratedLetterResponse.model_validate(letter)

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected(f"fetching letter {letter_id}", e) from e


@router.get("/{letter_id}/download")
async def download_letter(
    letter_id: uuid.UUID,
    ledger: GenerationLedger = Depends(get_ledger),
    exporter: BaseLetterExporter = Depends(get_exporter),
) -> Response:
    """Download a generated letter as a Word document."""
    try:
        letter = await ledger.get(letter_id)
        filename = _download_name(letter.template_name, letter.recipient_name, exporter.extension)

        return Response(
            content=exporter.export(letter),
            media_type=exporter.media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except LetterServiceError:
        raise
    except Exception as e:
        raise _unexpected(f"exporting letter {letter_id}", e) from e
