from typing import Dict

from fastapi import APIRouter, Depends, HTTPException
import logging

from app.api.v1.deps import get_orchestrator, get_settings
from app.core.config import Settings
from app.domain.logic.checksum import compute_check_digit
from app.domain.models.mrz_data import ParsedRecord
from app.schemas.request import CheckDigitRequest, MRZParseRequest
from app.schemas.response import CheckDigitResponse, MRZParseResponse
from app.services.orchestrator import MRZParseOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_length(text: str, settings: Settings) -> None:
    if len(text) > settings.MAX_INPUT_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"MRZ text too long ({len(text)} > {settings.MAX_INPUT_LENGTH} characters)",
        )


def _parse_request(
    request: MRZParseRequest,
    settings: Settings,
    orchestrator: MRZParseOrchestrator,
) -> ParsedRecord:
    _check_length(request.text, settings)

    if request.correct_name_fillers is not None:
        config = dict(orchestrator.config, correct_name_fillers=request.correct_name_fillers)
        orchestrator = MRZParseOrchestrator(config=config)

    try:
        return orchestrator.parse(request.text)
    except Exception as e:
        logger.error(f"MRZ parsing failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal error: {e}")


@router.post("/parse", response_model=MRZParseResponse)
async def parse_mrz_text(
    request: MRZParseRequest,
    settings: Settings = Depends(get_settings),
    orchestrator: MRZParseOrchestrator = Depends(get_orchestrator),
):
    """
    Parse OCR'd MRZ text (TD1, TD2 or TD3) into structured, check digit validated fields.

    Malformed MRZ content is not an HTTP error: the response carries the record
    with its parsing errors and per-field validity.
    """
    record = _parse_request(request, settings, orchestrator)
    return MRZParseResponse(valid=record.valid, data=record, checks=record.checks())


@router.post("/readable")
async def readable_mrz_text(
    request: MRZParseRequest,
    settings: Settings = Depends(get_settings),
    orchestrator: MRZParseOrchestrator = Depends(get_orchestrator),
) -> Dict[str, str]:
    """Parse MRZ text and return display labels with formatted dates."""
    record = _parse_request(request, settings, orchestrator)
    return record.to_readable_format(settings.DATE_OUTPUT_FORMAT)


@router.post("/check-digit", response_model=CheckDigitResponse)
async def check_digit(request: CheckDigitRequest, settings: Settings = Depends(get_settings)):
    """Compute the ICAO 9303 check digit of an MRZ field."""
    _check_length(request.data, settings)
    return CheckDigitResponse(data=request.data, check_digit=compute_check_digit(request.data))
