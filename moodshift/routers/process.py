"""POST /processUserInput: text in, supportive reply plus audio locator out."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from moodshift.pipeline import (
    AudioSynthesisFailed,
    ProcessOutcome,
    RequestValidationError,
    ResponsePipeline,
)
from moodshift.schemas import ErrorResponse, ProcessRequest, ProcessResponse

log = logging.getLogger(__name__)

router = APIRouter()

_OTHER_METHODS = ["GET", "PUT", "PATCH", "DELETE"]


def _error(status_code: int, error: str, response: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, response=response)
    return JSONResponse(body.model_dump(exclude_none=True), status_code=status_code)


@router.api_route("/", methods=_OTHER_METHODS, include_in_schema=False)
@router.api_route("/processUserInput", methods=_OTHER_METHODS, include_in_schema=False)
async def method_not_allowed() -> JSONResponse:
    return _error(405, "Method not allowed")


@router.post("/", include_in_schema=False)
@router.post("/processUserInput", response_model=ProcessResponse)
async def process_user_input(request: Request) -> JSONResponse:
    """Generate (or fetch from cache) a reply and its synthesized audio."""
    try:
        payload = await request.json()
    except ValueError:
        return _error(400, "Invalid JSON body")
    if not isinstance(payload, dict):
        return _error(400, "Missing required fields")

    try:
        req = ProcessRequest.model_validate(payload)
    except ValidationError as exc:
        log.info("Rejected request body: %s", exc.errors()[:3])
        return _error(400, "Missing required fields")

    pipeline: ResponsePipeline = request.app.state.runtime.pipeline
    try:
        outcome: ProcessOutcome = await pipeline.process(req)
    except RequestValidationError:
        return _error(400, "Missing required fields")
    except AudioSynthesisFailed as exc:
        return _error(500, "Audio synthesis failed", exc.response)
    except Exception as exc:
        log.exception("Unhandled error processing request")
        return _error(500, str(exc) or exc.__class__.__name__)

    body = ProcessResponse(
        response=outcome.response,
        audio_url=outcome.audio_url,
        voice_id=outcome.voice_id,
        engine=outcome.engine,
    )
    return JSONResponse(body.model_dump(by_alias=True))
