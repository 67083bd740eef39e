"""
API Routes - Analyze Endpoints
Older plugin builds call the analysis under several paths;
all of them are served by one pipeline here.
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import json
import logging

from agents.suggestion_pipeline import InvalidRequestError, SuggestionPipeline
from api.dependencies import get_pipeline
from providers.gateway import MOCK_SOURCE
from schemas.suggestions import ErrorResponse, ResponseEnvelope

logger = logging.getLogger(__name__)

router = APIRouter()

ANALYZE_PATHS = ("/analyze", "/analyze-foundry", "/analyze-anonymous", "/figma-proxy", "/cors-proxy")

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, x-api-key",
    "Access-Control-Max-Age": "86400",
}


def _bad_request(error: str, received: dict) -> JSONResponse:
    body = ErrorResponse(error=error, received=received)
    return JSONResponse(status_code=400, content=body.model_dump(), headers=PREFLIGHT_HEADERS)


async def analyze(request: Request, pipeline: SuggestionPipeline = Depends(get_pipeline)):
    """
    POST /api/analyze

    Accepts ``{"elements": [...]}`` or ``{"data": {"elements": [...]}}``.
    Always 200 with a response envelope, except for a structurally invalid
    body (400).
    """
    logger.info(
        "Received analysis request: origin=%s, authenticated=%s",
        request.headers.get("origin"),
        bool(request.headers.get("x-api-key")),
    )

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _bad_request(
            "Invalid request: JSON body is required",
            {"elementsType": "null", "elementsLength": None, "bodyKeys": []},
        )

    try:
        envelope: ResponseEnvelope = await run_in_threadpool(pipeline.process, body)
    except InvalidRequestError as e:
        return _bad_request(str(e), e.received)
    except Exception as e:
        logger.error(f"Analysis error: {e}", exc_info=True)
        envelope = ResponseEnvelope(
            success=False,
            suggestions=[],
            sourceLabel=MOCK_SOURCE,
            diagnostic=f"Analysis failed: {e}",
        )

    return JSONResponse(
        status_code=200,
        content=envelope.model_dump(mode="json"),
        headers=PREFLIGHT_HEADERS,
    )


async def preflight():
    """CORS preflight for clients that send a bare OPTIONS."""
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


for _path in ANALYZE_PATHS:
    router.add_api_route(_path, analyze, methods=["POST"], response_model=ResponseEnvelope)
    router.add_api_route(_path, preflight, methods=["OPTIONS"], include_in_schema=False)


@router.get("/cors-test")
async def cors_test(request: Request):
    """Echo the caller's origin so plugin developers can check CORS wiring."""
    origin = request.headers.get("origin", "unknown")
    logger.info(f"CORS test from origin: {origin}")
    return JSONResponse(
        content={
            "message": "CORS test successful",
            "origin": origin,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "headers": PREFLIGHT_HEADERS,
        },
        headers=PREFLIGHT_HEADERS,
    )
