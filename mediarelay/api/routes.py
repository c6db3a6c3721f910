"""
FastAPI route definitions for the media relay service.

- GET|POST /brat*   : render text on bratgenerator.com, return uploaded image URL
- GET|POST /ytmp3   : resolve YouTube audio, return uploaded audio URL + metadata
- GET      /health  : liveness

Both pipeline routes accept parameters from the query string (GET) or the
body (POST, JSON or form) under the same names. Every other method gets a
JSON 405. Failures never escape a handler: they are logged and converted
to a JSON error body.
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from .schemas import (
    BratErrorResponse,
    BratResponse,
    ErrorResponse,
    HealthResponse,
    Ytmp3Response,
)
from ..errors import MediaRelayError, MethodNotAllowed, ValidationError, error_message
from ..pipeline import generate_brat, generate_ytmp3

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_METHODS = ("GET", "POST")
# Disallowed methods get the JSON 405 here; unlisted ones (TRACE, ...) via the app handler.
ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

def _check_method(request: Request) -> None:
    if request.method not in ALLOWED_METHODS:
        raise MethodNotAllowed()


async def _read_params(request: Request) -> dict:
    """Query params for GET; JSON or form body for POST."""
    if request.method == "GET":
        return dict(request.query_params)

    content_type = request.headers.get("content-type", "").lower()
    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            logger.debug("Ignoring malformed JSON body")
            return {}
        return body if isinstance(body, dict) else {}

    if "application/x-www-form-urlencoded" in content_type or "multipart/form-data" in content_type:
        try:
            form = await request.form()
        except (StarletteHTTPException, MultiPartException) as e:
            logger.debug("Ignoring malformed form body: %s", e)
            return {}
        return dict(form)

    return {}


def _require(params: dict, field: str) -> str:
    value = params.get(field)
    if value is None:
        raise ValidationError(f"Required parameter '{field}'")
    if isinstance(value, str):
        return value
    # JSON spelling for non-string JSON values: true -> "true", not "True"
    return json.dumps(value, ensure_ascii=False, default=str)


def _error_response(exc: BaseException) -> JSONResponse:
    status_code = exc.status_code if isinstance(exc, MediaRelayError) else 500
    body = ErrorResponse(message=error_message(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Service health check endpoint."""
    return HealthResponse()


# ---------------------------------------------------------------------------
# Brat
# ---------------------------------------------------------------------------

@router.api_route(
    "/brat{suffix:path}",
    methods=ROUTE_METHODS,
    response_model=BratResponse,
    tags=["brat"],
)
async def brat(request: Request):
    """
    Render ``text`` as a brat image and upload it.

    Matches /brat and any path starting with it. Server errors use the
    ``{error: true, message}`` shape.
    """
    try:
        _check_method(request)
        text = _require(await _read_params(request), "text")
    except MediaRelayError as e:
        return _error_response(e)

    try:
        url = await generate_brat(text)
    except Exception as e:
        logger.error("Error during brat generation: %s", e, exc_info=True)
        body = BratErrorResponse(message=error_message(e))
        return JSONResponse(status_code=500, content=body.model_dump())

    return BratResponse(result=url)


# ---------------------------------------------------------------------------
# YouTube audio
# ---------------------------------------------------------------------------

@router.api_route(
    "/ytmp3",
    methods=ROUTE_METHODS,
    response_model=Ytmp3Response,
    tags=["ytmp3"],
)
async def ytmp3(request: Request):
    """
    Resolve ``query`` (YouTube URL or search text) to audio and upload it.

    - HTTP 404 when the search finds no video.
    - HTTP 500 with ``{success: false, message}`` on any other failure.
    """
    try:
        _check_method(request)
        query = _require(await _read_params(request), "query").strip()
        if not query:
            raise ValidationError("Required parameter 'query'")
    except MediaRelayError as e:
        return _error_response(e)

    try:
        result = await generate_ytmp3(query)
    except MediaRelayError as e:
        if e.status_code >= 500:
            logger.error("Error processing YouTube audio: %s", e, exc_info=True)
        return _error_response(e)
    except Exception as e:
        logger.error("Error processing YouTube audio: %s", e, exc_info=True)
        return _error_response(e)

    return Ytmp3Response(**result)
