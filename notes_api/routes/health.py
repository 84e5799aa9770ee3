"""
Notes API - Health Check Route
================================

What:  Health check endpoint for monitoring tools.
How:   Verifies the cache directory still exists and is a directory.

Status levels:
    - healthy:   Cache directory available (HTTP 200)
    - unhealthy: Cache directory missing or unreadable (HTTP 503)
"""

import logging
import time

import aiofiles.os
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from notes_api import __version__
from notes_api.dependencies import get_note_store
from notes_api.schemas.note import HealthResponse
from notes_api.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Cache directory unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(store: NoteStore = Depends(get_note_store)) -> JSONResponse:
    """Report whether the cache directory backing the NoteStore is usable."""
    try:
        available = await aiofiles.os.path.isdir(store.root)
    except OSError as e:
        logger.warning("Health check: cache directory check failed: %s", e)
        available = False

    if not available:
        logger.warning("Health check: cache directory unavailable: %s", store.root)

    body = HealthResponse(
        status="healthy" if available else "unhealthy",
        version=__version__,
        cache="available" if available else "unavailable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if available else 503, content=body.model_dump())
