"""
Notes API - Upload Form Route
===============================

What:  Serves the static HTML form that posts new notes to /write.
"""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

router = APIRouter(tags=["Form"])

UPLOAD_FORM_PATH = Path(__file__).resolve().parent.parent / "static" / "UploadForm.html"


@router.get(
    "/UploadForm.html",
    response_class=FileResponse,
    responses={200: {"description": "HTML page with the note upload form"}},
    summary="HTML form for creating a note",
)
async def upload_form() -> FileResponse:
    return FileResponse(path=UPLOAD_FORM_PATH, media_type="text/html")
