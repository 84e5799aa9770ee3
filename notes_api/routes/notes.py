"""
Notes API - Notes Route Handlers
==================================

What:  CRUD endpoints over the notes held in the cache directory.
How:   Each handler validates its inputs, makes one NoteStore call, and
       returns a plain-text (or JSON, for the listing) response.

Endpoints:
    POST   /write           form: note_name, note  → 201 "Note created"
    GET    /notes/{name}                           → 200 raw text
    PUT    /notes/{name}    body: raw text         → 200 "Note updated"
    DELETE /notes/{name}                           → 200 "Note deleted"
    GET    /notes                                  → 200 [{name, text}, ...]
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse

from notes_api.dependencies import get_note_store
from notes_api.exceptions import ValidationError
from notes_api.schemas.note import NoteCreateForm, NoteResponse
from notes_api.services.note_store import NoteStore

router = APIRouter(tags=["Notes"])

_NAME_NOT_FOUND = {404: {"description": "Note not found"}}
_TEXT_BODY = {
    "requestBody": {
        "required": True,
        "content": {"text/plain": {"schema": {"type": "string"}}},
    }
}


@router.post(
    "/write",
    status_code=201,
    response_class=PlainTextResponse,
    responses={
        201: {"description": "Note created"},
        400: {"description": "Note already exists or a field is missing"},
    },
    summary="Create a new note",
)
async def write_note(
    form: Annotated[NoteCreateForm, Form()],
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    """Create `note_name` with `note` as its text. Existing notes are never overwritten."""
    await store.create(form.note_name, form.note)
    return PlainTextResponse("Note created", status_code=201)


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={500: {"description": "The cache directory could not be read"}},
    summary="List all notes",
)
async def list_notes(
    store: NoteStore = Depends(get_note_store),
) -> List[NoteResponse]:
    """
    Return every visible note as {name, text}.

    Files whose names start with "." or "_" are hidden. Order follows the
    directory enumeration and is not sorted.
    """
    notes = await store.list_notes()
    return [NoteResponse.model_validate(note) for note in notes]


@router.get(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={200: {"description": "Note text"}, **_NAME_NOT_FOUND},
    summary="Get a note by name",
)
async def read_note(
    name: str,
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    text = await store.read(name)
    return PlainTextResponse(text)


@router.put(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={200: {"description": "Note updated"}, **_NAME_NOT_FOUND},
    openapi_extra=_TEXT_BODY,
    summary="Replace the text of a note",
)
async def update_note(
    name: str,
    request: Request,
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    """
    Replace the full text of an existing note with the raw request body.

    The body is read as UTF-8 regardless of Content-Type; the note is never
    appended to and never created by this endpoint.
    """
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError(
            message="Request body must be UTF-8 text",
            field="body",
            context={"position": e.start},
        ) from e

    await store.update(name, text)
    return PlainTextResponse("Note updated")


@router.delete(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={200: {"description": "Note deleted"}, **_NAME_NOT_FOUND},
    summary="Delete a note",
)
async def delete_note(
    name: str,
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    await store.delete(name)
    return PlainTextResponse("Note deleted")
