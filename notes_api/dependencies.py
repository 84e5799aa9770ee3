"""
Notes API - Route Dependencies
================================

What:  FastAPI dependencies shared by the route modules.
How:   create_app() opens one NoteStore at startup and keeps it on
       app.state; handlers receive it through Depends(get_note_store).
"""

from fastapi import Request

from notes_api.services.note_store import NoteStore


def get_note_store(request: Request) -> NoteStore:
    """Return the NoteStore bound to the running application."""
    return request.app.state.note_store
