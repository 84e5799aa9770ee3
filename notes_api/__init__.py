"""
Notes API - Application Package Initializer
=============================================

What: Marks the `notes_api` directory as a Python package.
Who:  Used by uvicorn (via `python -m notes_api`), pytest, and the console script.

Architecture Note:
    The service is a thin layered FastAPI application:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Schemas (Request Validation)    │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │        NoteStore (Persistence)      │  ← One UTF-8 file per note
    └─────────────────────────────────────┘

    The cache directory configured at startup is the only persistent state.
"""

__version__ = "1.0.0"
