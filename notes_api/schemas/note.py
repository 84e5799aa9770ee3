"""
Notes API - Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the API contract of the notes endpoints.
How:   FastAPI uses these models to validate form bodies, serialize
       responses, and generate the OpenAPI document served at /docs.

Every endpoint with a body declares its fields here explicitly; handlers
never pull fields out of an untyped request body.
"""

from typing import List

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreateForm(BaseModel):
    """
    What:  Form fields of POST /write (multipart or urlencoded).
    Who:   Submitted by UploadForm.html or any HTTP client.

    Note names are checked for path safety by the NoteStore; this model only
    enforces that both fields are present.
    """
    note_name: str = Field(min_length=1, description="Name of the note to create")
    note: str = Field(description="Full text content of the note")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """One note as returned by GET /notes."""
    name: str = Field(description="Note name (file name without extension)")
    text: str = Field(description="Full text content of the note")

    model_config = {"from_attributes": True}


NoteListResponse = List[NoteResponse]


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and cache directory status.
    Who:   Returned by GET /health for monitoring tools.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    cache: str = Field(description="Cache directory status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
