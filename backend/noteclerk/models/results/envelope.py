"""
Response envelopes returned by the note record service.
"""

from typing import Optional

from pydantic import BaseModel, Field

from noteclerk.models.domain.note import Note
from noteclerk.models.enums import StatusCode


class ResponseStatus(BaseModel):
    """Outcome of a service operation."""
    http_code: StatusCode = StatusCode.OK
    message: str = ""


class ServiceResponse(BaseModel):
    """Base envelope carrying only a status."""
    status: ResponseStatus = Field(default_factory=ResponseStatus)


class NoteResponse(ServiceResponse):
    """Envelope for operations that yield a single note."""
    note: Optional[Note] = None


class NotesResponse(ServiceResponse):
    """Envelope for operations that yield a set of notes."""
    notes: list[Note] = Field(default_factory=list)


class DeleteNoteResponse(ServiceResponse):
    """Envelope for note deletion."""
    pass
