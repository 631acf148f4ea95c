"""Request payloads accepted by the note record service."""

from typing import Optional

from pydantic import BaseModel

from noteclerk.models.domain.note import Note


class CreateNoteRequest(BaseModel):
    """Payload for creating a note. The note must not carry an id."""
    note: Optional[Note] = None


class RetrieveNoteRequest(BaseModel):
    """Look up a note by guid, or by id when no guid is given."""
    id: int = 0
    guid: str = ""


class SearchNotesRequest(BaseModel):
    """Search notes by correlation guids. At least one is required."""
    visit_guid: str = ""
    author_guid: str = ""
    patient_guid: str = ""


class UpdateNoteRequest(BaseModel):
    """Replace the note with ``id``; ``note.id`` must match."""
    id: int = 0
    note: Optional[Note] = None


class DeleteNoteRequest(BaseModel):
    """Delete a note by guid, or by id when no guid is given."""
    id: int = 0
    guid: str = ""
