"""Result models for service operations."""

from noteclerk.models.results.envelope import (
    ResponseStatus, ServiceResponse, NoteResponse, NotesResponse, DeleteNoteResponse,
)

__all__ = [
    "ResponseStatus", "ServiceResponse", "NoteResponse", "NotesResponse", "DeleteNoteResponse",
]
