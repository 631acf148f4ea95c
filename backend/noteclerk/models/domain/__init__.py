"""Domain models — the note aggregate and the requests that act on it."""

from noteclerk.models.domain.note import (
    Timestamp,
    Note,
    NoteFragment,
    NoteFilter,
    NoteFragmentFilter,
    new_guid,
    new_note,
    new_note_fragment,
    timestamp_now,
)
from noteclerk.models.domain.requests import (
    CreateNoteRequest,
    RetrieveNoteRequest,
    SearchNotesRequest,
    UpdateNoteRequest,
    DeleteNoteRequest,
)

__all__ = [
    "Timestamp", "Note", "NoteFragment", "NoteFilter", "NoteFragmentFilter",
    "new_guid", "new_note", "new_note_fragment", "timestamp_now",
    "CreateNoteRequest", "RetrieveNoteRequest", "SearchNotesRequest",
    "UpdateNoteRequest", "DeleteNoteRequest",
]
