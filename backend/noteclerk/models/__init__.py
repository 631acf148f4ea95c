"""
NoteClerk models.

Usage:
    from noteclerk.models import Note, NoteFragment, NoteFilter, new_note
    from noteclerk.models import NoteType, RecordStatus, StatusCode
    from noteclerk.models import CreateNoteRequest, NoteResponse
"""

# --- Enums ---
from noteclerk.models.enums import (
    NoteType,
    RecordStatus,
    RecordPriority,
    FragmentType,
    StatusCode,
)

# --- Domain models ---
from noteclerk.models.domain import (
    Timestamp, Note, NoteFragment, NoteFilter, NoteFragmentFilter,
    new_guid, new_note, new_note_fragment, timestamp_now,
    CreateNoteRequest, RetrieveNoteRequest, SearchNotesRequest,
    UpdateNoteRequest, DeleteNoteRequest,
)

# --- Result models ---
from noteclerk.models.results import (
    ResponseStatus, ServiceResponse, NoteResponse, NotesResponse, DeleteNoteResponse,
)

__all__ = [
    # Enums
    "NoteType", "RecordStatus", "RecordPriority", "FragmentType", "StatusCode",
    # Domain
    "Timestamp", "Note", "NoteFragment", "NoteFilter", "NoteFragmentFilter",
    "new_guid", "new_note", "new_note_fragment", "timestamp_now",
    "CreateNoteRequest", "RetrieveNoteRequest", "SearchNotesRequest",
    "UpdateNoteRequest", "DeleteNoteRequest",
    # Results
    "ResponseStatus", "ServiceResponse", "NoteResponse", "NotesResponse", "DeleteNoteResponse",
]
