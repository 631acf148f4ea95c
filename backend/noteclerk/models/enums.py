"""
Enum definitions for NoteClerk.

Record enums persist as their integer codes.
"""
from enum import IntEnum


class NoteType(IntEnum):
    """Kind of clinical documentation a note represents."""
    NO_NOTE_TYPE = 0
    INITIAL_CONSULTATION = 1
    CONTINUED_CARE_DOCUMENTATION = 2
    PROCEDURE_NOTE = 3
    DISCHARGE_SUMMARY = 4


class RecordStatus(IntEnum):
    """Lifecycle status of a note or fragment."""
    INCOMPLETE = 0
    ACTIVE = 1
    INACTIVE = 2
    ENTERED_IN_ERROR = 3


class RecordPriority(IntEnum):
    """Clinical priority of a fragment."""
    NO_PRIORITY = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class FragmentType(IntEnum):
    """Section of the note a fragment belongs to."""
    NO_TOPIC = 0
    SUBJECTIVE = 1
    OBJECTIVE = 2
    ASSESSMENT = 3
    PLAN = 4
    MEDICAL_HISTORY = 5
    ALLERGIES = 6
    MEDICATIONS = 7


class StatusCode(IntEnum):
    """Status carried by every service response envelope."""
    OK = 200
    NOT_MODIFIED = 304
    BAD_REQUEST = 400
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
