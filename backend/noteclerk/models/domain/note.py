"""Note aggregate domain models."""

import time
from uuid import uuid4

from pydantic import BaseModel, Field

from noteclerk.models.enums import FragmentType, NoteType, RecordPriority, RecordStatus

NANOS_PER_SECOND = 1_000_000_000


class Timestamp(BaseModel):
    """A point in time split into whole seconds and nanoseconds."""
    seconds: int = 0
    nanos: int = Field(default=0, ge=0, lt=NANOS_PER_SECOND)

    @property
    def is_zero(self) -> bool:
        return self.seconds == 0 and self.nanos == 0


def timestamp_now() -> Timestamp:
    seconds, nanos = divmod(time.time_ns(), NANOS_PER_SECOND)
    return Timestamp(seconds=seconds, nanos=nanos)


def new_guid() -> str:
    return str(uuid4())


class NoteFragment(BaseModel):
    """A section of a note, owned by the note whose guid it carries."""
    id: int = 0
    note_fragment_guid: str = ""
    date_created: Timestamp = Field(default_factory=Timestamp)
    note_guid: str = ""
    issue_guid: str = ""
    icd_10_code: str = ""
    icd_10_long: str = ""
    description: str = ""
    status: RecordStatus = RecordStatus.INCOMPLETE
    priority: RecordPriority = RecordPriority.NO_PRIORITY
    topic: FragmentType = FragmentType.NO_TOPIC
    content: str = ""
    tags: list[str] = Field(default_factory=list)


class Note(BaseModel):
    """A clinical note: the aggregate root for fragments and tags."""
    id: int = 0
    note_guid: str = ""
    date_created: Timestamp = Field(default_factory=Timestamp)
    visit_guid: str = ""
    author_guid: str = ""
    patient_guid: str = ""
    type: NoteType = NoteType.NO_NOTE_TYPE
    status: RecordStatus = RecordStatus.INCOMPLETE
    fragments: list[NoteFragment] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class NoteFilter(BaseModel):
    """Note search criteria. Non-empty fields are combined with AND."""
    id: int = 0
    note_guid: str = ""
    visit_guid: str = ""
    author_guid: str = ""
    patient_guid: str = ""

    def is_empty(self) -> bool:
        return not (self.id or self.note_guid or self.visit_guid or self.author_guid or self.patient_guid)


class NoteFragmentFilter(BaseModel):
    """Fragment search criteria. Non-empty fields are combined with AND."""
    id: int = 0
    note_fragment_guid: str = ""
    note_guid: str = ""
    issue_guid: str = ""
    icd_10_code: str = ""


def new_note() -> Note:
    """Create an unsaved note with a fresh guid and creation time."""
    return Note(note_guid=new_guid(), date_created=timestamp_now())


def new_note_fragment() -> NoteFragment:
    """Create an unsaved fragment with a fresh guid and creation time."""
    return NoteFragment(note_fragment_guid=new_guid(), date_created=timestamp_now())
