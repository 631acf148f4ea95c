"""
In-memory note store.

Keeps the same normalized rows as the relational store (notes, fragments and
two tag tables) in insertion-ordered lists, so ids, ordering and
partial-write behaviour match. ``initialize`` resets the store to a fixed seed
dataset whose first note sits at position 0.
"""

import asyncio
from dataclasses import dataclass

from noteclerk.database.store import NoteStore
from noteclerk.errors import StoreError
from noteclerk.logging import get_logger
from noteclerk.models import (
    FragmentType,
    Note,
    NoteFilter,
    NoteFragment,
    NoteFragmentFilter,
    NoteType,
    RecordPriority,
    RecordStatus,
    Timestamp,
    new_guid,
)

logger = get_logger('database.memory')


@dataclass
class _TagRow:
    id: int
    owner_guid: str
    tag: str


def seed_notes() -> list[Note]:
    """The fixed dataset loaded by :meth:`InMemoryNoteStore.initialize`."""
    first_guid = "8a4b5b54-3f0e-4f53-9a55-0c8e7b7f6c01"
    patient_guid = "c3f1a9d2-6a47-4d8e-b3a0-7d2f5e9c1a10"
    return [
        Note(
            note_guid=first_guid,
            date_created=Timestamp(seconds=1_514_764_800, nanos=0),
            visit_guid="0f6a8f0e-2c61-4bb8-9a3e-5d6c7e8f9a20",
            author_guid="5b2e4c6d-8f1a-4b3c-9d5e-6f7a8b9c0d30",
            patient_guid=patient_guid,
            type=NoteType.INITIAL_CONSULTATION,
            status=RecordStatus.ACTIVE,
            tags=["note1Tag1", "note1Tag2"],
            fragments=[
                NoteFragment(
                    note_fragment_guid="e1d2c3b4-a5f6-4e7d-8c9b-0a1b2c3d4e40",
                    date_created=Timestamp(seconds=1_514_764_800, nanos=0),
                    icd_10_code="J02.9",
                    icd_10_long="Acute pharyngitis, unspecified",
                    description="Sore throat",
                    status=RecordStatus.ACTIVE,
                    priority=RecordPriority.MEDIUM,
                    topic=FragmentType.SUBJECTIVE,
                    content="Three days of sore throat, no fever.",
                    tags=["frag1Tag1", "frag1Tag2"],
                ),
                NoteFragment(
                    note_fragment_guid="f2e3d4c5-b6a7-4f8e-9d0c-1b2c3d4e5f50",
                    date_created=Timestamp(seconds=1_514_764_800, nanos=0),
                    description="Plan",
                    status=RecordStatus.ACTIVE,
                    topic=FragmentType.PLAN,
                    content="Supportive care, return if worse.",
                    tags=["frag2Tag1", "frag2Tag2"],
                ),
            ],
        ),
        Note(
            note_guid="1c2d3e4f-5a6b-4c7d-8e9f-0a1b2c3d4e60",
            date_created=Timestamp(seconds=1_517_443_200, nanos=0),
            visit_guid="2d3e4f5a-6b7c-4d8e-9f0a-1b2c3d4e5f70",
            author_guid="5b2e4c6d-8f1a-4b3c-9d5e-6f7a8b9c0d30",
            patient_guid=patient_guid,
            type=NoteType.CONTINUED_CARE_DOCUMENTATION,
            status=RecordStatus.ACTIVE,
            tags=["follow-up"],
        ),
        Note(
            note_guid="3e4f5a6b-7c8d-4e9f-a0b1-c2d3e4f5a680",
            date_created=Timestamp(seconds=1_519_862_400, nanos=0),
            visit_guid="4f5a6b7c-8d9e-4fa0-b1c2-d3e4f5a6b790",
            author_guid="6c7d8e9f-a0b1-4c2d-8e3f-4a5b6c7d8e9f",
            patient_guid="7d8e9fa0-b1c2-4d3e-9f4a-5b6c7d8e9fa0",
            type=NoteType.PROCEDURE_NOTE,
            status=RecordStatus.INCOMPLETE,
        ),
    ]


def _matches_note(note: Note, criteria: NoteFilter) -> bool:
    return (
        (not criteria.id or note.id == criteria.id)
        and (not criteria.note_guid or note.note_guid == criteria.note_guid)
        and (not criteria.visit_guid or note.visit_guid == criteria.visit_guid)
        and (not criteria.author_guid or note.author_guid == criteria.author_guid)
        and (not criteria.patient_guid or note.patient_guid == criteria.patient_guid)
    )


def _matches_fragment(fragment: NoteFragment, criteria: NoteFragmentFilter) -> bool:
    return (
        (not criteria.id or fragment.id == criteria.id)
        and (not criteria.note_fragment_guid or fragment.note_fragment_guid == criteria.note_fragment_guid)
        and (not criteria.note_guid or fragment.note_guid == criteria.note_guid)
        and (not criteria.issue_guid or fragment.issue_guid == criteria.issue_guid)
        and (not criteria.icd_10_code or fragment.icd_10_code == criteria.icd_10_code)
    )


class InMemoryNoteStore(NoteStore):
    """Deterministic note store for tests and local runs."""

    def __init__(self, seed: bool = True):
        self.seed = seed
        self._lock = asyncio.Lock()
        self._reset()

    def _reset(self) -> None:
        self._notes: list[Note] = []
        self._fragments: list[NoteFragment] = []
        self._note_tags: list[_TagRow] = []
        self._fragment_tags: list[_TagRow] = []
        self._last_note_id = 0
        self._last_fragment_id = 0
        self._last_tag_id = 0

    async def initialize(self) -> None:
        async with self._lock:
            self._reset()
        if self.seed:
            for note in seed_notes():
                await self.add_note(note)
        logger.info(f"In-memory store ready with {len(self._notes)} notes")

    async def _insert_note(self, note: Note) -> int:
        async with self._lock:
            self._last_note_id += 1
            row = note.model_copy(deep=True, update={"id": self._last_note_id, "fragments": [], "tags": []})
            self._notes.append(row)
            return row.id

    async def _insert_note_fragment(self, fragment: NoteFragment) -> int:
        async with self._lock:
            if fragment.id:
                if any(f.id == fragment.id for f in self._fragments):
                    raise StoreError(f"Fragment id {fragment.id} already exists")
                fragment_id = fragment.id
                self._last_fragment_id = max(self._last_fragment_id, fragment_id)
            else:
                self._last_fragment_id += 1
                fragment_id = self._last_fragment_id
            self._fragments.append(fragment.model_copy(deep=True, update={"id": fragment_id, "tags": []}))
            return fragment_id

    def _next_tag_id(self) -> int:
        self._last_tag_id += 1
        return self._last_tag_id

    async def add_note_tag(self, note_guid: str, tag: str) -> int:
        async with self._lock:
            row = _TagRow(self._next_tag_id(), note_guid, tag)
            self._note_tags.append(row)
            return row.id

    async def add_note_fragment_tag(self, fragment_guid: str, tag: str) -> int:
        async with self._lock:
            row = _TagRow(self._next_tag_id(), fragment_guid, tag)
            self._fragment_tags.append(row)
            return row.id

    # Assemblers expect the lock to be held.
    def _assemble_fragment(self, row: NoteFragment) -> NoteFragment:
        fragment = row.model_copy(deep=True)
        fragment.tags = [t.tag for t in self._fragment_tags if t.owner_guid == row.note_fragment_guid]
        return fragment

    def _assemble_note(self, row: Note) -> Note:
        note = row.model_copy(deep=True)
        note.tags = [t.tag for t in self._note_tags if t.owner_guid == row.note_guid]
        # Rows are kept in insertion order, which is the note's fragment order.
        note.fragments = [self._assemble_fragment(f) for f in self._fragments if f.note_guid == row.note_guid]
        return note

    async def all_notes(self) -> list[Note]:
        async with self._lock:
            return [self._assemble_note(n) for n in self._notes]

    async def get_note_by_id(self, note_id: int) -> Note | None:
        async with self._lock:
            for note in self._notes:
                if note.id == note_id:
                    return self._assemble_note(note)
        return None

    async def find_note(self, criteria: NoteFilter) -> list[Note]:
        async with self._lock:
            return [self._assemble_note(n) for n in self._notes if _matches_note(n, criteria)]

    def _remove_children(self, note_guid: str) -> None:
        fragment_guids = {f.note_fragment_guid for f in self._fragments if f.note_guid == note_guid}
        self._fragment_tags = [t for t in self._fragment_tags if t.owner_guid not in fragment_guids]
        self._fragments = [f for f in self._fragments if f.note_guid != note_guid]
        self._note_tags = [t for t in self._note_tags if t.owner_guid != note_guid]

    def _index_of(self, note_id: int) -> int | None:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    async def update_note(self, note: Note) -> bool:
        async with self._lock:
            index = self._index_of(note.id)
            if index is None:
                return False

            stored_guid = self._notes[index].note_guid
            if not note.note_guid:
                note.note_guid = stored_guid
            taken = {f.id for f in self._fragments if f.note_guid != stored_guid}
            clashing = [f.id for f in note.fragments if f.id and f.id in taken]
            if clashing:
                raise StoreError(f"Failed to update note {note.id}: fragment ids {clashing} already exist")

            self._remove_children(stored_guid)
            self._notes[index] = note.model_copy(deep=True, update={"fragments": [], "tags": []})

            for fragment in note.fragments:
                fragment.note_guid = note.note_guid
                if not fragment.note_fragment_guid:
                    fragment.note_fragment_guid = new_guid()
                if fragment.id:
                    self._last_fragment_id = max(self._last_fragment_id, fragment.id)
                else:
                    self._last_fragment_id += 1
                    fragment.id = self._last_fragment_id
                self._fragments.append(fragment.model_copy(deep=True, update={"tags": []}))
                for tag in fragment.tags:
                    self._fragment_tags.append(_TagRow(self._next_tag_id(), fragment.note_fragment_guid, tag))
            for tag in note.tags:
                self._note_tags.append(_TagRow(self._next_tag_id(), note.note_guid, tag))
        return True

    async def delete_note(self, note_id: int) -> bool:
        async with self._lock:
            index = self._index_of(note_id)
            if index is None:
                return False
            removed = self._notes.pop(index)
            self._remove_children(removed.note_guid)
        return True

    async def all_note_fragments(self) -> list[NoteFragment]:
        async with self._lock:
            return [self._assemble_fragment(f) for f in sorted(self._fragments, key=lambda f: f.id)]

    async def get_note_fragment_by_id(self, fragment_id: int) -> NoteFragment | None:
        async with self._lock:
            for fragment in self._fragments:
                if fragment.id == fragment_id:
                    return self._assemble_fragment(fragment)
        return None

    async def find_note_fragments(self, criteria: NoteFragmentFilter) -> list[NoteFragment]:
        async with self._lock:
            return [
                self._assemble_fragment(f) for f in sorted(self._fragments, key=lambda f: f.id)
                if _matches_fragment(f, criteria)
            ]
