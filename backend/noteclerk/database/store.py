"""
Record store contract.

Every persistence backend implements :class:`NoteStore`. The record service
only ever holds this abstraction, so the relational store and the in-memory
store are interchangeable.

A note aggregate is written row by row: the note, then each fragment with its
tags, then the note's tags. No lock or transaction spans that sequence, so a
failure part way leaves the earlier rows in place and surfaces as
:class:`~noteclerk.errors.PartialWriteError`. Callers must re-read to learn
what was persisted.

Absence is never an exception: lookups return ``None`` or an empty list and
mutations return ``False``. Backend faults raise
:class:`~noteclerk.errors.StoreError` subclasses.
"""

from abc import ABC, abstractmethod

from noteclerk.errors import OperationNotImplementedError, PartialWriteError, StoreError
from noteclerk.models import (
    Note,
    NoteFilter,
    NoteFragment,
    NoteFragmentFilter,
    new_guid,
    timestamp_now,
)


class NoteStore(ABC):
    @abstractmethod
    async def initialize(self) -> None: ...

    async def close(self) -> None:
        return None

    @abstractmethod
    async def _insert_note(self, note: Note) -> int:
        """Insert the note row alone and return its id."""

    @abstractmethod
    async def _insert_note_fragment(self, fragment: NoteFragment) -> int:
        """Insert the fragment row alone and return its id.

        A fragment that already carries a non-zero id is stored under that id.
        """

    async def add_note(self, note: Note) -> int:
        """
        Insert a note aggregate.

        ``note.id`` and the id of every fragment are set on the passed object.
        An empty guid or a zero timestamp is filled in before the row is
        written, on the note and on each fragment.

        :param note: Note with its fragments and tags
        :type note: Note
        :return: The new note id
        :rtype: int
        :raises StoreError: The note row could not be inserted
        :raises PartialWriteError: A fragment or tag failed after the note row was stored
        """
        if not note.note_guid:
            note.note_guid = new_guid()
        if note.date_created.is_zero:
            note.date_created = timestamp_now()
        note.id = await self._insert_note(note)

        for fragment in note.fragments:
            fragment.note_guid = note.note_guid
            try:
                await self.add_note_fragment(fragment)
            except StoreError as exc:
                raise PartialWriteError(
                    f"Note {note.id} stored but fragment {fragment.note_fragment_guid} failed: {exc}",
                    note_id=note.id,
                    fragment_id=fragment.id,
                ) from exc

        for tag in note.tags:
            try:
                await self.add_note_tag(note.note_guid, tag)
            except StoreError as exc:
                raise PartialWriteError(
                    f"Note {note.id} stored but tag {tag!r} failed: {exc}",
                    note_id=note.id,
                ) from exc

        return note.id

    async def add_note_fragment(self, fragment: NoteFragment) -> tuple[int, str]:
        """
        Insert a fragment and its tags.

        :param fragment: Fragment whose ``note_guid`` names its owner
        :type fragment: NoteFragment
        :return: The fragment id and guid
        :rtype: tuple[int, str]
        """
        if not fragment.note_fragment_guid:
            fragment.note_fragment_guid = new_guid()
        if fragment.date_created.is_zero:
            fragment.date_created = timestamp_now()
        fragment.id = await self._insert_note_fragment(fragment)

        for tag in fragment.tags:
            try:
                await self.add_note_fragment_tag(fragment.note_fragment_guid, tag)
            except StoreError as exc:
                raise PartialWriteError(
                    f"Fragment {fragment.id} stored but tag {tag!r} failed: {exc}",
                    fragment_id=fragment.id,
                ) from exc

        return fragment.id, fragment.note_fragment_guid

    @abstractmethod
    async def add_note_tag(self, note_guid: str, tag: str) -> int: ...

    @abstractmethod
    async def add_note_fragment_tag(self, fragment_guid: str, tag: str) -> int: ...

    @abstractmethod
    async def all_notes(self) -> list[Note]: ...

    @abstractmethod
    async def get_note_by_id(self, note_id: int) -> Note | None: ...

    @abstractmethod
    async def find_note(self, criteria: NoteFilter) -> list[Note]: ...

    @abstractmethod
    async def update_note(self, note: Note) -> bool:
        """Replace the stored aggregate whose id is ``note.id``."""

    @abstractmethod
    async def delete_note(self, note_id: int) -> bool:
        """Remove the note, its tags, its fragments and their tags."""

    @abstractmethod
    async def all_note_fragments(self) -> list[NoteFragment]: ...

    @abstractmethod
    async def get_note_fragment_by_id(self, fragment_id: int) -> NoteFragment | None: ...

    @abstractmethod
    async def find_note_fragments(self, criteria: NoteFragmentFilter) -> list[NoteFragment]: ...

    # Fragments are only written through their note.
    async def update_note_fragment(self, fragment: NoteFragment) -> bool:
        raise OperationNotImplementedError("update_note_fragment")

    async def delete_note_fragment(self, fragment_id: int) -> bool:
        raise OperationNotImplementedError("delete_note_fragment")
