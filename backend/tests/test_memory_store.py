import asyncio

import pytest

from noteclerk.database.memory import InMemoryNoteStore, seed_notes
from noteclerk.errors import OperationNotImplementedError, PartialWriteError
from noteclerk.models import NoteFilter, NoteFragmentFilter, new_note, new_note_fragment


async def test_initialize_loads_seed_dataset_in_order(memory_store) -> None:
    notes = await memory_store.all_notes()
    seeds = seed_notes()

    assert [n.note_guid for n in notes] == [s.note_guid for s in seeds]
    assert [n.id for n in notes] == [1, 2, 3]

    first = notes[0]
    assert first.tags == ["note1Tag1", "note1Tag2"]
    assert [f.id for f in first.fragments] == [1, 2]
    assert first.fragments[0].tags == ["frag1Tag1", "frag1Tag2"]
    assert all(f.note_guid == first.note_guid for f in first.fragments)


async def test_initialize_resets_previous_state(memory_store) -> None:
    await memory_store.add_note(new_note())
    assert len(await memory_store.all_notes()) == 4

    await memory_store.initialize()
    notes = await memory_store.all_notes()
    assert len(notes) == 3
    assert notes[0].id == 1


async def test_unseeded_store_starts_empty() -> None:
    store = InMemoryNoteStore(seed=False)
    await store.initialize()
    assert await store.all_notes() == []


async def test_find_note_combines_criteria_with_and(memory_store) -> None:
    first, second, _ = await memory_store.all_notes()

    by_patient = await memory_store.find_note(NoteFilter(patient_guid=first.patient_guid))
    assert [n.id for n in by_patient] == [first.id, second.id]

    by_patient_and_visit = await memory_store.find_note(
        NoteFilter(patient_guid=first.patient_guid, visit_guid=second.visit_guid)
    )
    assert [n.id for n in by_patient_and_visit] == [second.id]

    assert await memory_store.find_note(NoteFilter(note_guid="no-such-guid")) == []


async def test_returned_notes_are_copies(memory_store) -> None:
    note = await memory_store.get_note_by_id(1)
    note.tags.append("mutated")
    note.fragments.clear()

    again = await memory_store.get_note_by_id(1)
    assert "mutated" not in again.tags
    assert len(again.fragments) == 2


async def test_explicit_fragment_id_is_kept_and_advances_counter(memory_store) -> None:
    note = new_note()
    explicit = new_note_fragment()
    explicit.id = 44
    note.fragments = [explicit, new_note_fragment()]

    await memory_store.add_note(note)

    assert [f.id for f in note.fragments] == [44, 45]
    stored = await memory_store.get_note_fragment_by_id(44)
    assert stored.note_guid == note.note_guid


async def test_duplicate_fragment_id_leaves_note_row_in_place(memory_store) -> None:
    note = new_note()
    clash = new_note_fragment()
    clash.id = 1
    note.fragments = [clash]
    note.tags = ["never-written"]

    with pytest.raises(PartialWriteError) as exc_info:
        await memory_store.add_note(note)

    assert exc_info.value.note_id == note.id
    stored = await memory_store.get_note_by_id(note.id)
    assert stored is not None
    assert stored.fragments == []
    assert stored.tags == []


async def test_find_note_fragments_by_icd_code(memory_store) -> None:
    found = await memory_store.find_note_fragments(NoteFragmentFilter(icd_10_code="J02.9"))
    assert [f.id for f in found] == [1]
    assert len(await memory_store.all_note_fragments()) == 2


async def test_delete_note_removes_owned_rows(memory_store) -> None:
    assert await memory_store.delete_note(1) is True
    assert await memory_store.get_note_by_id(1) is None
    assert await memory_store.all_note_fragments() == []
    assert await memory_store.delete_note(1) is False


async def test_fragment_writes_are_not_implemented(memory_store) -> None:
    fragment = await memory_store.get_note_fragment_by_id(1)
    with pytest.raises(OperationNotImplementedError):
        await memory_store.update_note_fragment(fragment)
    with pytest.raises(NotImplementedError):
        await memory_store.delete_note_fragment(1)


async def test_concurrent_creates_get_distinct_ids(memory_store) -> None:
    notes = [new_note() for _ in range(20)]
    ids = await asyncio.gather(*(memory_store.add_note(n) for n in notes))
    assert len(set(ids)) == 20
    assert len(await memory_store.all_notes()) == 23
