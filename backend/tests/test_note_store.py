from uuid import UUID

from noteclerk.models import Note, NoteFragment, new_note, new_note_fragment


async def test_add_note_fills_missing_guid_and_timestamp(store) -> None:
    first = Note(tags=["alpha"])
    second = Note(tags=["beta"])

    await store.add_note(first)
    await store.add_note(second)

    assert UUID(first.note_guid)
    assert first.note_guid != second.note_guid
    assert not first.date_created.is_zero
    assert (await store.get_note_by_id(first.id)).tags == ["alpha"]
    assert (await store.get_note_by_id(second.id)).tags == ["beta"]


async def test_add_note_fills_missing_fragment_guids(store) -> None:
    note = Note(fragments=[NoteFragment(tags=["left"]), NoteFragment(tags=["right"])])

    await store.add_note(note)

    left, right = (await store.get_note_by_id(note.id)).fragments
    assert left.note_fragment_guid and right.note_fragment_guid
    assert left.note_fragment_guid != right.note_fragment_guid
    assert not left.date_created.is_zero
    assert left.tags == ["left"]
    assert right.tags == ["right"]


async def test_add_note_fragment_returns_assigned_guid(store) -> None:
    solo_id, solo_guid = await store.add_note_fragment(NoteFragment(note_guid="owner", tags=["solo"]))
    pair_id, pair_guid = await store.add_note_fragment(NoteFragment(note_guid="owner", tags=["pair"]))

    assert UUID(solo_guid)
    assert solo_guid != pair_guid
    assert (await store.get_note_fragment_by_id(solo_id)).tags == ["solo"]
    assert (await store.get_note_fragment_by_id(pair_id)).tags == ["pair"]


async def test_fragments_read_back_in_insertion_order(store) -> None:
    high = new_note()
    preset_high = new_note_fragment()
    preset_high.id = 50
    high.fragments = [preset_high]
    await store.add_note(high)

    fresh = new_note_fragment()
    fresh.content = "first"
    preset_low = new_note_fragment()
    preset_low.id = 10
    preset_low.content = "second"
    note = new_note()
    note.fragments = [fresh, preset_low]
    await store.add_note(note)

    stored = await store.get_note_by_id(note.id)
    assert [f.content for f in stored.fragments] == ["first", "second"]
    assert [f.id for f in stored.fragments] == [51, 10]


async def test_update_note_keeps_given_fragment_order(store) -> None:
    note = await store.get_note_by_id(1)
    note.fragments.reverse()

    assert await store.update_note(note) is True

    assert [f.id for f in (await store.get_note_by_id(1)).fragments] == [2, 1]


async def test_update_note_without_guids_keeps_stored_guid(store) -> None:
    note = await store.get_note_by_id(2)
    stored_guid = note.note_guid
    note.note_guid = ""
    note.fragments = [NoteFragment(tags=["added"])]

    assert await store.update_note(note) is True

    again = await store.get_note_by_id(2)
    assert again.note_guid == stored_guid
    assert again.tags == ["follow-up"]
    assert UUID(again.fragments[0].note_fragment_guid)
    assert again.fragments[0].tags == ["added"]
