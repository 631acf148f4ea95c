"""Note record operations: validation, id/guid policy and status mapping."""

from noteclerk.config import Settings
from noteclerk.database.store import NoteStore
from noteclerk.errors import (
    ConfigurationError,
    InvalidRequestError,
    PartialWriteError,
    RecordServiceError,
    StoreError,
)
from noteclerk.logging import get_logger
from noteclerk.models import (
    CreateNoteRequest,
    DeleteNoteRequest,
    DeleteNoteResponse,
    Note,
    NoteFilter,
    NoteResponse,
    NotesResponse,
    ResponseStatus,
    RetrieveNoteRequest,
    SearchNotesRequest,
    ServiceResponse,
    StatusCode,
    UpdateNoteRequest,
    new_guid,
    timestamp_now,
)

logger = get_logger("services.notes")


def _status(code: StatusCode, message: str = "") -> ResponseStatus:
    return ResponseStatus(http_code=code, message=message)


def _stamp_fragments(note: Note) -> None:
    """Attach fragments to the note; fragments without an id get a fresh guid and timestamp."""
    for fragment in note.fragments:
        fragment.note_guid = note.note_guid
        if not fragment.id or not fragment.note_fragment_guid:
            fragment.note_fragment_guid = new_guid()
        if not fragment.id or fragment.date_created.is_zero:
            fragment.date_created = timestamp_now()


class NoteRecordService:
    """
    Service-facing note operations over a :class:`NoteStore`.

    Expected outcomes (not found, conflict, not modified) are returned as
    response statuses. Malformed requests raise :class:`InvalidRequestError`
    before the store is touched; store faults raise
    :class:`RecordServiceError` carrying a best-effort response.
    """

    def __init__(self, settings: Settings | None, store: NoteStore | None):
        if settings is None:
            raise ConfigurationError("Note record service requires settings")
        if store is None:
            raise ConfigurationError("Note record service requires a note store")
        self.settings = settings
        self.store = store

    def _fault(self, action: str, exc: StoreError, response: ServiceResponse) -> RecordServiceError:
        logger.error(f"Failed to {action}: {exc}")
        response.status = _status(StatusCode.INTERNAL_SERVER_ERROR, str(exc))
        return RecordServiceError(f"Failed to {action}: {exc}", response)

    async def _locate(self, note_id: int, guid: str) -> Note | None:
        # A guid, when given, wins over the numeric id.
        if guid:
            found = await self.store.find_note(NoteFilter(note_guid=guid))
            return found[0] if found else None
        return await self.store.get_note_by_id(note_id)

    async def create_note(self, request: CreateNoteRequest) -> NoteResponse:
        if request is None or request.note is None:
            raise InvalidRequestError("Create request must carry a note")
        if request.note.id != 0:
            raise InvalidRequestError(
                f"Note id must be 0 on create, got {request.note.id}; ids are assigned by the store"
            )

        note = request.note.model_copy(deep=True)
        note.note_guid = new_guid()
        note.date_created = timestamp_now()
        _stamp_fragments(note)

        try:
            await self.store.add_note(note)
        except PartialWriteError as exc:
            raise self._fault("create note", exc, NoteResponse(note=note)) from exc
        except StoreError as exc:
            raise self._fault("create note", exc, NoteResponse()) from exc

        logger.info(f"Created note {note.id} ({note.note_guid}) with {len(note.fragments)} fragments")
        return NoteResponse(status=_status(StatusCode.OK), note=note)

    async def retrieve_note(self, request: RetrieveNoteRequest) -> NoteResponse:
        if request is None:
            raise InvalidRequestError("Retrieve request is required")
        try:
            note = await self._locate(request.id, request.guid)
        except StoreError as exc:
            raise self._fault("retrieve note", exc, NoteResponse()) from exc

        if note is None:
            return NoteResponse(status=_status(StatusCode.NOT_FOUND, "Note not found"))
        return NoteResponse(status=_status(StatusCode.OK), note=note)

    async def search_notes(self, request: SearchNotesRequest) -> NotesResponse:
        if request is None:
            raise InvalidRequestError("Search request is required")
        criteria = NoteFilter(
            visit_guid=request.visit_guid,
            author_guid=request.author_guid,
            patient_guid=request.patient_guid,
        )
        if criteria.is_empty():
            raise InvalidRequestError("Search requires a visit, author or patient guid")

        try:
            notes = await self.store.find_note(criteria)
        except StoreError as exc:
            raise self._fault("search notes", exc, NotesResponse()) from exc

        if not notes:
            return NotesResponse(status=_status(StatusCode.NOT_FOUND, "No matching notes"))
        return NotesResponse(status=_status(StatusCode.OK), notes=notes)

    async def update_note(self, request: UpdateNoteRequest) -> NoteResponse:
        if request is None or request.note is None:
            raise InvalidRequestError("Update request must carry a note")
        if request.id != request.note.id:
            return NoteResponse(
                status=_status(
                    StatusCode.CONFLICT,
                    f"Request id {request.id} does not match note id {request.note.id}",
                )
            )

        try:
            stored = await self.store.get_note_by_id(request.id)
            if stored is None:
                return NoteResponse(status=_status(StatusCode.NOT_FOUND, "Note not found"))

            note = request.note.model_copy(deep=True)
            if not note.note_guid:
                note.note_guid = stored.note_guid
            if note.date_created.is_zero:
                note.date_created = stored.date_created
            _stamp_fragments(note)

            if not await self.store.update_note(note):
                return NoteResponse(status=_status(StatusCode.NOT_FOUND, "Note not found"))
            updated = await self.store.get_note_by_id(note.id)
        except StoreError as exc:
            raise self._fault("update note", exc, NoteResponse()) from exc

        logger.info(f"Updated note {note.id}")
        return NoteResponse(status=_status(StatusCode.OK), note=updated or note)

    async def delete_note(self, request: DeleteNoteRequest) -> DeleteNoteResponse:
        if request is None:
            raise InvalidRequestError("Delete request is required")
        try:
            target = await self._locate(request.id, request.guid)
            deleted = target is not None and await self.store.delete_note(target.id)
        except StoreError as exc:
            raise self._fault("delete note", exc, DeleteNoteResponse()) from exc

        if not deleted:
            return DeleteNoteResponse(status=_status(StatusCode.NOT_MODIFIED, "No note was deleted"))
        logger.info(f"Deleted note {target.id} ({target.note_guid})")
        return DeleteNoteResponse(status=_status(StatusCode.OK))
