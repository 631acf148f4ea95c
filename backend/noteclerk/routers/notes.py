"""Note routes.

The HTTP status of every response is the status carried by the service
envelope.
"""

from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import JSONResponse

from noteclerk.dependencies import NoteServiceDep
from noteclerk.errors import InvalidRequestError, RecordServiceError
from noteclerk.models import (
    CreateNoteRequest,
    DeleteNoteRequest,
    Note,
    RetrieveNoteRequest,
    SearchNotesRequest,
    ServiceResponse,
    StatusCode,
    UpdateNoteRequest,
)

router = APIRouter()


def _to_response(envelope: ServiceResponse) -> Response:
    code = envelope.status.http_code
    if code == StatusCode.NOT_MODIFIED:
        return Response(status_code=int(code))
    return JSONResponse(status_code=int(code), content=envelope.model_dump(mode="json"))


async def _call(operation, request) -> Response:
    try:
        envelope = await operation(request)
    except InvalidRequestError as e:
        raise HTTPException(400, str(e))
    except RecordServiceError as e:
        return _to_response(e.response)
    return _to_response(envelope)


@router.post("")
async def create_note(body: CreateNoteRequest, service: NoteServiceDep):
    return await _call(service.create_note, body)


@router.get("/search")
async def search_notes(
    service: NoteServiceDep,
    visit_guid: str = "",
    author_guid: str = "",
    patient_guid: str = "",
):
    request = SearchNotesRequest(visit_guid=visit_guid, author_guid=author_guid, patient_guid=patient_guid)
    return await _call(service.search_notes, request)


@router.get("/guid/{guid}")
async def retrieve_note_by_guid(guid: str, service: NoteServiceDep):
    return await _call(service.retrieve_note, RetrieveNoteRequest(guid=guid))


@router.get("/{note_id}")
async def retrieve_note(note_id: int, service: NoteServiceDep):
    return await _call(service.retrieve_note, RetrieveNoteRequest(id=note_id))


@router.put("/{note_id}")
async def update_note(note_id: int, body: Note, service: NoteServiceDep):
    return await _call(service.update_note, UpdateNoteRequest(id=note_id, note=body))


@router.delete("/guid/{guid}")
async def delete_note_by_guid(guid: str, service: NoteServiceDep):
    return await _call(service.delete_note, DeleteNoteRequest(guid=guid))


@router.delete("/{note_id}")
async def delete_note(note_id: int, service: NoteServiceDep):
    return await _call(service.delete_note, DeleteNoteRequest(id=note_id))
