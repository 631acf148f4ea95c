"""
Dependency injection for FastAPI routes.

Provides typed service dependencies that enable IDE navigation (Ctrl+Click).
"""

from typing import Annotated
from fastapi import Request, Depends

from noteclerk.services.notes import NoteRecordService


def get_note_service(request: Request) -> NoteRecordService:
    return request.app.state.note_service


NoteServiceDep = Annotated[NoteRecordService, Depends(get_note_service)]
