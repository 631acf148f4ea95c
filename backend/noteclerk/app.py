"""
NoteClerk - FastAPI Backend
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI

from noteclerk.config import Settings, get_settings
from noteclerk.database.relational import RelationalNoteStore
from noteclerk.database.store import NoteStore
from noteclerk.logging import setup_logging, get_logger
from noteclerk.routers import notes
from noteclerk.services.notes import NoteRecordService

logger = get_logger('main')


def create_app(settings: Settings | None = None, store: NoteStore | None = None) -> FastAPI:
    """
    Build the application.

    :param settings: Settings to run with; loaded from the environment when omitted
    :type settings: Settings | None
    :param store: Note store to use; a relational store is built when omitted
    :type store: NoteStore | None
    :return: The FastAPI application
    :rtype: FastAPI
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_settings = settings or get_settings()
        setup_logging(app_settings.LOG_PATH)
        logger.info(
            f"Starting NoteClerk {app_settings.VERSION} on "
            f"{app_settings.SERVER_PROTOCOL}://{app_settings.SERVER_IP}:{app_settings.SERVER_PORT}"
        )

        note_store = store or RelationalNoteStore(app_settings)
        await note_store.initialize()
        logger.info("Note store initialized")

        app.state.settings = app_settings
        app.state.note_service = NoteRecordService(app_settings, note_store)

        yield

        logger.info("Shutting down application")
        await note_store.close()

    app = FastAPI(
        title="NoteClerk API",
        description="Clinical note record management",
        version="1.0.0",
        lifespan=lifespan
    )

    app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "noteclerk",
            "version": app.state.settings.VERSION if hasattr(app.state, 'settings') else None,
        }

    return app
