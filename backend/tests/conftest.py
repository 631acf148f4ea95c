"""
Shared fixtures for the NoteClerk test suite.

Relational tests run against a temporary SQLite file through aiosqlite, so no
database server is needed. The ``store`` fixture is parametrized over both
backends, each loaded with the same seed dataset.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from noteclerk.config import Settings
from noteclerk.database.memory import InMemoryNoteStore, seed_notes
from noteclerk.database.relational import RelationalNoteStore
from noteclerk.services.notes import NoteRecordService


def make_settings(**overrides) -> Settings:
    values = {
        "VERSION": "test",
        "LOG_PATH": "logs",
        "SERVER_PROTOCOL": "tcp",
        "SERVER_IP": "127.0.0.1",
        "SERVER_PORT": "50051",
        "DB_IP": "127.0.0.1",
        "DB_PORT": "5432",
        "DB_USERNAME": "noteclerk",
        "DB_PASSWORD": "secret",
        "DB_NAME": "noteclerk",
        "DB_SSL_MODE": "disable",
    }
    values.update(overrides)
    return Settings(**values)


def sqlite_engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(LOG_PATH=str(tmp_path / "logs"))


@pytest.fixture
async def memory_store() -> InMemoryNoteStore:
    store = InMemoryNoteStore()
    await store.initialize()
    return store


@pytest.fixture
async def sqlite_store(settings, tmp_path):
    store = RelationalNoteStore(settings, engine=sqlite_engine(tmp_path))
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "relational"])
async def store(request, settings, tmp_path):
    if request.param == "memory":
        note_store = InMemoryNoteStore()
        await note_store.initialize()
    else:
        note_store = RelationalNoteStore(settings, engine=sqlite_engine(tmp_path))
        await note_store.initialize()
        for note in seed_notes():
            await note_store.add_note(note)
    yield note_store
    await note_store.close()


@pytest.fixture
def service(settings, store) -> NoteRecordService:
    return NoteRecordService(settings, store)
