"""
Relational note store.

Notes are decomposed into the ``note``, ``note_tag``, ``note_fragment`` and
``note_fragment_tag`` tables and reassembled on read. The engine is an
SQLAlchemy async engine: asyncpg for PostgreSQL, aiosqlite for local files.
"""

import asyncio
from collections import defaultdict

from sqlalchemy import and_, delete, func, insert, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from noteclerk.config import Settings
from noteclerk.database.schema import (
    TABLES,
    note_fragment_table,
    note_fragment_tag_table,
    note_table,
    note_tag_table,
)
from noteclerk.database.store import NoteStore
from noteclerk.errors import (
    ConfigurationError,
    ConfigurationIncompleteError,
    SchemaError,
    StoreConnectionError,
    StoreError,
    StorePingError,
)
from noteclerk.logging import get_logger
from noteclerk.models import Note, NoteFilter, NoteFragment, NoteFragmentFilter, Timestamp, new_guid

logger = get_logger('database.relational')


def _is_already_exists(exc: Exception) -> bool:
    return "already exists" in str(exc).lower()


def _note_values(note: Note) -> dict:
    return {
        "created_sec": note.date_created.seconds,
        "created_nsec": note.date_created.nanos,
        "note_guid": note.note_guid,
        "visit_guid": note.visit_guid,
        "author_guid": note.author_guid,
        "patient_guid": note.patient_guid,
        "type": int(note.type),
        "status": int(note.status),
    }


def _fragment_values(fragment: NoteFragment) -> dict:
    values = {
        "created_sec": fragment.date_created.seconds,
        "created_nsec": fragment.date_created.nanos,
        "fragment_guid": fragment.note_fragment_guid,
        "note_guid": fragment.note_guid,
        "issue_guid": fragment.issue_guid,
        "icd10_code": fragment.icd_10_code,
        "icd10_long": fragment.icd_10_long,
        "description": fragment.description,
        "status": int(fragment.status),
        "priority": int(fragment.priority),
        "topic": int(fragment.topic),
        "content": fragment.content,
    }
    if fragment.id:
        values["id"] = fragment.id
    return values


def _fragment_insert(fragment: NoteFragment):
    """INSERT for one fragment row, appended after the note's existing fragments."""
    next_ordinal = (
        select(func.coalesce(func.max(note_fragment_table.c.ordinal) + 1, 0))
        .where(note_fragment_table.c.note_guid == fragment.note_guid)
        .correlate(None)
        .scalar_subquery()
    )
    return (
        insert(note_fragment_table)
        .values(ordinal=next_ordinal, **_fragment_values(fragment))
        .returning(note_fragment_table.c.id)
    )


def _fragment_sequence_reset(dialect_name: str):
    """
    Statement moving the fragment id sequence past the highest stored id.

    PostgreSQL does not advance a serial sequence when a row is inserted with
    an explicit id. SQLite assigns max(rowid) + 1 and needs nothing.
    """
    if dialect_name != "postgresql":
        return None
    highest = select(func.max(note_fragment_table.c.id)).scalar_subquery()
    return select(
        func.setval(
            func.pg_get_serial_sequence(note_fragment_table.name, note_fragment_table.c.id.name),
            func.greatest(func.coalesce(highest, 1), 1),
        )
    )


def _row_to_note(row) -> Note:
    return Note(
        id=row["id"],
        note_guid=row["note_guid"],
        date_created=Timestamp(seconds=row["created_sec"], nanos=row["created_nsec"]),
        visit_guid=row["visit_guid"],
        author_guid=row["author_guid"],
        patient_guid=row["patient_guid"],
        type=row["type"],
        status=row["status"],
    )


def _row_to_fragment(row) -> NoteFragment:
    return NoteFragment(
        id=row["id"],
        note_fragment_guid=row["fragment_guid"],
        date_created=Timestamp(seconds=row["created_sec"], nanos=row["created_nsec"]),
        note_guid=row["note_guid"],
        issue_guid=row["issue_guid"],
        icd_10_code=row["icd10_code"],
        icd_10_long=row["icd10_long"],
        description=row["description"],
        status=row["status"],
        priority=row["priority"],
        topic=row["topic"],
        content=row["content"],
    )


def _note_conditions(criteria: NoteFilter) -> list:
    conditions = []
    if criteria.id:
        conditions.append(note_table.c.id == criteria.id)
    if criteria.note_guid:
        conditions.append(note_table.c.note_guid == criteria.note_guid)
    if criteria.visit_guid:
        conditions.append(note_table.c.visit_guid == criteria.visit_guid)
    if criteria.author_guid:
        conditions.append(note_table.c.author_guid == criteria.author_guid)
    if criteria.patient_guid:
        conditions.append(note_table.c.patient_guid == criteria.patient_guid)
    return conditions


def _fragment_conditions(criteria: NoteFragmentFilter) -> list:
    conditions = []
    if criteria.id:
        conditions.append(note_fragment_table.c.id == criteria.id)
    if criteria.note_fragment_guid:
        conditions.append(note_fragment_table.c.fragment_guid == criteria.note_fragment_guid)
    if criteria.note_guid:
        conditions.append(note_fragment_table.c.note_guid == criteria.note_guid)
    if criteria.issue_guid:
        conditions.append(note_fragment_table.c.issue_guid == criteria.issue_guid)
    if criteria.icd_10_code:
        conditions.append(note_fragment_table.c.icd10_code == criteria.icd_10_code)
    return conditions


class RelationalNoteStore(NoteStore):
    """Note store backed by a SQL database."""

    def __init__(self, settings: Settings | None, engine: AsyncEngine | None = None):
        self.settings = settings
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreError("Relational store is not initialized")
        return self._engine

    async def initialize(self) -> None:
        """
        Connect, check liveness and ensure the schema exists.

        :raises ConfigurationIncompleteError: A required setting is empty
        :raises StoreConnectionError: The engine could not be created
        :raises StorePingError: The database did not answer
        :raises SchemaError: A table could not be created
        """
        if self.settings is None:
            raise ConfigurationError("Relational store requires settings")
        missing = self.settings.missing_fields()
        if missing:
            raise ConfigurationIncompleteError(missing)

        if self._engine is None:
            try:
                self._engine = create_async_engine(self.settings.database_url())
            except (SQLAlchemyError, ImportError, ValueError) as exc:
                raise StoreConnectionError(f"Cannot open database connection: {exc}") from exc

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            raise StorePingError(f"Cannot reach database: {exc}") from exc

        await self._create_schema()
        logger.info(f"Relational store ready on {self._engine.url.render_as_string(hide_password=True)}")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    async def _create_schema(self) -> None:
        for table in TABLES:
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(table.create, checkfirst=False)
            except SQLAlchemyError as exc:
                if _is_already_exists(exc):
                    logger.warning(f"Table '{table.name}' already exists.")
                    continue
                raise SchemaError(f"Cannot create table '{table.name}': {exc}") from exc

    async def _insert_returning_id(self, statement, what: str) -> int:
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(statement)
                return result.scalar_one()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to insert {what}: {exc}") from exc

    async def _insert_note(self, note: Note) -> int:
        statement = insert(note_table).values(**_note_values(note)).returning(note_table.c.id)
        return await self._insert_returning_id(statement, f"note {note.note_guid}")

    async def _advance_fragment_ids(self, conn: AsyncConnection) -> None:
        reset = _fragment_sequence_reset(conn.dialect.name)
        if reset is not None:
            await conn.execute(reset)

    async def _insert_note_fragment(self, fragment: NoteFragment) -> int:
        try:
            async with self.engine.begin() as conn:
                fragment_id = (await conn.execute(_fragment_insert(fragment))).scalar_one()
                if fragment.id:
                    await self._advance_fragment_ids(conn)
                return fragment_id
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to insert fragment {fragment.note_fragment_guid}: {exc}") from exc

    async def add_note_tag(self, note_guid: str, tag: str) -> int:
        statement = (
            insert(note_tag_table)
            .values(note_guid=note_guid, tag=tag)
            .returning(note_tag_table.c.id)
        )
        return await self._insert_returning_id(statement, f"tag for note {note_guid}")

    async def add_note_fragment_tag(self, fragment_guid: str, tag: str) -> int:
        statement = (
            insert(note_fragment_tag_table)
            .values(fragment_guid=fragment_guid, tag=tag)
            .returning(note_fragment_tag_table.c.id)
        )
        return await self._insert_returning_id(statement, f"tag for fragment {fragment_guid}")

    async def _load_fragments(
        self, conn: AsyncConnection, conditions: list, order_by: tuple = (note_fragment_table.c.id,)
    ) -> list[NoteFragment]:
        statement = select(note_fragment_table).order_by(*order_by)
        if conditions:
            statement = statement.where(and_(*conditions))
        rows = (await conn.execute(statement)).mappings().all()
        fragments = [_row_to_fragment(row) for row in rows]
        if not fragments:
            return fragments

        guids = [f.note_fragment_guid for f in fragments]
        tag_rows = await conn.execute(
            select(note_fragment_tag_table)
            .where(note_fragment_tag_table.c.fragment_guid.in_(guids))
            .order_by(note_fragment_tag_table.c.id)
        )
        tags: dict[str, list[str]] = defaultdict(list)
        for row in tag_rows.mappings():
            tags[row["fragment_guid"]].append(row["tag"])
        for fragment in fragments:
            fragment.tags = list(tags[fragment.note_fragment_guid])
        return fragments

    async def _load_notes(self, conditions: list) -> list[Note]:
        statement = select(note_table).order_by(note_table.c.id)
        if conditions:
            statement = statement.where(and_(*conditions))
        try:
            async with self.engine.connect() as conn:
                rows = (await conn.execute(statement)).mappings().all()
                notes = [_row_to_note(row) for row in rows]
                if not notes:
                    return notes

                guids = [n.note_guid for n in notes]
                tag_rows = await conn.execute(
                    select(note_tag_table)
                    .where(note_tag_table.c.note_guid.in_(guids))
                    .order_by(note_tag_table.c.id)
                )
                tags: dict[str, list[str]] = defaultdict(list)
                for row in tag_rows.mappings():
                    tags[row["note_guid"]].append(row["tag"])

                fragments: dict[str, list[NoteFragment]] = defaultdict(list)
                owned = await self._load_fragments(
                    conn,
                    [note_fragment_table.c.note_guid.in_(guids)],
                    order_by=(note_fragment_table.c.ordinal, note_fragment_table.c.id),
                )
                for fragment in owned:
                    fragments[fragment.note_guid].append(fragment)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read notes: {exc}") from exc

        for note in notes:
            note.tags = list(tags[note.note_guid])
            note.fragments = [f.model_copy(deep=True) for f in fragments[note.note_guid]]
        return notes

    async def all_notes(self) -> list[Note]:
        return await self._load_notes([])

    async def get_note_by_id(self, note_id: int) -> Note | None:
        notes = await self._load_notes([note_table.c.id == note_id])
        return notes[0] if notes else None

    async def find_note(self, criteria: NoteFilter) -> list[Note]:
        return await self._load_notes(_note_conditions(criteria))

    async def _delete_children(self, conn: AsyncConnection, note_guid: str) -> None:
        fragment_guids = select(note_fragment_table.c.fragment_guid).where(
            note_fragment_table.c.note_guid == note_guid
        )
        await conn.execute(
            delete(note_fragment_tag_table).where(note_fragment_tag_table.c.fragment_guid.in_(fragment_guids))
        )
        await conn.execute(delete(note_fragment_table).where(note_fragment_table.c.note_guid == note_guid))
        await conn.execute(delete(note_tag_table).where(note_tag_table.c.note_guid == note_guid))

    async def _stored_guid(self, conn: AsyncConnection, note_id: int) -> str | None:
        result = await conn.execute(select(note_table.c.note_guid).where(note_table.c.id == note_id))
        return result.scalar_one_or_none()

    async def update_note(self, note: Note) -> bool:
        try:
            async with self.engine.begin() as conn:
                stored_guid = await self._stored_guid(conn, note.id)
                if stored_guid is None:
                    return False
                if not note.note_guid:
                    note.note_guid = stored_guid

                await conn.execute(
                    update(note_table).where(note_table.c.id == note.id).values(**_note_values(note))
                )
                await self._delete_children(conn, stored_guid)

                for fragment in note.fragments:
                    fragment.note_guid = note.note_guid
                    if not fragment.note_fragment_guid:
                        fragment.note_fragment_guid = new_guid()
                    preset = bool(fragment.id)
                    fragment.id = (await conn.execute(_fragment_insert(fragment))).scalar_one()
                    if preset:
                        await self._advance_fragment_ids(conn)
                    for tag in fragment.tags:
                        await conn.execute(
                            insert(note_fragment_tag_table).values(
                                fragment_guid=fragment.note_fragment_guid, tag=tag
                            )
                        )
                for tag in note.tags:
                    await conn.execute(insert(note_tag_table).values(note_guid=note.note_guid, tag=tag))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to update note {note.id}: {exc}") from exc
        return True

    async def delete_note(self, note_id: int) -> bool:
        try:
            async with self.engine.begin() as conn:
                stored_guid = await self._stored_guid(conn, note_id)
                if stored_guid is None:
                    return False
                await self._delete_children(conn, stored_guid)
                await conn.execute(delete(note_table).where(note_table.c.id == note_id))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete note {note_id}: {exc}") from exc
        return True

    async def _read_fragments(self, conditions: list) -> list[NoteFragment]:
        try:
            async with self.engine.connect() as conn:
                return await self._load_fragments(conn, conditions)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read fragments: {exc}") from exc

    async def all_note_fragments(self) -> list[NoteFragment]:
        return await self._read_fragments([])

    async def get_note_fragment_by_id(self, fragment_id: int) -> NoteFragment | None:
        fragments = await self._read_fragments([note_fragment_table.c.id == fragment_id])
        return fragments[0] if fragments else None

    async def find_note_fragments(self, criteria: NoteFragmentFilter) -> list[NoteFragment]:
        return await self._read_fragments(_fragment_conditions(criteria))
