"""
Relational layout of the note aggregate.

Tables are joined by guid strings, never by numeric id. There are no foreign
keys: tag and fragment rows reference their owner's guid.
"""

from sqlalchemy import BigInteger, Column, Integer, MetaData, Table, Text

metadata = MetaData()

# SQLite only auto-assigns ids for INTEGER PRIMARY KEY columns.
IdType = BigInteger().with_variant(Integer(), "sqlite")

note_table = Table(
    "note",
    metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("created_sec", BigInteger, nullable=False, default=0),
    Column("created_nsec", Integer, nullable=False, default=0),
    Column("note_guid", Text, nullable=False, index=True),
    Column("visit_guid", Text, nullable=False, default=""),
    Column("author_guid", Text, nullable=False, default=""),
    Column("patient_guid", Text, nullable=False, default=""),
    Column("type", Integer, nullable=False, default=0),
    Column("status", Integer, nullable=False, default=0),
)

note_tag_table = Table(
    "note_tag",
    metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("note_guid", Text, nullable=False, index=True),
    Column("tag", Text, nullable=False),
)

note_fragment_table = Table(
    "note_fragment",
    metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("created_sec", BigInteger, nullable=False, default=0),
    Column("created_nsec", Integer, nullable=False, default=0),
    Column("fragment_guid", Text, nullable=False, index=True),
    Column("note_guid", Text, nullable=False, index=True),
    Column("issue_guid", Text, nullable=False, default=""),
    Column("icd10_code", Text, nullable=False, default=""),
    Column("icd10_long", Text, nullable=False, default=""),
    Column("description", Text, nullable=False, default=""),
    Column("status", Integer, nullable=False, default=0),
    Column("priority", Integer, nullable=False, default=0),
    Column("topic", Integer, nullable=False, default=0),
    Column("content", Text, nullable=False, default=""),
    # Position within the owning note; fragment ids may be preset out of order.
    Column("ordinal", Integer, nullable=False, default=0),
)

note_fragment_tag_table = Table(
    "note_fragment_tag",
    metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("fragment_guid", Text, nullable=False, index=True),
    Column("tag", Text, nullable=False),
)

# Creation order used by schema bootstrap.
TABLES = (note_table, note_tag_table, note_fragment_table, note_fragment_tag_table)
