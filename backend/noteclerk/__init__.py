"""NoteClerk: clinical note record management."""

__version__ = "1.0.0"
