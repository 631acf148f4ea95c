"""
Exception hierarchy for NoteClerk.

Configuration, connectivity and schema errors abort startup. Request
validation errors are raised before any store access. Expected outcomes such
as "not found" are never exceptions: they travel as response statuses.
"""

from typing import Any


class NoteClerkError(Exception):
    """Base class for every error raised by NoteClerk."""


class ConfigurationError(NoteClerkError):
    """Configuration is missing or unusable."""


class ConfigurationReadError(ConfigurationError):
    """The configuration file could not be read."""


class ConfigurationParseError(ConfigurationError):
    """The configuration file is not a valid JSON object."""


class ConfigurationIncompleteError(ConfigurationError):
    """One or more required configuration fields are empty."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Configuration has empty required fields: {', '.join(missing)}")


class StoreError(NoteClerkError):
    """A record store failed to complete an operation."""


class StoreConnectionError(StoreError):
    """The store could not open a connection to its backend."""


class StorePingError(StoreError):
    """The backend did not answer the liveness check."""


class SchemaError(StoreError):
    """A table could not be created for a reason other than already existing."""


class PartialWriteError(StoreError):
    """
    An aggregate write failed after some of its rows were persisted.

    Rows written before the failure are left in place; ``note_id`` holds the
    id of the note row when it was inserted.
    """

    def __init__(self, message: str, note_id: int = 0, fragment_id: int = 0):
        self.note_id = note_id
        self.fragment_id = fragment_id
        super().__init__(message)


class OperationNotImplementedError(StoreError, NotImplementedError):
    """The store does not support the requested operation."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} is not implemented by this store")


class InvalidRequestError(NoteClerkError, ValueError):
    """A request was rejected before reaching the store."""


class RecordServiceError(NoteClerkError):
    """
    A store fault surfaced through the record service.

    ``response`` carries the best-effort status envelope for the caller.
    """

    def __init__(self, message: str, response: Any):
        self.response = response
        super().__init__(message)
