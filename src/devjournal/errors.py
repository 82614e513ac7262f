"""Exception taxonomy for the persistence layer."""

from __future__ import annotations


class DevJournalError(Exception):
    """Base exception for every failure raised by the core."""


class StorageUnavailable(DevJournalError):
    """The database file or its directory could not be created or opened."""


class MigrationFailed(DevJournalError):
    """A schema migration step failed; the schema is not safe to serve."""

    def __init__(self, version: int, message: str = "") -> None:
        self.version = version
        detail = f": {message}" if message else ""
        super().__init__(f"Migration {version} failed{detail}")


class QueryFailed(DevJournalError):
    """A single operation's SQL failed. Other state is untouched."""


class TransactionAborted(DevJournalError):
    """A multi-statement unit failed and was rolled back in full."""


__all__ = [
    "DevJournalError",
    "StorageUnavailable",
    "MigrationFailed",
    "QueryFailed",
    "TransactionAborted",
]
