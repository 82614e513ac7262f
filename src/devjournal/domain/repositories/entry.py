"""Entry repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.entry import Entry


class EntryRepository(Protocol):
    """Repository for daily entries, keyed by calendar date."""

    def list_all(self) -> list[Entry]:
        """List entries, newest date first."""
        ...

    def get(self, date: str) -> Optional[Entry]:
        """Retrieve the entry for a date."""
        ...

    def save(self, date: str, yesterday: str, today: str) -> Entry:
        """Insert or overwrite the entry for a date, keeping created_at."""
        ...

    def delete(self, date: str) -> None:
        """Delete the entry for a date."""
        ...

    def search(self, query: str) -> list[Entry]:
        """Find entries whose text contains the query."""
        ...
