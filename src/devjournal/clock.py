"""Wall-clock helpers. All persisted timestamps are ISO-8601 UTC strings."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """Serialize a datetime as an ISO-8601 string in UTC."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp, returning None when it is absent or unparsable.

    A trailing ``Z`` is accepted and naive values are read as UTC.
    """

    if not value:
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_calendar_date(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` calendar date."""

    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


__all__ = ["Clock", "utc_now", "to_iso", "parse_iso", "parse_calendar_date"]
