from __future__ import annotations

from datetime import date, datetime, time

from ..core.constants import DAY_KEY_FORMAT


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DAY_KEY_FORMAT).date()


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


def day_key_for(moment: datetime | date) -> str:
    """Calendar day a session belongs to, as YYYY-MM-DD."""
    if isinstance(moment, datetime):
        moment = moment.date()
    return moment.strftime(DAY_KEY_FORMAT)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
