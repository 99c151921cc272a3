"""Utility helpers for building export date windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Tuple


@dataclass(frozen=True)
class DateRange:
    """Container representing a closed date range."""

    start: date
    end: date

    def as_tuple(self) -> Tuple[date, date]:
        """Return the range as a tuple of ``(start, end)``."""
        return (self.start, self.end)

    def iter_backward(self) -> Iterator[date]:
        """Yield every day from ``end`` down to ``start`` inclusive."""

        current = self.end
        while current >= self.start:
            yield current
            current -= timedelta(days=1)


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def default_end_date(today: date | None = None) -> date:
    """Return yesterday, the most recent day with a closed snapshot."""

    return (today or date.today()) - timedelta(days=1)


def backward_window(end: str | date, days: int) -> list[date]:
    """Return ``days`` dates walking backward from ``end`` (``end`` first).

    ``days == 0`` yields an empty window.
    """

    if days < 0:
        raise ValueError("days must not be negative")
    end_date = parse_date(end)
    if days == 0:
        return []
    span = DateRange(start=end_date - timedelta(days=days - 1), end=end_date)
    return list(span.iter_backward())


__all__ = ["DateRange", "parse_date", "default_end_date", "backward_window"]
