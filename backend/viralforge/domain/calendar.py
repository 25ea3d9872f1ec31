"""
Calendar Day Value Type

Usage counters, comp expiry and admin resets all work at calendar-day
precision in UTC. CalendarDay keeps that explicit so no code path compares
raw strings or mixes timezone-aware datetimes with dates.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union


DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True, order=True)
class CalendarDay:
    """A single UTC calendar day, ordered chronologically."""

    value: date

    @classmethod
    def parse(cls, raw: str) -> "CalendarDay":
        """
        Parse a strict ``YYYY-MM-DD`` string.

        Raises:
            ValueError: if the format does not match or the date does not exist
        """
        if not isinstance(raw, str) or not DATE_PATTERN.fullmatch(raw):
            raise ValueError(f"Invalid date format: {raw!r}. Use YYYY-MM-DD")
        try:
            return cls(date.fromisoformat(raw))
        except ValueError as e:
            raise ValueError(f"Invalid calendar date: {raw!r}") from e

    @classmethod
    def today(cls, now: Optional[datetime] = None) -> "CalendarDay":
        """Current day in UTC. Naive datetimes are taken to be UTC already."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return cls(now.date())

    @classmethod
    def coerce(
        cls,
        value: Union["CalendarDay", date, datetime, str, None],
    ) -> Optional["CalendarDay"]:
        """Normalize the representations stored in the database or sent by clients."""
        if value is None:
            return None
        if isinstance(value, CalendarDay):
            return value
        # datetime is a date subclass, so it has to be checked first
        if isinstance(value, datetime):
            return cls.today(value)
        if isinstance(value, date):
            return cls(value)
        return cls.parse(value)

    def shift(self, days: int) -> "CalendarDay":
        return CalendarDay(self.value + timedelta(days=days))

    def month_start(self) -> "CalendarDay":
        return CalendarDay(self.value.replace(day=1))

    def isoformat(self) -> str:
        return self.value.isoformat()

    def __str__(self) -> str:
        return self.isoformat()
