"""Tracking period helpers.

A tracking period is one week, starting on a configurable weekday (UTC).
The payout report only displays it; nothing else depends on the dates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

DATE_FORMAT = "%m/%d/%Y"


class TrackingPeriodError(Exception):
    """Raised when the tracking period cannot be resolved."""


@dataclass(frozen=True)
class TrackingPeriod:
    start: date
    end: date

    @property
    def start_text(self) -> str:
        return self.start.strftime(DATE_FORMAT)

    @property
    def end_text(self) -> str:
        return self.end.strftime(DATE_FORMAT)


def get_current_tracking_period(
    week_start: str = "sunday",
    today: Optional[date] = None,
) -> TrackingPeriod:
    """Return the tracking week containing `today` (defaults to the current UTC date)."""
    weekday = WEEKDAYS.get((week_start or "").strip().lower())
    if weekday is None:
        raise TrackingPeriodError(f"Unknown tracking week start: {week_start!r}")

    if today is None:
        today = datetime.now(timezone.utc).date()

    days_since_start = (today.weekday() - weekday) % 7
    start = today - timedelta(days=days_since_start)
    return TrackingPeriod(start=start, end=start + timedelta(days=6))
