"""Candidate show dates: one per week, starting from the last anchor weekday."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Union

SUNDAY = 6  # date.weekday() numbering, Monday == 0

DateLike = Union[date, datetime]


def _as_date(now: DateLike) -> date:
    return now.date() if isinstance(now, datetime) else now


def last_weekday(anchor_weekday: int, now: DateLike) -> date:
    """Most recent ``anchor_weekday`` on or before ``now``."""
    if not 0 <= anchor_weekday <= 6:
        raise ValueError(f"anchor_weekday must be 0..6, got {anchor_weekday!r}")
    today = _as_date(now)
    return today - timedelta(days=(today.weekday() - anchor_weekday) % 7)


def generate(anchor_weekday: int, horizon_weeks: int, now: DateLike) -> List[date]:
    """Return ``horizon_weeks + 1`` dates spaced one week apart.

    The first date is ``last_weekday(anchor_weekday, now)`` so it is never in
    the future; ``now`` is passed in explicitly so a run can be replayed.
    """
    if horizon_weeks < 0:
        raise ValueError(f"horizon_weeks must be >= 0, got {horizon_weeks!r}")
    first = last_weekday(anchor_weekday, now)
    return [first + timedelta(weeks=w) for w in range(horizon_weeks + 1)]
