"""Turn a guest's free-text availability and preference answers into dates.

Form answers look like ``"3/1, 3/8, 3/15"`` or ``"Sunday, March 1, 2026"``.
A token that does not parse is recorded in the run log and skipped; it never
costs the guest their other dates.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Set, Tuple

from dateutil import parser as date_parser

from run_log import RunLog

# A year-less "m/d" closer than this many days in the past stays in the
# current year; anything older is taken to mean next year.
YEAR_ROLLOVER_DAYS = 90

MAX_JOIN = 3

# Defaults that differ in year, month and day, so parsing a token against both
# shows which fields the token wrote out. Both years are leap years.
_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 2, 2))

_FULL_YEAR = re.compile(r"^\d{4}$")
_SPLIT = re.compile(r"[,;\n]")


def trim(s: str) -> str:
    return (s or "").strip()


def _written_fields(text: str) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """(year, month, day) as written in ``text``; a part left out is None.

    Raises ValueError (dateutil's ParserError) or OverflowError when the text
    is not a date.
    """
    a, b = (date_parser.parse(text, default=d) for d in _DEFAULTS)
    return (
        a.year if a.year == b.year else None,
        a.month if a.month == b.month else None,
        a.day if a.day == b.day else None,
    )


def _with_year(month: int, day: int, year: Optional[int], today: date, roll_forward: bool) -> Optional[date]:
    if year is not None:
        return date(year, month, day)
    years = (today.year, today.year + 1) if roll_forward else (today.year,)
    for y in years:
        try:
            d = date(y, month, day)
        except ValueError:
            continue
        if y > today.year or not roll_forward or d >= today - timedelta(days=YEAR_ROLLOVER_DAYS):
            return d
    return None


def parse_date_token(token: str, today: date, roll_forward: bool = True) -> Optional[date]:
    """Parse one date token, or return None.

    Only tokens that name both a month and a day are dates; a bare number or a
    weekday on its own is not. ``today`` only matters for tokens without a year:
    they take the current year, and with ``roll_forward`` a date well in the
    past moves to next year (answers about next spring written in the autumn).
    """
    text = " ".join(trim(token).split())
    if not text:
        return None
    try:
        year, month, day = _written_fields(text)
    except (ValueError, OverflowError):
        return None
    if month is None or day is None:
        return None
    return _with_year(month, day, year, today, roll_forward)


def split_tokens(raw: str) -> List[str]:
    return [t for t in (trim(p) for p in _SPLIT.split(raw or "")) if t]


def _joinable(pieces: List[str], today: date) -> bool:
    # "March 1", "2026" joins; "March 1", "8" must not become March 1, 2008
    return bool(_FULL_YEAR.match(pieces[-1])) or parse_date_token(pieces[0], today) is None


def _scan(raw: str, today: date):
    """Yield ``(date or None, text)`` per token, joining neighbours when that
    makes a date (``"March 1", "2026"`` -> ``"March 1, 2026"``)."""
    tokens = split_tokens(raw)
    i = 0
    while i < len(tokens):
        for k in range(min(MAX_JOIN, len(tokens) - i), 0, -1):
            pieces = tokens[i:i + k]
            if k > 1 and not _joinable(pieces, today):
                continue
            text = ", ".join(pieces)
            d = parse_date_token(text, today)
            if d is not None:
                yield d, text
                i += k
                break
        else:
            yield None, tokens[i]
            i += 1


def parse_availability(raw_text: str, today: date, log: Optional[RunLog] = None, guest: str = "") -> Set[date]:
    dates: Set[date] = set()
    for d, text in _scan(raw_text, today):
        if d is None:
            if log is not None:
                log.log("availability", guest, text, "Unparseable date", "token skipped")
            continue
        dates.add(d)
    return dates


def parse_preference(raw_text: str, today: date, log: Optional[RunLog] = None, guest: str = "") -> Optional[date]:
    """First date found in the preference answer, or None."""
    for d, text in _scan(raw_text, today):
        if d is not None:
            return d
        if log is not None:
            log.log("preference", guest, text, "Unparseable date", "token skipped")
    return None
