"""Signup-form responses -> Guest records.

The form sheet's header row holds the question text; columns are located by
header name and fall back to the form's fixed column order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from run_log import RunLog

# field -> form question, in the form's column order
SIGNUP_COLUMNS: Dict[str, str] = {
    "timestamp": "Timestamp",
    "name": "Name",
    "email": "Email",
    "dept": "Department/Program",
    "advisor": "Primary Investigator and/or Major Advisor(s)",
    "degree": "Degree working towards",
    "availability": "What Sundays are you available?",
    "preference": "Which Sunday is your preferred date?",
    "description": "Please give a short (2-3 sentence) description of your research",
}


@dataclass
class Guest:
    name: str
    email: str = ""
    dept: str = ""
    advisor: str = ""
    degree: str = ""
    availability: str = ""
    preference: str = ""
    description: str = ""
    timestamp: str = ""


def trim(s: str) -> str:
    return (s or "").strip()


def _key(header: str) -> str:
    return re.sub(r"[^a-z0-9]", "", trim(header).lower())


def locate_columns(header: List[str]) -> Dict[str, int]:
    """Map each Guest field to a 0-based column index.

    Exact (punctuation-insensitive) header match wins; a missing header falls
    back to the field's position in ``SIGNUP_COLUMNS``.
    """
    by_key = {_key(h): i for i, h in enumerate(header) if trim(h)}
    cols: Dict[str, int] = {}
    for pos, (field, question) in enumerate(SIGNUP_COLUMNS.items()):
        idx = by_key.get(_key(question))
        if idx is None and pos < len(header):
            idx = pos
        if idx is None:
            raise ValueError(f"Signup sheet has no column for {question!r}")
        cols[field] = idx
    return cols


def make_unique(names: List[str]) -> List[str]:
    """Suffix repeated names with ``.1``, ``.2``, ... in order of appearance."""
    seen = set(names)
    used = set()
    out: List[str] = []
    for name in names:
        if name not in used:
            used.add(name)
            out.append(name)
            continue
        n = 1
        while f"{name}.{n}" in used or f"{name}.{n}" in seen:
            n += 1
        new = f"{name}.{n}"
        used.add(new)
        out.append(new)
    return out


def parse_signups(matrix: List[List[str]], log: Optional[RunLog] = None) -> List[Guest]:
    if not matrix:
        return []
    cols = locate_columns(matrix[0])

    def cell(row: List[str], field: str) -> str:
        i = cols[field]
        return trim(row[i]) if i < len(row) else ""

    guests: List[Guest] = []
    for r, row in enumerate(matrix[1:], start=2):
        name = cell(row, "name")
        if not name:
            if any(trim(v) for v in row) and log is not None:
                log.log("signups", f"row {r}", "", "Missing name", "row skipped")
            continue
        guests.append(Guest(**{field: cell(row, field) for field in SIGNUP_COLUMNS}))

    unique = make_unique([g.name for g in guests])
    for g, new in zip(guests, unique):
        if new != g.name:
            if log is not None:
                log.log("signups", g.name, new, "Duplicate name", "renamed")
            g.name = new
    return guests
