"""Fixtures and helpers for scheduling tests."""
from __future__ import annotations

import csv
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from reconcile_schedule import SCHEDULE_COLUMNS
from signups import SIGNUP_COLUMNS

# Wednesday; the Sundays around it are 2026-02-15, 02-22, 03-01, 03-08, 03-15
TODAY = date(2026, 2, 18)

SIGNUP_HEADER: Sequence[str] = tuple(SIGNUP_COLUMNS.values())


def signup_row(
    *,
    name: str,
    email: str = "",
    dept: str = "",
    advisor: str = "",
    degree: str = "PhD",
    availability: str = "",
    preference: str = "",
    description: str = "",
    timestamp: str = "2/1/2026 10:00:00",
) -> List[str]:
    """Build one signup-sheet row in the form's column order."""
    values: Dict[str, str] = {
        "timestamp": timestamp,
        "name": name,
        "email": email or (f"{name.split()[0].lower()}@example.edu" if name.strip() else ""),
        "dept": dept,
        "advisor": advisor,
        "degree": degree,
        "availability": availability,
        "preference": preference,
        "description": description,
    }
    return [values[field] for field in SIGNUP_COLUMNS]


def schedule_row(name: str, day: str, showtime: str = "7:00 PM", dept: str = "", hosts: str = "Sam") -> List[str]:
    return [name, day, showtime, dept, hosts]


def write_csv(path: Path, header: Iterable[str], rows: Iterable[Sequence[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(list(header))
        writer.writerows(rows)
    return path


def write_signups(path: Path, rows: Iterable[Sequence[str]]) -> Path:
    return write_csv(path, SIGNUP_HEADER, rows)


def write_schedule(path: Path, rows: Iterable[Sequence[str]]) -> Path:
    return write_csv(path, SCHEDULE_COLUMNS, rows)


class FakeStore:
    """Records backup/overwrite calls in order."""

    def __init__(self):
        self.calls: List[str] = []
        self.values: List[List[str]] = []

    def backup(self) -> None:
        self.calls.append("backup")

    def overwrite(self, values: List[List[str]]) -> None:
        self.calls.append("overwrite")
        self.values = values
