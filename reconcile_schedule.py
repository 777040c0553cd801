"""Scheduled-guests sheet: parse, reconcile against signups, republish.

The published sheet is the human-edited source of truth for bookings. Each run
rebuilds a canonical version of it (sorted by date, departments filled in from
signups, unconfirmed rows dropped, dates in one format) and only touches the
remote sheet when that canonical table differs from what is published.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from availability import parse_date_token
from run_log import RunLog

SCHEDULE_COLUMNS = ["Name", "Date", "Showtime", "Dept", "Hosts"]
DATE_FORMAT = "%Y-%m-%d"


@dataclass
class ScheduledSlot:
    name: str
    date: Optional[date]
    showtime: str = ""
    dept: str = ""
    hosts: str = ""
    raw_date: str = ""


def trim(s: str) -> str:
    return (s or "").strip()


def format_date(d: Optional[date]) -> str:
    return d.strftime(DATE_FORMAT) if d is not None else ""


def parse_scheduled(matrix: List[List[str]], today: date, log: Optional[RunLog] = None) -> List[ScheduledSlot]:
    if not matrix:
        return []
    header = [trim(h).lower() for h in matrix[0]]
    cols: Dict[str, int] = {}
    for name in SCHEDULE_COLUMNS:
        if name.lower() not in header:
            raise ValueError(f"Scheduled sheet has no {name!r} column")
        cols[name] = header.index(name.lower())

    def cell(row: List[str], name: str) -> str:
        i = cols[name]
        return trim(row[i]) if i < len(row) else ""

    slots: List[ScheduledSlot] = []
    for row in matrix[1:]:
        if not any(trim(v) for v in row):
            continue
        raw = cell(row, "Date")
        d = parse_date_token(raw, today, roll_forward=False) if raw else None
        if raw and d is None and log is not None:
            log.log("scheduled", cell(row, "Name"), raw, "Unparseable date", "treated as unscheduled")
        slots.append(ScheduledSlot(
            name=cell(row, "Name"), date=d, showtime=cell(row, "Showtime"),
            dept=cell(row, "Dept"), hosts=cell(row, "Hosts"), raw_date=raw,
        ))
    return slots


def project(slots: Iterable[ScheduledSlot]) -> List[Dict[str, str]]:
    return [
        {"Name": s.name, "Date": format_date(s.date), "Showtime": s.showtime,
         "Dept": s.dept, "Hosts": s.hosts}
        for s in slots
    ]


def reconcile(signups: Iterable, scheduled_raw: List[ScheduledSlot], log: Optional[RunLog] = None) -> Tuple[List[Dict[str, str]], bool]:
    """Return the canonical scheduled table and whether it differs from the
    published one (``scheduled_raw`` under the same projection)."""
    dept_by_name = {g.name: g.dept for g in signups}

    ordered = sorted(scheduled_raw, key=lambda s: (s.date is None, s.date or date.min))
    canonical: List[ScheduledSlot] = []
    for s in ordered:
        if s.date is None:
            continue
        dept = s.dept
        if not dept and s.name:
            dept = dept_by_name.get(s.name, "")
            if dept and log is not None:
                log.log("reconcile", s.name, dept, "Dept filled from signup", "")
            elif not dept and log is not None:
                log.log("reconcile", s.name, "", "Missing department", "left empty")
        canonical.append(ScheduledSlot(
            name=s.name, date=s.date, showtime=s.showtime,
            dept=dept, hosts=s.hosts, raw_date=s.raw_date,
        ))

    rows = project(canonical)
    return rows, rows != project(scheduled_raw)


def as_sheet_values(rows: List[Dict[str, str]]) -> List[List[str]]:
    return [list(SCHEDULE_COLUMNS)] + [[r[c] for c in SCHEDULE_COLUMNS] for r in rows]


def publish(store, rows: List[Dict[str, str]], changed: bool) -> bool:
    """Back up then overwrite the published sheet, only when ``changed``.

    Backup comes first so an interrupted overwrite leaves the previous table
    recoverable from the copy.
    """
    if not changed:
        return False
    store.backup()
    store.overwrite(as_sheet_values(rows))
    return True


def write_scheduled_csv(rows: List[Dict[str, str]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=SCHEDULE_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
