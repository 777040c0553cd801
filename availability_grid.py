"""Guest x candidate-date availability grid.

Each cell keeps three independent signals (available, preferred, scheduled)
so charts can overlay them; the single human-facing label is derived with the
precedence Scheduled > Preferred > Available > Unavailable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from run_log import RunLog

AVAILABLE = "Available"
UNAVAILABLE = "Unavailable"
PREFERRED = "Preferred"
SCHEDULED = "Scheduled"

# highest precedence first
LABELS = (SCHEDULED, PREFERRED, AVAILABLE, UNAVAILABLE)


@dataclass(frozen=True)
class Cell:
    available: bool = False
    preferred: bool = False
    scheduled: bool = False

    @property
    def label(self) -> str:
        if self.scheduled:
            return SCHEDULED
        return self.guest_label

    @property
    def guest_label(self) -> str:
        """Label from the guest's own answers, ignoring filled slots."""
        if self.preferred:
            return PREFERRED
        if self.available:
            return AVAILABLE
        return UNAVAILABLE


@dataclass
class Grid:
    dates: List[date]
    guests: List[str]
    cells: Dict[Tuple[str, date], Cell]
    scheduled_guests: Set[str] = field(default_factory=set)
    filled_dates: Set[date] = field(default_factory=set)

    def cell(self, guest: str, d: date) -> Cell:
        return self.cells[(guest, d)]

    def label(self, guest: str, d: date) -> str:
        return self.cells[(guest, d)].label

    def is_scheduled_guest(self, guest: str) -> bool:
        return guest in self.scheduled_guests

    def unscheduled_guests(self) -> List[str]:
        return [g for g in self.guests if g not in self.scheduled_guests]

    def scheduled_dates(self) -> List[date]:
        return [d for d in self.dates if d in self.filled_dates]


def build(
    candidate_dates: Iterable[date],
    guests: Iterable[str],
    availability_map: Mapping[str, Set[date]],
    preference_map: Mapping[str, Optional[date]],
    scheduled_slots: Iterable,
    today: date,
    log: Optional[RunLog] = None,
) -> Grid:
    """Build the grid, then drop every date that is not strictly after ``today``.

    ``scheduled_slots`` are objects with ``name`` and ``date`` attributes; only
    slots with a non-empty name fill their date.
    """
    dates = list(candidate_dates)
    window = set(dates)
    names = list(guests)

    filled: Set[date] = set()
    booked: Set[str] = set()
    for slot in scheduled_slots:
        name = (slot.name or "").strip()
        if not name:
            continue
        booked.add(name)
        if slot.date is None:
            continue
        if slot.date in window:
            filled.add(slot.date)
        elif log is not None:
            log.log("grid", name, slot.date.isoformat(), "Outside date window", "ignored for grid")

    cells: Dict[Tuple[str, date], Cell] = {}
    for g in names:
        avail = availability_map.get(g) or set()
        pref = preference_map.get(g)
        if pref is not None and pref not in avail and log is not None:
            log.log("grid", g, pref.isoformat(), "Preference not in availability", "preference ignored")
        for d in dates:
            is_avail = d in avail
            cells[(g, d)] = Cell(
                available=is_avail,
                preferred=is_avail and pref == d,
                scheduled=d in filled,
            )

    future = [d for d in dates if d > today]
    cells = {(g, d): c for (g, d), c in cells.items() if d > today}
    return Grid(
        dates=future, guests=names, cells=cells,
        scheduled_guests=booked & set(names),
        filled_dates={d for d in filled if d > today},
    )
