"""Per-run record of recoverable problems (bad dates, name collisions, ...).

Nothing here is fatal: each row marks a value that was skipped or degraded so
the operator can fix the source sheet by hand.
"""

from __future__ import annotations

import csv
from collections import Counter
from pathlib import Path
from typing import Dict, List

RUN_LOG_FIELDS = ["Step", "Phase", "Subject", "Value", "Status", "Note"]


class RunLog:
    def __init__(self):
        self.rows: List[Dict[str, object]] = []
        self.step = 0

    def log(self, phase: str, subject: str, value: str, status: str, note: str = ""):
        self.step += 1
        self.rows.append({
            "Step": self.step, "Phase": phase, "Subject": subject,
            "Value": value, "Status": status, "Note": note,
        })

    def statuses(self) -> Counter:
        return Counter(r["Status"] for r in self.rows)

    def summary(self) -> str:
        if not self.rows:
            return "No input problems recorded."
        counts = self.statuses()
        parts = [f"{status}={n}" for status, n in sorted(counts.items())]
        return f"Input problems ({len(self.rows)}): " + ", ".join(parts)

    def write_csv(self, out: Path):
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=RUN_LOG_FIELDS)
            w.writeheader()
            for r in self.rows: w.writerow({k: r.get(k, "") for k in RUN_LOG_FIELDS})
