from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

import availability_grid
import date_window
import export_availability as exporter
from availability_grid import AVAILABLE, PREFERRED, SCHEDULED, UNAVAILABLE
from reconcile_schedule import ScheduledSlot
from signups import Guest
from tests.utils import TODAY

FEB22, MAR1, MAR8 = date(2026, 2, 22), date(2026, 3, 1), date(2026, 3, 8)


def _grid(slots=None):
    dates = date_window.generate(date_window.SUNDAY, 3, TODAY)
    availability = {"Ann": {MAR1, MAR8}, "Bo": {FEB22}, "Cy": {MAR8}}
    preference = {"Ann": MAR8, "Bo": None, "Cy": None}
    if slots is None:
        slots = [ScheduledSlot("Cy", MAR1)]
    return availability_grid.build(dates, ["Ann", "Bo", "Cy"], availability, preference, slots, TODAY)


def test_flatten_has_every_guest_and_future_date() -> None:
    table = exporter.flatten(_grid())
    assert table[0] == ["Guest", "2026-02-22", "2026-03-01", "2026-03-08"]
    assert table[1] == ["Ann", UNAVAILABLE, SCHEDULED, PREFERRED]
    assert table[2] == ["Bo", AVAILABLE, SCHEDULED, UNAVAILABLE]
    assert table[3] == ["Cy", UNAVAILABLE, SCHEDULED, AVAILABLE]


def test_write_availability_csv(tmp_path: Path) -> None:
    out = tmp_path / "availability.csv"
    exporter.write_availability_csv(_grid(), out)
    with out.open(encoding="utf-8", newline="") as fh:
        rows = list(csv.reader(fh))
    assert len(rows) == 4
    assert rows[1][0] == "Ann"


def test_layer_records_only_unscheduled_guests() -> None:
    records = exporter.layer_records(_grid())

    assert {r["Guest"] for r in records} == {"Ann", "Bo"}
    base = [r for r in records if r["Layer"] == AVAILABLE]
    assert len(base) == 2 * 3
    assert {"Date": "2026-03-08", "Guest": "Ann", "Layer": PREFERRED, "Value": PREFERRED} in records
    filled = [r for r in records if r["Layer"] == SCHEDULED]
    assert {(r["Guest"], r["Date"]) for r in filled} == {("Ann", "2026-03-01"), ("Bo", "2026-03-01")}


def test_interactive_records_carry_status_emphasis_and_profile() -> None:
    guests = {"Ann": Guest(name="Ann", dept="Physics", description="Lasers.")}
    records = exporter.interactive_records(_grid(), guests)

    by_key = {(r["Guest"], r["Date"]): r for r in records}
    ann_mar1 = by_key[("Ann", "2026-03-01")]
    assert ann_mar1["Status"] == AVAILABLE
    assert ann_mar1["SlotFilled"] == "yes"
    assert ann_mar1["Opacity"] == exporter.FILLED_OPACITY
    assert ann_mar1["Dept"] == "Physics"
    assert ann_mar1["Description"] == "Lasers."

    bo_feb22 = by_key[("Bo", "2026-02-22")]
    assert bo_feb22["Opacity"] == 1.0
    assert bo_feb22["Dept"] == ""
    assert ("Cy", "2026-03-08") not in by_key


def test_render_tile_chart(tmp_path: Path) -> None:
    out = exporter.render_tile_chart(_grid(), tmp_path / "charts" / "availability.pdf")
    assert out is not None and out.exists() and out.stat().st_size > 0

    png = exporter.render_tile_chart(_grid(), tmp_path / "availability.png", dpi=50)
    assert png is not None and png.read_bytes()[:4] == b"\x89PNG"


def test_tile_chart_skipped_when_everyone_is_scheduled(tmp_path: Path) -> None:
    slots = [ScheduledSlot("Ann", MAR1), ScheduledSlot("Bo", MAR8), ScheduledSlot("Cy", date(2026, 3, 15))]
    out = tmp_path / "availability.pdf"
    assert exporter.render_tile_chart(_grid(slots), out) is None
    assert not out.exists()


def test_interactive_chart_layout_and_html(tmp_path: Path) -> None:
    records = exporter.interactive_records(_grid())
    chart = exporter.build_interactive_chart(records).to_dict()
    assert "vconcat" in chart
    assert chart["vconcat"][0]["mark"]["type"] == "rect"

    out = exporter.render_interactive_chart(records, tmp_path / "availability.html")
    assert out is not None
    assert "vega" in out.read_text(encoding="utf-8").lower()

    assert exporter.render_interactive_chart([], tmp_path / "empty.html") is None
    assert not (tmp_path / "empty.html").exists()
