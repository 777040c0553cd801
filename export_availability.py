"""Read-only views over the availability grid: CSV, tile chart, interactive chart.

The static chart stacks three layers per tile (availability, then preference,
then filled slot) so a preferred date still shows through a filled one. The
interactive chart carries one resolved status per tile plus the profile of the
guest for click lookups.
"""
from __future__ import annotations

import csv
import warnings
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import altair as alt
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import Patch, Rectangle

from availability_grid import AVAILABLE, PREFERRED, SCHEDULED, UNAVAILABLE, Grid

COLORS = {
    PREFERRED: "#D7191C",
    AVAILABLE: "#FDAE61",
    SCHEDULED: "#404040",
    UNAVAILABLE: "#2C7BB6",
}
LEGEND_ORDER = (AVAILABLE, UNAVAILABLE, PREFERRED, SCHEDULED)
LAYER_ALPHA = {AVAILABLE: 1.0, PREFERRED: 1.0, SCHEDULED: 0.75}
FILLED_OPACITY = 0.5
DETAIL_FIELDS = ["Guest", "Dept", "Advisor", "Degree", "Email", "Description"]


def flatten(grid: Grid) -> List[List[str]]:
    """Guest rows x date columns of resolved labels, header row first."""
    out = [["Guest"] + [d.isoformat() for d in grid.dates]]
    for g in grid.guests:
        out.append([g] + [grid.label(g, d) for d in grid.dates])
    return out


def write_availability_csv(grid: Grid, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        csv.writer(handle).writerows(flatten(grid))


def layer_records(grid: Grid) -> List[Dict[str, str]]:
    rows: List[Dict[str, str]] = []
    for g in grid.unscheduled_guests():
        for d in grid.dates:
            cell = grid.cell(g, d)
            day = d.isoformat()
            rows.append({"Date": day, "Guest": g, "Layer": AVAILABLE,
                         "Value": AVAILABLE if cell.available else UNAVAILABLE})
            if cell.preferred:
                rows.append({"Date": day, "Guest": g, "Layer": PREFERRED, "Value": PREFERRED})
            if cell.scheduled:
                rows.append({"Date": day, "Guest": g, "Layer": SCHEDULED, "Value": SCHEDULED})
    return rows


def interactive_records(grid: Grid, guests: Optional[Mapping[str, object]] = None) -> List[Dict[str, object]]:
    guests = guests or {}
    rows: List[Dict[str, object]] = []
    for g in grid.unscheduled_guests():
        profile = guests.get(g)
        detail = {
            "Dept": getattr(profile, "dept", ""),
            "Advisor": getattr(profile, "advisor", ""),
            "Degree": getattr(profile, "degree", ""),
            "Email": getattr(profile, "email", ""),
            "Description": getattr(profile, "description", ""),
        }
        for d in grid.dates:
            cell = grid.cell(g, d)
            rows.append({
                "Guest": g,
                "Date": d.isoformat(),
                "Status": cell.guest_label,
                "SlotFilled": "yes" if cell.scheduled else "no",
                "Opacity": FILLED_OPACITY if cell.scheduled else 1.0,
                **detail,
            })
    return rows


def render_tile_chart(grid: Grid, path: Path, dpi: int = 200) -> Optional[Path]:
    records = layer_records(grid)
    if not records:
        return None
    guests = grid.unscheduled_guests()
    days = [d.isoformat() for d in grid.dates]
    x_of = {day: i for i, day in enumerate(days)}
    y_of = {g: i for i, g in enumerate(guests)}

    height = max(5.5, 0.22 * len(guests) + 2)
    fig, ax = plt.subplots(figsize=(11, height))
    for layer in (AVAILABLE, PREFERRED, SCHEDULED):
        for rec in records:
            if rec["Layer"] != layer:
                continue
            ax.add_patch(Rectangle(
                (x_of[rec["Date"]] - 0.5, y_of[rec["Guest"]] - 0.5), 1, 1,
                facecolor=COLORS[rec["Value"]], alpha=LAYER_ALPHA[layer],
                edgecolor="none",
            ))

    ax.set_xlim(-0.5, len(days) - 0.5)
    ax.set_ylim(-0.5, len(guests) - 0.5)
    ax.set_xticks(range(len(days)))
    ax.set_xticklabels(days, rotation=90, fontsize=7)
    ax.set_yticks(range(len(guests)))
    ax.set_yticklabels(guests, fontsize=7)
    ax.invert_yaxis()
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)
    handles = [Patch(facecolor=COLORS[label], label=label) for label in LEGEND_ORDER]
    ax.legend(handles=handles, title="Availability", loc="upper left", bbox_to_anchor=(1.01, 1.0), frameon=False)

    path.parent.mkdir(parents=True, exist_ok=True)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def build_interactive_chart(records: List[Dict[str, object]]) -> alt.VConcatChart:
    data = alt.Data(values=records)
    pick = alt.selection_point(fields=["Guest"], on="click", empty=False)
    tiles = (
        alt.Chart(data)
        .mark_rect(stroke="white", strokeWidth=0.5)
        .encode(
            x=alt.X("Date:O", title="", axis=alt.Axis(labelAngle=-90)),
            y=alt.Y("Guest:N", title=""),
            color=alt.Color(
                "Status:N",
                title="Availability",
                scale=alt.Scale(
                    domain=[AVAILABLE, UNAVAILABLE, PREFERRED],
                    range=[COLORS[AVAILABLE], COLORS[UNAVAILABLE], COLORS[PREFERRED]],
                ),
            ),
            opacity=alt.condition(pick, alt.value(1.0), alt.Opacity("Opacity:Q", scale=None, legend=None)),
            tooltip=[
                alt.Tooltip("Guest:N"),
                alt.Tooltip("Date:O"),
                alt.Tooltip("Status:N"),
                alt.Tooltip("SlotFilled:N", title="Slot filled"),
            ],
        )
        .add_params(pick)
    )
    detail = (
        alt.Chart(data)
        .transform_filter(pick)
        .transform_aggregate(tiles="count()", groupby=DETAIL_FIELDS)
        .transform_fold(DETAIL_FIELDS, as_=["Field", "Value"])
        .mark_text(align="left", baseline="middle")
        .encode(
            y=alt.Y("Field:N", sort=DETAIL_FIELDS, title=None),
            text=alt.Text("Value:N"),
        )
        .properties(title="Click a tile for guest details", width=600)
    )
    return alt.vconcat(tiles, detail)


def render_interactive_chart(records: List[Dict[str, object]], path: Path) -> Optional[Path]:
    if not records:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    with alt.data_transformers.disable_max_rows():
        build_interactive_chart(records).save(str(path))
    return path
