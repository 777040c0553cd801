#!/usr/bin/env python3
"""
Build the guest-scheduling reports for the weekly show.

Pulls the signup form responses ("participants") and the booked guests
("scheduled_guests"), then:

  1. rebuilds the scheduled table (sorted, departments filled from signups,
     unconfirmed rows dropped) and, only if it differs from the published
     sheet, backs the sheet up and overwrites it;
  2. writes scheduled.csv;
  3. builds the guest x Sunday availability grid for the coming year;
  4. writes availability.csv, availability.pdf (tile chart) and
     availability.html (hover/click chart);
  5. writes a markdown dossier for every guest that does not have one yet and
     runs ``make all`` in the dossier directory.

Both sheets are downloaded and parsed before anything is written, so a failed
download leaves the previous outputs untouched.

Operating assumption: one run at a time. Nothing locks the scheduled sheet
against a second copy of this script running concurrently.
"""

from __future__ import annotations

import argparse
import os
import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Set

import availability_grid
import date_window
import export_availability as exporter
from availability import parse_availability, parse_preference
from dossiers import run_document_build, write_dossiers
from reconcile_schedule import parse_scheduled, publish, reconcile, write_scheduled_csv
from run_log import RunLog
from sheets import SourceError, download_if_needed, export_csv_url, open_store, read_csv_matrix
from signups import parse_signups

# ---------------------------- CONFIG ---------------------------------

# Spreadsheet ids come from the environment so they stay out of the repo
SIGNUPS_DOC_ID = os.environ.get("SIGNUPS_DOC_ID", "")        # participants (form responses)
SIGNUPS_GID = os.environ.get("SIGNUPS_GID", "0")
SCHEDULED_DOC_ID = os.environ.get("SCHEDULED_DOC_ID", "")    # scheduled_guests
SCHEDULED_GID = os.environ.get("SCHEDULED_GID", "0")
SCHEDULED_WORKSHEET = "Sheet1"
BACKUP_TITLE = "scheduled_guests_backup"

# Local cache
CACHE_SIGNUPS_CSV = Path("participants.csv")
CACHE_SCHEDULED_CSV = Path("scheduled_guests.csv")

# Outputs (relative to --out-dir)
OUTPUT_SCHEDULED = Path("scheduled.csv")
OUTPUT_AVAILABILITY_CSV = Path("availability.csv")
OUTPUT_AVAILABILITY_CHART = Path("availability.pdf")
OUTPUT_AVAILABILITY_HTML = Path("availability.html")
OUTPUT_RUN_LOG = Path("run_log.csv")
DOSSIER_ROOT = Path("dossiers")
DOSSIER_MD_DIR = DOSSIER_ROOT / "md_files"

ANCHOR_WEEKDAY = date_window.SUNDAY
HORIZON_WEEKS = 52


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Reconcile guest signups with the schedule and build reports", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("--signups-doc", default=SIGNUPS_DOC_ID, help="Spreadsheet id of the signup form responses")
    ap.add_argument("--signups-gid", default=SIGNUPS_GID, help="Tab gid of the signup responses")
    ap.add_argument("--scheduled-doc", default=SCHEDULED_DOC_ID, help="Spreadsheet id of the scheduled guests")
    ap.add_argument("--scheduled-gid", default=SCHEDULED_GID, help="Tab gid of the scheduled guests")
    ap.add_argument("--scheduled-worksheet", default=SCHEDULED_WORKSHEET, help="Worksheet title overwritten on republish")
    ap.add_argument("--backup-title", default=BACKUP_TITLE, help="Title of the backup copy of the scheduled sheet")
    ap.add_argument("--credentials", type=Path, default=None, help="Service account JSON for gspread (default: gspread's standard location)")
    ap.add_argument("--use-cache", action="store_true", help="Reuse participants.csv / scheduled_guests.csv if present instead of downloading (implies --no-publish)")
    ap.add_argument("--no-publish", action="store_true", help="Never back up or overwrite the scheduled sheet")
    ap.add_argument("--no-build", action="store_true", help="Skip 'make all' in the dossier directory")
    ap.add_argument("--today", type=date.fromisoformat, default=None, help="Run as if today were this ISO date")
    ap.add_argument("--out-dir", type=Path, default=Path("."), help="Directory for all outputs")
    ap.add_argument("--horizon-weeks", type=int, default=HORIZON_WEEKS, help="How many weeks ahead to plan")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    today = args.today or date.today()
    out = args.out_dir
    log = RunLog()

    # Download + parse both sources before writing anything
    try:
        signups_csv = download_if_needed(
            export_csv_url(args.signups_doc, args.signups_gid), out / CACHE_SIGNUPS_CSV, force=not args.use_cache)
        scheduled_csv = download_if_needed(
            export_csv_url(args.scheduled_doc, args.scheduled_gid), out / CACHE_SCHEDULED_CSV, force=not args.use_cache)
        guests = parse_signups(read_csv_matrix(signups_csv), log)
        slots = parse_scheduled(read_csv_matrix(scheduled_csv), today, log)
    except (SourceError, ValueError) as e:
        print(f"Cannot read sources: {e}", file=sys.stderr)
        return 1

    # Scheduled table
    sched_rows, changed = reconcile(guests, slots, log)
    # Cached sources are never published over the live sheet
    if changed and not (args.no_publish or args.use_cache):
        try:
            store = open_store(args.scheduled_doc, args.scheduled_worksheet, args.backup_title, args.credentials)
            publish(store, sched_rows, changed)
        except SourceError as e:
            print(f"Cannot republish scheduled sheet: {e}", file=sys.stderr)
            return 1
        print(f"Republished scheduled sheet (backup: {args.backup_title})")
    elif changed:
        reason = "--no-publish" if args.no_publish else "--use-cache"
        print(f"Scheduled sheet differs from canonical table; not republished ({reason})")
    else:
        print("Scheduled sheet unchanged")
    write_scheduled_csv(sched_rows, out / OUTPUT_SCHEDULED)
    print(f"Wrote: {(out / OUTPUT_SCHEDULED).resolve()}")

    # Availability
    availability_map: Dict[str, Set[date]] = {}
    preference_map: Dict[str, Optional[date]] = {}
    for g in guests:
        availability_map[g.name] = parse_availability(g.availability, today, log, g.name)
        preference_map[g.name] = parse_preference(g.preference, today, log, g.name)

    sundays = date_window.generate(ANCHOR_WEEKDAY, args.horizon_weeks, today)
    grid = availability_grid.build(
        sundays, [g.name for g in guests], availability_map, preference_map, slots, today, log)
    unscheduled = grid.unscheduled_guests()
    print(f"Guests: {len(grid.guests)} (unscheduled={len(unscheduled)}), future dates: {len(grid.dates)}")

    exporter.write_availability_csv(grid, out / OUTPUT_AVAILABILITY_CSV)
    print(f"Wrote: {(out / OUTPUT_AVAILABILITY_CSV).resolve()}")
    chart = exporter.render_tile_chart(grid, out / OUTPUT_AVAILABILITY_CHART)
    html = exporter.render_interactive_chart(
        exporter.interactive_records(grid, {g.name: g for g in guests}), out / OUTPUT_AVAILABILITY_HTML)
    if chart is None or html is None:
        print("No unscheduled guests with future dates; charts skipped")
    for path in (chart, html):
        if path is not None:
            print(f"Wrote: {path.resolve()}")

    # Dossiers
    written = write_dossiers(guests, availability_map, out / DOSSIER_MD_DIR, preference_map)
    print(f"Dossiers: {len(written)} new")
    if not args.no_build:
        rc = run_document_build(out / DOSSIER_ROOT)
        if rc is None:
            print(f"No Makefile in {out / DOSSIER_ROOT}; dossier build skipped")
        elif rc != 0:
            print(f"Dossier build exited with status {rc}", file=sys.stderr)

    log.write_csv(out / OUTPUT_RUN_LOG)
    print(log.summary())
    print(f"Wrote: {(out / OUTPUT_RUN_LOG).resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
