"""Google Sheets access.

Reads use the sheet's CSV export link, cached to a local file; the only write
(backup + overwrite of the scheduled-guests sheet) goes through gspread with a
service account.
"""

from __future__ import annotations

import csv
import io
import ssl
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import List, Optional

import certifi
import gspread


class SourceError(RuntimeError):
    """A spreadsheet could not be read or written; the run cannot continue."""


def export_csv_url(doc_id: str, gid: str) -> str:
    base = f"https://docs.google.com/spreadsheets/d/{doc_id}/export"
    q = urllib.parse.urlencode({"format": "csv", "gid": gid})
    return f"{base}?{q}"


def download_if_needed(url: str, dest: Path, force: bool = False) -> Path:
    if dest.exists() and not force:
        return dest
    ctx = ssl.create_default_context(cafile=certifi.where())
    req = urllib.request.Request(url, headers={"User-Agent": "Mozilla/5.0 (GuestScheduler/1.0)"})
    try:
        with urllib.request.urlopen(req, context=ctx) as resp:
            data = resp.read()
    except (urllib.error.URLError, OSError) as exc:
        raise SourceError(f"Could not download {url}: {exc}") from exc
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    return dest


def read_csv_matrix(path: Path) -> List[List[str]]:
    raw = path.read_bytes()
    text = raw.decode("utf-8-sig", errors="replace")
    rdr = csv.reader(io.StringIO(text))
    return [list(row) for row in rdr]


class ScheduleStore:
    """The published scheduled-guests spreadsheet plus its backup copy."""

    def __init__(self, client: gspread.Client, key: str, worksheet: str, backup_title: str):
        self.client = client
        self.key = key
        self.worksheet = worksheet
        self.backup_title = backup_title

    def backup(self) -> None:
        """Replace any previous backup with a fresh copy of the sheet."""
        try:
            for meta in self.client.list_spreadsheet_files(title=self.backup_title):
                self.client.del_spreadsheet(meta["id"])
            self.client.copy(self.key, title=self.backup_title, copy_permissions=False)
        except (gspread.exceptions.GSpreadException, OSError) as exc:
            raise SourceError(f"Backup of {self.key} failed: {exc}") from exc

    def overwrite(self, values: List[List[str]]) -> None:
        try:
            ws = self.client.open_by_key(self.key).worksheet(self.worksheet)
            ws.clear()
            ws.update(values=values, range_name="A1")
        except (gspread.exceptions.GSpreadException, OSError) as exc:
            raise SourceError(f"Overwrite of {self.key} failed: {exc}") from exc


def open_store(key: str, worksheet: str, backup_title: str, credentials: Optional[Path] = None) -> ScheduleStore:
    try:
        if credentials is not None:
            client = gspread.service_account(filename=str(credentials))
        else:
            client = gspread.service_account()
    except (OSError, ValueError, gspread.exceptions.GSpreadException) as exc:
        raise SourceError(f"Google Sheets authentication failed: {exc}") from exc
    return ScheduleStore(client, key, worksheet, backup_title)
