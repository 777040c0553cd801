"""One markdown dossier per guest, written once and never overwritten.

Formatting to PDF/HTML is left to the Makefile in the dossier directory
(pandoc); this module only writes the markdown and kicks off ``make all``.
"""

from __future__ import annotations

import re
import subprocess
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set

from signups import Guest


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    return slug or "guest"


def dossier_filename(name: str, out_dir: Path) -> Path:
    return out_dir / f"{slugify(name)}.md"


def dossier_filenames(names: Iterable[str], out_dir: Path) -> Dict[str, Path]:
    """Distinct file per name, in order; a slug already taken gets ``_2``, ``_3``, ...

    "A. Lee" and "A Lee" both slugify to ``a_lee``, so the second becomes
    ``a_lee_2``.
    """
    taken: Set[str] = set()
    paths: Dict[str, Path] = {}
    for name in names:
        slug = candidate = slugify(name)
        n = 2
        while candidate in taken:
            candidate = f"{slug}_{n}"
            n += 1
        taken.add(candidate)
        paths[name] = out_dir / f"{candidate}.md"
    return paths


def _fmt(d: date) -> str:
    return f"{d.strftime('%A, %B')} {d.day}, {d.year}"


def render_dossier(guest: Guest, dates: Iterable[date], preference: Optional[date] = None) -> str:
    lines = [
        f"# {guest.name}",
        "",
        f"- **Email:** {guest.email or 'n/a'}",
        f"- **Department/Program:** {guest.dept or 'n/a'}",
        f"- **Advisor(s):** {guest.advisor or 'n/a'}",
        f"- **Degree:** {guest.degree or 'n/a'}",
        f"- **Signed up:** {guest.timestamp or 'n/a'}",
        f"- **Preferred date:** {_fmt(preference) if preference else (guest.preference or 'none given')}",
        "",
        "## Availability",
        "",
    ]
    ordered = sorted(dates)
    if ordered:
        lines.extend(f"- {_fmt(d)}" for d in ordered)
    else:
        lines.append("No dates given.")
    lines += ["", "## Research", "", guest.description or "No description given.", ""]
    return "\n".join(lines)


def write_dossiers(
    guests: Iterable[Guest],
    availability_map: Mapping[str, Set[date]],
    out_dir: Path,
    preference_map: Optional[Mapping[str, Optional[date]]] = None,
) -> List[Path]:
    """Write dossiers for guests that do not have one yet; return new paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    preference_map = preference_map or {}
    guests = list(guests)
    paths = dossier_filenames([g.name for g in guests], out_dir)
    written: List[Path] = []
    for g in guests:
        path = paths[g.name]
        if path.exists():
            continue
        text = render_dossier(g, availability_map.get(g.name, set()), preference_map.get(g.name))
        path.write_text(text, encoding="utf-8")
        written.append(path)
    return written


def run_document_build(dossier_root: Path) -> Optional[int]:
    """Run ``make all`` in ``dossier_root``; None when there is no Makefile."""
    if not (dossier_root / "Makefile").exists():
        return None
    try:
        proc = subprocess.run(["make", "all"], cwd=dossier_root)
    except OSError:
        return 127
    return proc.returncode
