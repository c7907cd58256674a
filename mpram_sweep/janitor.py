"""Workspace housekeeping around each tool run."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

# Report/status files Quartus leaves as "<revision>.<suffix>".
REPORT_SUFFIXES = [
    "flow.rpt",
    "map.rpt",
    "map.summary",
    "map.smsg",
    "merge.rpt",
    "merge.summary",
    "fit.rpt",
    "fit.summary",
    "fit.smsg",
    "sta.rpt",
    "sta.summary",
    "pin",
    "done",
]

# Build byproducts removed once the sweep is over.
BYPRODUCT_SUFFIXES = ["sof", "pof", "jdi", "sld", "qws", "qdf", "rpt.html"]
BUILD_DIRS = ["db", "incremental_db"]


def report_files(workdir: Path, revision: str) -> List[Path]:
    return [workdir / f"{revision}.{s}" for s in REPORT_SUFFIXES]


def purge_reports(workdir: Path, revision: str) -> List[Path]:
    """Delete leftover reports so a missing file means "not produced yet"."""
    removed = []
    for p in report_files(workdir, revision):
        if p.exists():
            p.unlink()
            removed.append(p)
    return removed


def collect_reports(
    workdir: Path, revision: str, run_dir: Path, run_name: str
) -> List[Path]:
    """Move surviving reports to ``run_dir/<run_name>.<suffix>``."""
    moved = []
    for suffix, p in zip(REPORT_SUFFIXES, report_files(workdir, revision)):
        if not p.exists():
            continue
        run_dir.mkdir(parents=True, exist_ok=True)
        dst = run_dir / f"{run_name}.{suffix}"
        shutil.move(str(p), str(dst))
        moved.append(dst)
    return moved


def clean_workspace(workdir: Path, revision: str) -> List[Path]:
    """Remove build directories and remaining byproducts after a sweep."""
    removed = []
    for d in BUILD_DIRS:
        p = workdir / d
        if p.is_dir():
            shutil.rmtree(p)
            removed.append(p)
    leftovers = report_files(workdir, revision) + [
        workdir / f"{revision}.{s}" for s in BYPRODUCT_SUFFIXES
    ]
    for p in leftovers:
        if p.exists():
            p.unlink()
            removed.append(p)
    return removed
