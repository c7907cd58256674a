"""
Field extraction from Quartus reports.

Reports are ``;``-delimited text tables. Each metric is described once in
FIELDS (which report, which section heading, which row label) and pulled
out by the same generic code. A metric whose report, section or row is
missing keeps the sentinel MISSING.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from mpram_sweep.stages import StageResult

MISSING = "N/A"

FMAX_85C_HEADING = "Slow 900mV 85C Model Fmax Summary"
FMAX_0C_HEADING = "Slow 900mV 0C Model Fmax Summary"
FITTER_HEADING = "Fitter Resource Usage Summary"
# Lines kept after the fitter heading; the summary table is shorter.
FITTER_WINDOW = 100

# Restricted Fmax column of the Fmax summary ("; Fmax ; Restricted Fmax ;").
FMAX_COLUMN = 2

NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?")
BULLET_RE = re.compile(r"^(?:--\s*)+")


@dataclass(frozen=True)
class Field:
    """
    One extracted metric.

    report: stage whose report holds it ("fit" or "sta").
    section: exact heading of the report section.
    label: regex matched against the row label (full match, case
      insensitive, leading "--" bullets removed). None selects the last
      "MHz" row of the section instead.
    window: number of lines scanned after the heading; None scans up to the
      next blank line.
    """

    slot: str
    report: str
    section: str
    label: Optional[str] = None
    window: Optional[int] = None


def _fit(slot: str, label: str) -> Field:
    return Field(slot, "fit", FITTER_HEADING, label, FITTER_WINDOW)


FIELDS: List[Field] = [
    Field("fmax_85c", "sta", FMAX_85C_HEADING),
    Field("fmax_0c", "sta", FMAX_0C_HEADING),
    _fit("aluts", r"ALUTs Used"),
    _fit("comb_aluts", r"Combinational ALUTs"),
    _fit("mem_aluts", r"Memory ALUTs"),
    _fit("lut7", r"7 input functions"),
    _fit("lut6", r"6 input functions"),
    _fit("lut5", r"5 input functions"),
    _fit("lut4", r"4 input functions"),
    _fit("lut3", r"<=3 input functions"),
    _fit("mode_normal", r"normal mode"),
    _fit("mode_extended", r"extended LUT mode"),
    _fit("mode_arith", r"arithmetic mode"),
    _fit("mode_shared", r"shared arithmetic mode"),
    _fit("registers", r"Total registers\*?"),
    _fit("logic_registers", r"Dedicated logic registers"),
    _fit("alms", r"ALMs used.*"),
    _fit("labs", r"Total LABs.*"),
    _fit("logic_labs", r"Logic LABs"),
    _fit("mem_labs", r"Memory LABs.*"),
    _fit("io_pins", r"I/O pins"),
    _fit("clock_pins", r"Clock pins"),
    _fit("input_pins", r"Dedicated input pins"),
    _fit("m20k", r"M20K blocks"),
    _fit("mlab_bits", r"(?:Total )?MLAB memory bits"),
    _fit("block_bits", r"(?:Total )?block memory bits"),
    _fit("block_impl_bits", r"(?:Total )?block memory implementation bits"),
    _fit("dsp", r"(?:Total )?DSP Blocks"),
]

METRIC_SLOTS: Tuple[str, ...] = tuple(f.slot for f in FIELDS)


# ------------------------------ Low level ------------------------------


def read_lines(path: Path) -> List[str]:
    with path.open("r", encoding="utf-8", errors="ignore") as f:
        return f.read().splitlines()


def cells(line: str) -> List[str]:
    """Cells of a ``; a ; b ;`` table row (outer empties kept)."""
    return [c.strip() for c in line.split(";")]


def is_heading(line: str, heading: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(";") and stripped.strip(";").strip() == heading


def section_lines(
    lines: List[str], heading: str, window: Optional[int] = None
) -> Optional[List[str]]:
    """Lines after the first ``heading`` row, or None if it is absent."""
    for i, line in enumerate(lines):
        if not is_heading(line, heading):
            continue
        if window is not None:
            return lines[i + 1 : i + 1 + window]
        out = []
        for follow in lines[i + 1 :]:
            if not follow.strip():
                break
            out.append(follow)
        return out
    return None


def clean_value(raw: str) -> str:
    """'1,234 / 469,440 ( < 1 % )' -> '1234'."""
    value = raw.split("/", 1)[0]
    value = re.sub(r"\(.*?\)", "", value)
    return re.sub(r"[,\s]", "", value)


def label_value(section: List[str], label: str) -> Optional[str]:
    pattern = re.compile(label, re.IGNORECASE)
    for line in section:
        parts = cells(line)
        if len(parts) < 3:
            continue
        name = BULLET_RE.sub("", parts[1]).strip()
        if pattern.fullmatch(name):
            return clean_value(parts[2]) or None
    return None


def fmax_value(section: List[str]) -> Optional[str]:
    rows = [ln for ln in section if "MHz" in ln]
    if not rows:
        return None
    parts = cells(rows[-1])
    if len(parts) <= FMAX_COLUMN:
        return None
    m = NUMBER_RE.search(parts[FMAX_COLUMN])
    return m.group(0) if m else None


# ------------------------------ Extraction -----------------------------


def extract_fields(
    reports: Mapping[str, List[str]], fields: List[Field] = FIELDS
) -> Dict[str, str]:
    """
    Map every field slot to its value. ``reports`` maps a stage name to the
    lines of its report; absent stages simply leave their slots MISSING.
    """
    values = {f.slot: MISSING for f in fields}
    for f in fields:
        lines = reports.get(f.report)
        if lines is None:
            continue
        section = section_lines(lines, f.section, f.window)
        if section is None:
            continue
        if f.label is None:
            found = fmax_value(section)
        else:
            found = label_value(section, f.label)
        if found:
            values[f.slot] = found
    return values


def extract_metrics(
    stage_results: Mapping[str, StageResult], fields: List[Field] = FIELDS
) -> Dict[str, str]:
    """Extraction driven only by which stage reports exist."""
    reports: Dict[str, List[str]] = {}
    for name in {f.report for f in fields}:
        res = stage_results.get(name)
        if res is not None and res.report is not None and res.report.exists():
            reports[name] = read_lines(res.report)
    return extract_fields(reports, fields)


def elapsed_minutes(start: float, end: float) -> str:
    return f"{(end - start) / 60:.2f}"


# --------------------------- Project settings --------------------------

QSF_RE = re.compile(
    r'^\s*set_global_assignment\s+-name\s+(FAMILY|DEVICE)\s+"?([^"\r\n]+?)"?\s*$'
)


def read_device_identity(qsf: Path) -> Dict[str, str]:
    """FAMILY and DEVICE assignments of a Quartus settings file."""
    ident = {"FAMILY": MISSING, "DEVICE": MISSING}
    if not qsf.exists():
        return ident
    for line in read_lines(qsf):
        m = QSF_RE.match(line)
        if m:
            ident[m.group(1)] = m.group(2).strip()
    return ident
