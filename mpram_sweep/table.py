"""
Fixed-width, append-only result table.

Layout of a fresh file:

    <device identity line>
    <blank>
    <label row: group>
    <label row: name>
    <label row: unit>
    <separator row: one run of '=' per column>
    <data rows ...>

Column print widths are always the lengths of the separator tokens, both
when the header is generated and when rows are appended to an existing file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from mpram_sweep.combos import Combination
from mpram_sweep.reports import METRIC_SLOTS, MISSING

SEP_CHAR = "="


@dataclass(frozen=True)
class Column:
    key: str
    group: str
    name: str
    unit: str = ""
    width: int = 6

    def separator(self) -> str:
        n = max(self.width, len(self.group), len(self.name), len(self.unit))
        return SEP_CHAR * n


PARAM_COLUMNS = [
    Column("arch", "Arch.", "Type"),
    Column("bypass", "Bypass", "Type"),
    Column("depth", "Memory", "Depth", "(words)"),
    Column("width", "Data", "Width", "(bits)"),
    Column("write_ports", "Write", "Ports"),
    Column("read_ports", "Read", "Ports"),
]

METRIC_COLUMNS = [
    Column("fmax_85c", "Fmax", "85C", "(MHz)", 7),
    Column("fmax_0c", "Fmax", "0C", "(MHz)", 7),
    Column("aluts", "ALUTs", "Used", width=7),
    Column("comb_aluts", "ALUTs", "Comb.", width=7),
    Column("mem_aluts", "ALUTs", "Memory", width=7),
    Column("lut7", "LUTs", "7-in"),
    Column("lut6", "LUTs", "6-in"),
    Column("lut5", "LUTs", "5-in"),
    Column("lut4", "LUTs", "4-in"),
    Column("lut3", "LUTs", "<=3-in"),
    Column("mode_normal", "Mode", "Normal"),
    Column("mode_extended", "Mode", "Extend"),
    Column("mode_arith", "Mode", "Arith."),
    Column("mode_shared", "Mode", "Shared"),
    Column("registers", "Regs", "Total", width=7),
    Column("logic_registers", "Regs", "Logic", width=7),
    Column("alms", "ALMs", "Used", width=7),
    Column("labs", "LABs", "Total"),
    Column("logic_labs", "LABs", "Logic"),
    Column("mem_labs", "LABs", "Memory"),
    Column("io_pins", "Pins", "I/O"),
    Column("clock_pins", "Pins", "Clock"),
    Column("input_pins", "Pins", "Input"),
    Column("m20k", "M20K", "Blocks"),
    Column("mlab_bits", "MLAB", "Memory", "(bits)", 8),
    Column("block_bits", "Block", "Memory", "(bits)", 10),
    Column("block_impl_bits", "Block", "Impl.", "(bits)", 10),
    Column("dsp", "DSP", "Blocks"),
]

RUNTIME_COLUMN = Column("runtime_min", "Run", "Time", "(min)", 7)

COLUMNS: List[Column] = PARAM_COLUMNS + METRIC_COLUMNS + [RUNTIME_COLUMN]
ROW_KEYS: List[str] = [c.key for c in COLUMNS]

# ------------------------------- Rows ----------------------------------


def make_row(
    combo: Combination, metrics: Mapping[str, str], elapsed: str
) -> List[str]:
    """6 parameters + metrics in column order + runtime."""
    row = list(combo.params())
    row += [metrics.get(slot, MISSING) for slot in METRIC_SLOTS]
    row.append(elapsed)
    return row


def widths_of(separator: str) -> List[int]:
    return [len(tok) for tok in separator.split()]


def format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    return " ".join(str(c).ljust(w) for c, w in zip(row, widths)).rstrip()


def separator_row(columns: Sequence[Column] = COLUMNS) -> str:
    return " ".join(c.separator() for c in columns)


def render_header(identity: str, columns: Sequence[Column] = COLUMNS) -> str:
    sep = separator_row(columns)
    widths = widths_of(sep)
    lines = [identity, ""]
    for tier in ("group", "name", "unit"):
        labels = [getattr(c, tier) for c in columns]
        lines.append(format_row(labels, widths))
    lines.append(sep)
    return "\n".join(lines) + "\n"


def is_separator(line: str) -> bool:
    toks = line.split()
    return bool(toks) and all(set(t) == {SEP_CHAR} for t in toks)


def identity_line(ident: Mapping[str, str]) -> str:
    return (
        f"Quartus multi-ported RAM sweep :: family "
        f"{ident.get('FAMILY', MISSING)} :: device "
        f"{ident.get('DEVICE', MISSING)}"
    )


# ------------------------------- Table ---------------------------------


class ResultTable:
    """Sole writer of the result file; appends one line per combination."""

    def __init__(self, path: Path, identity: str):
        self.path = path
        self.identity = identity
        self.widths: Optional[List[int]] = None

    def open(self) -> "ResultTable":
        if self.path.exists() and self.path.stat().st_size > 0:
            self.widths = read_widths(self.path)
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            header = render_header(self.identity)
            self.path.write_text(header, encoding="utf-8")
            self.widths = widths_of(separator_row())
        return self

    def append(self, row: Sequence[str]) -> str:
        if self.widths is None:
            self.open()
        line = format_row(row, self.widths)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        return line


def read_widths(path: Path) -> List[int]:
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if is_separator(line):
                widths = widths_of(line)
                if len(widths) != len(COLUMNS):
                    raise ValueError(
                        f"{path}: separator has {len(widths)} columns, "
                        f"expected {len(COLUMNS)}"
                    )
                return widths
    raise ValueError(f"{path}: no separator row, not a result table")


def read_table(path: Path) -> List[Dict[str, str]]:
    """Data rows of a result file as dicts keyed by ROW_KEYS."""
    rows: List[Dict[str, str]] = []
    in_body = False
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if not in_body:
                in_body = is_separator(line)
                continue
            toks = line.split()
            if toks:
                rows.append(dict(zip(ROW_KEYS, toks)))
    if not in_body:
        raise ValueError(f"{path}: no separator row, not a result table")
    return rows
