"""
Stand-in for the quartus_* executables.

    python fake_quartus.py <stage> <revision>

Reads config.h from the current directory and writes <revision>.<stage>.rpt
with numbers derived from the configured depth/width/ports. Stages listed in
$FAKE_QUARTUS_FAIL (comma separated) print an error, write nothing and exit
with status 3. Every call is appended to calls.log.
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Dict, Optional

DEFINE_RE = re.compile(r"^`define\s+(\w+)[ \t]*([^\s/]*)", re.MULTILINE)


def read_config(path: Path) -> Dict[str, str]:
    return dict(DEFINE_RE.findall(path.read_text(encoding="utf-8")))


def design_values(cfg: Dict[str, str]) -> Dict[str, int]:
    md, dw = int(cfg["MD"]), int(cfg["DW"])
    nwp, nrp = int(cfg["nWP"]), int(cfg["nRP"])
    luts = 100 * nwp * nrp + dw
    return {
        "aluts": luts + 12,
        "comb_aluts": luts,
        "mem_aluts": 12,
        "lut7": 1,
        "lut6": luts // 2,
        "lut5": luts // 4,
        "lut4": luts // 8,
        "lut3": luts - 1 - luts // 2 - luts // 4 - luts // 8,
        "mode_normal": luts - 7,
        "mode_extended": 1,
        "mode_arith": 4,
        "mode_shared": 2,
        "registers": 2 * dw * nrp,
        "logic_registers": 2 * dw * nrp,
        "alms": luts // 2 + 30,
        "labs": luts // 20 + 3,
        "logic_labs": luts // 20 + 1,
        "mem_labs": 2,
        "io_pins": (nwp + nrp) * dw + 1,
        "clock_pins": 1,
        "input_pins": 0,
        "m20k": nwp * nrp * max(1, md * dw // 20480),
        "mlab_bits": 640,
        "block_bits": nwp * nrp * md * dw,
        "block_impl_bits": nwp * nrp * max(1, md * dw // 20480) * 20480,
        "dsp": 0,
    }


FITTER_ROWS = [
    ("ALUTs Used", "aluts", "469,440"),
    ("    -- Combinational ALUTs", "comb_aluts", "469,440"),
    ("    -- Memory ALUTs", "mem_aluts", "234,720"),
    ("    -- LUT_REGs", None, "469,440"),
    ("Dedicated logic registers", "logic_registers", "938,880"),
    ("", None, None),
    ("Combinational ALUT usage by number of inputs", None, None),
    ("    -- 7 input functions", "lut7", None),
    ("    -- 6 input functions", "lut6", None),
    ("    -- 5 input functions", "lut5", None),
    ("    -- 4 input functions", "lut4", None),
    ("    -- <=3 input functions", "lut3", None),
    ("", None, None),
    ("Combinational ALUTs by mode", None, None),
    ("    -- normal mode", "mode_normal", None),
    ("    -- extended LUT mode", "mode_extended", None),
    ("    -- arithmetic mode", "mode_arith", None),
    ("    -- shared arithmetic mode", "mode_shared", None),
    ("", None, None),
    ("Logic utilization", None, "234,720"),
    ("Total registers*", "registers", "938,880"),
    ("ALMs used", "alms", "234,720"),
    ("Total LABs:  partially or completely used", "labs", "23,472"),
    ("    -- Logic LABs", "logic_labs", "23,472"),
    ("    -- Memory LABs (up to half of total LABs)", "mem_labs", "11,736"),
    ("", None, None),
    ("I/O pins", "io_pins", "864"),
    ("    -- Clock pins", "clock_pins", "24"),
    ("    -- Dedicated input pins", "input_pins", "27"),
    ("", None, None),
    ("M20K blocks", "m20k", "2,560"),
    ("Total MLAB memory bits", "mlab_bits", None),
    ("Total block memory bits", "block_bits", "52,428,800"),
    ("Total block memory implementation bits", "block_impl_bits", "52,428,800"),
    ("Total DSP Blocks", "dsp", "1,963"),
]


def table_row(label: str, value: str) -> str:
    return f"; {label:<60}; {value:<30};"


def fitter_report(values: Dict[str, int], revision: str = "mpram") -> str:
    """A Stratix V style fitter report; keys absent from values are left out."""
    bar = "+" + "-" * 62 + "+" + "-" * 32 + "+"
    lines = [
        f"Fitter report for {revision}",
        "Quartus II 64-Bit Version 13.1.0 Build 162 10/23/2013 SJ Full Version",
        "",
        "---------------------",
        "; Table of Contents ;",
        "---------------------",
        "  1. Legal Notice",
        "  2. Fitter Summary",
        "  3. Fitter Resource Usage Summary",
        "",
        bar,
        "; Fitter Summary" + " " * 79 + ";",
        bar,
        table_row("Fitter Status", "Successful"),
        table_row("Family", "Stratix V"),
        table_row("Total registers", "999999"),
        bar,
        "",
        "",
        bar,
        "; Fitter Resource Usage Summary" + " " * 64 + ";",
        bar,
        table_row("Resource", "Usage"),
        bar,
    ]
    for label, key, total in FITTER_ROWS:
        if not label:
            continue
        if key is None:
            lines.append(table_row(label, ""))
            continue
        if key not in values:
            continue
        value = f"{values[key]:,}"
        if total:
            value += f" / {total} ( < 1 % )"
        lines.append(table_row(label, value))
    lines += [bar, "", ""]
    return "\n".join(lines) + "\n"


def fmax_section(heading: str, fmaxes) -> list:
    bar = "+------------+-----------------+------------+------+"
    lines = [
        "+" + "-" * 51 + "+",
        f"; {heading:<50};",
        bar,
        "; Fmax       ; Restricted Fmax ; Clock Name ; Note ;",
        bar,
    ]
    for i, (fmax, restricted) in enumerate(fmaxes):
        lines.append(
            f"; {fmax:.2f} MHz ; {restricted:.2f} MHz      ; clk{i}       ;      ;"
        )
    lines += [bar, "This panel reports FMAX for every clock in the design.", ""]
    return lines


def sta_report(
    fmax_85c: Optional[list], fmax_0c: Optional[list], revision: str = "mpram"
) -> str:
    """Timing report with one Fmax summary per corner; None omits a corner."""
    lines = [f"TimeQuest Timing Analyzer report for {revision}", ""]
    if fmax_85c is not None:
        lines += fmax_section("Slow 900mV 85C Model Fmax Summary", fmax_85c)
    if fmax_0c is not None:
        lines += fmax_section("Slow 900mV 0C Model Fmax Summary", fmax_0c)
    return "\n".join(lines) + "\n"


def design_fmax(cfg: Dict[str, str]) -> float:
    return 600.0 - 10 * int(cfg["nWP"]) * int(cfg["nRP"])


def main(argv) -> int:
    stage, revision = argv[1], argv[2]
    cwd = Path.cwd()
    with open(cwd / "calls.log", "a", encoding="utf-8") as f:
        f.write(f"{stage}\n")
    print(f"Info: Running fake {stage} for {revision}")

    if stage in os.environ.get("FAKE_QUARTUS_FAIL", "").split(","):
        print(f"Error: Quartus {stage} was unsuccessful. 1 error, 0 warnings")
        return 3

    cfg = read_config(cwd / "config.h")
    if stage == "fit":
        text = fitter_report(design_values(cfg), revision)
    elif stage == "sta":
        f = design_fmax(cfg)
        text = sta_report([(f + 50, f)], [(f + 80, f + 20)], revision)
    else:
        text = f"{stage} report for {revision}\n"
    (cwd / f"{revision}.{stage}.rpt").write_text(text, encoding="utf-8")
    print(f"Info: Quartus {stage} was successful. 0 errors, 0 warnings")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
