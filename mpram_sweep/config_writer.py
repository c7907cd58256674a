"""Writes the per-combination Verilog include read by the synthesis project."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from mpram_sweep.combos import Combination


def config_defines(combo: Combination) -> List[Tuple[str, str, str]]:
    """(macro, value, comment) triples, in file order."""
    return [
        (
            "TYPE",
            combo.arch,
            "implementation type: REG, XOR, LVTREG, LVTBIN, LVT1HT",
        ),
        ("BYP", combo.bypass, "bypassing type: NON, WAW, RAW, RDW"),
        ("MD", combo.depth, "memory depth"),
        ("DW", combo.width, "data width"),
        ("nWP", combo.write_ports, "number of writing ports"),
        ("nRP", combo.read_ports, "number of reading ports"),
        ("SYN", "", "synthesis run"),
    ]


def render_config(combo: Combination) -> str:
    lines = [f"// Multi-ported RAM configuration for {combo.run_name}"]
    for name, value, comment in config_defines(combo):
        define = f"`define {name:<4} {value}".rstrip()
        lines.append(f"{define:<20} // {comment}")
    return "\n".join(lines) + "\n"


def write_config(combo: Combination, path: Path) -> Path:
    """Overwrite the config artifact at ``path`` for this combination."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config(combo), encoding="utf-8")
    return path
