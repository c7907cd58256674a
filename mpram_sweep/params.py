"""
Sweep parameter lists: parsing and validation of the six list arguments.

Each argument is a delimiter-tolerant list such as ``1024,2048``,
``[REG,XOR]`` or ``{2}{4}``: commas and any of ``()[]{}<>`` separate tokens.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

# ----------------------------- Vocabulary ------------------------------

ARCHS: Tuple[str, ...] = ("REG", "XOR", "LVTREG", "LVTBIN", "LVT1HT")
BYPASSES: Tuple[str, ...] = ("NON", "WAW", "RAW", "RDW")

ARCH_HELP = {
    "REG": "register-based multi-ported RAM",
    "XOR": "XOR-based multi-ported RAM",
    "LVTREG": "register-based LVT multi-ported RAM",
    "LVTBIN": "binary-coded I-LVT-based multi-ported RAM",
    "LVT1HT": "onehot-coded I-LVT-based multi-ported RAM",
}
BYPASS_HELP = {
    "NON": "no bypassing",
    "WAW": "allow write-after-write",
    "RAW": "new data for read-after-write",
    "RDW": "new data for read-during-write",
}

SPLIT_RE = re.compile(r"[,()\[\]{}<>]+")
# Accepts "0" as well; zero-sized dimensions are passed through to the tool.
NUMBER_RE = re.compile(r"^[0-9]+$")

ARG_NAMES = (
    "archs",
    "bypasses",
    "depths",
    "widths",
    "write_ports",
    "read_ports",
)


class ParameterError(ValueError):
    """Raised when a sweep argument list is malformed."""


def parse_list(text: str) -> List[str]:
    """Split one list argument into its ordered tokens."""
    return [tok for tok in SPLIT_RE.split(text.strip()) if tok]


def validate_enum(
    name: str, tokens: Sequence[str], vocabulary: Sequence[str]
) -> None:
    if not tokens:
        raise ParameterError(f"{name}: list may not be empty")
    for tok in tokens:
        if tok not in vocabulary:
            raise ParameterError(
                f"{name}: '{tok}' is not one of {','.join(vocabulary)}"
            )


def validate_numbers(name: str, tokens: Sequence[str]) -> None:
    if not tokens:
        raise ParameterError(f"{name}: list may not be empty")
    for tok in tokens:
        if not NUMBER_RE.match(tok):
            raise ParameterError(
                f"{name}: '{tok}' is not a nonnegative integer"
            )


# ----------------------------- Data model ------------------------------


@dataclass(frozen=True)
class ParameterSet:
    """The six ordered token lists of one sweep."""

    archs: Tuple[str, ...]
    bypasses: Tuple[str, ...]
    depths: Tuple[str, ...]
    widths: Tuple[str, ...]
    write_ports: Tuple[str, ...]
    read_ports: Tuple[str, ...]

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "ParameterSet":
        """
        Build a validated parameter set from exactly six raw list arguments.
        Fails on the first violation with ParameterError.
        """
        if len(args) != len(ARG_NAMES):
            raise ParameterError(
                f"expected {len(ARG_NAMES)} list arguments, got {len(args)}"
            )
        lists = [tuple(parse_list(a)) for a in args]
        archs, bypasses, depths, widths, wports, rports = lists
        validate_enum("archs", archs, ARCHS)
        validate_enum("bypasses", bypasses, BYPASSES)
        validate_numbers("depths", depths)
        validate_numbers("widths", widths)
        validate_numbers("write_ports", wports)
        validate_numbers("read_ports", rports)
        return cls(archs, bypasses, depths, widths, wports, rports)

    def cardinalities(self) -> Tuple[int, ...]:
        return tuple(len(getattr(self, name)) for name in ARG_NAMES)
