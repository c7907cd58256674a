"""
Cartesian expansion of a ParameterSet into ordered combinations.

The run name leaves out the bypass type, so combinations that differ only
in bypass share one log directory and the later run overwrites the logs and
reports of the earlier one. The result table keeps every row.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterator, Tuple

from mpram_sweep.params import ParameterSet


@dataclass(frozen=True)
class Combination:
    """One concrete design point of the sweep."""

    arch: str
    bypass: str
    depth: str
    width: str
    write_ports: str
    read_ports: str
    index: int = 1
    total: int = 1

    @property
    def run_name(self) -> str:
        return (
            f"{self.arch}_{self.depth}x{self.width}"
            f"-{self.write_ports}W{self.read_ports}R"
        )

    @property
    def progress(self) -> str:
        return f"{self.index}/{self.total}"

    def params(self) -> Tuple[str, ...]:
        """Parameters in result-table column order."""
        return (
            self.arch,
            self.bypass,
            self.depth,
            self.width,
            self.write_ports,
            self.read_ports,
        )


def total_combinations(params: ParameterSet) -> int:
    total = 1
    for n in params.cardinalities():
        total *= n
    return total


def iter_combinations(params: ParameterSet) -> Iterator[Combination]:
    """
    Yield every combination, outer to inner:
    depth -> width -> write ports -> read ports -> arch -> bypass.
    Rows land in the result table in exactly this order.
    """
    total = total_combinations(params)
    product = itertools.product(
        params.depths,
        params.widths,
        params.write_ports,
        params.read_ports,
        params.archs,
        params.bypasses,
    )
    for i, (md, dw, nwp, nrp, arch, byp) in enumerate(product, start=1):
        yield Combination(
            arch=arch,
            bypass=byp,
            depth=md,
            width=dw,
            write_ports=nwp,
            read_ports=nrp,
            index=i,
            total=total,
        )
