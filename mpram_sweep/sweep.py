"""
Sweep orchestration: one pass over every combination, strictly in order.

Per combination: purge stale reports, write the config include, run the
four tool stages, extract metrics, append the row, move reports to the log
directory. The sweep itself only fails on filesystem errors of its sinks.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from mpram_sweep.combos import (
    Combination,
    iter_combinations,
    total_combinations,
)
from mpram_sweep.config_writer import write_config
from mpram_sweep.janitor import clean_workspace, collect_reports, purge_reports
from mpram_sweep.params import ParameterSet
from mpram_sweep.reports import (
    METRIC_SLOTS,
    MISSING,
    elapsed_minutes,
    extract_metrics,
    read_device_identity,
)
from mpram_sweep.stages import (
    QUARTUS_STAGES,
    Stage,
    StageResult,
    format_commands,
    run_stages,
)
from mpram_sweep.table import ResultTable, identity_line, make_row

# ----------------------------- Data models -----------------------------


@dataclass(frozen=True)
class SweepSettings:
    """Where the sweep runs and what it drives. Relative paths are
    resolved against ``workdir``."""

    workdir: Path = Path(".")
    project: str = "mpram"
    revision: str = ""
    config_file: Path = Path("config.h")
    result_file: Path = Path("syn.res")
    log_dir: Path = Path("log")
    tool_dir: Optional[Path] = None
    env: Optional[Dict[str, str]] = None
    dry_run: bool = False
    keep_build: bool = False

    @property
    def rev(self) -> str:
        return self.revision or self.project

    def resolve(self, p: Path) -> Path:
        return p if p.is_absolute() else self.workdir / p

    @property
    def qsf(self) -> Path:
        return self.workdir / f"{self.rev}.qsf"


@dataclass
class RunContext:
    """State of one combination; rebuilt from scratch every iteration."""

    combo: Combination
    run_dir: Path
    stage_results: Dict[str, StageResult] = field(default_factory=dict)
    metrics: Dict[str, str] = field(
        default_factory=lambda: {s: MISSING for s in METRIC_SLOTS}
    )
    start: float = 0.0
    end: float = 0.0

    def row(self) -> List[str]:
        return make_row(
            self.combo, self.metrics, elapsed_minutes(self.start, self.end)
        )


# ------------------------------- Runners -------------------------------


def run_combination(
    combo: Combination,
    settings: SweepSettings,
    table: ResultTable,
    stages: List[Stage] = QUARTUS_STAGES,
    console: Optional[TextIO] = None,
) -> List[str]:
    """Run one combination end to end and append its row."""
    print(f"[{combo.progress}] {combo.run_name}")
    workdir = settings.workdir
    ctx = RunContext(combo, settings.resolve(settings.log_dir) / combo.run_name)

    purge_reports(workdir, settings.rev)
    write_config(combo, settings.resolve(settings.config_file))
    try:
        ctx.start = time.time()
        ctx.stage_results = run_stages(
            stages,
            workdir,
            settings.project,
            settings.rev,
            ctx.run_dir,
            combo.run_name,
            env=settings.env,
            tool_dir=settings.tool_dir,
            console=console,
        )
        ctx.end = time.time()
        ctx.metrics.update(extract_metrics(ctx.stage_results))
    finally:
        collect_reports(workdir, settings.rev, ctx.run_dir, combo.run_name)

    row = ctx.row()
    table.append(row)
    return row


def dry_run(
    params: ParameterSet,
    settings: SweepSettings,
    stages: List[Stage] = QUARTUS_STAGES,
) -> int:
    """Print what would run; touches nothing."""
    cmds = format_commands(
        stages, settings.project, settings.rev, settings.tool_dir
    )
    n = 0
    for combo in iter_combinations(params):
        print(f"[DRY {combo.progress}] {combo.run_name}")
        for cmd in cmds:
            print("[DRY] " + cmd)
        n += 1
    return n


def run_sweep(
    params: ParameterSet,
    settings: SweepSettings,
    stages: List[Stage] = QUARTUS_STAGES,
    console: Optional[TextIO] = None,
) -> int:
    """Run every combination in enumeration order; returns rows written."""
    if settings.dry_run:
        return dry_run(params, settings, stages)

    total = total_combinations(params)
    print(f"[sweep] {total} combination(s) in {settings.workdir}")

    settings.resolve(settings.log_dir).mkdir(parents=True, exist_ok=True)
    ident = read_device_identity(settings.qsf)
    result_path = settings.resolve(settings.result_file)
    table = ResultTable(result_path, identity_line(ident)).open()

    n = 0
    try:
        for combo in iter_combinations(params):
            run_combination(combo, settings, table, stages, console)
            n += 1
    finally:
        if not settings.keep_build:
            clean_workspace(settings.workdir, settings.rev)

    print(f"[saved] {result_path} ({n} row(s))")
    return n
