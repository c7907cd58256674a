"""
Quartus tool stages: command assembly and sequential execution.

Every stage runs in the workspace, its merged stdout/stderr is teed to the
console and to ``<run_dir>/<run_name>.<stage>.log``. A failing stage never
stops the following ones; its outcome is returned as a StageResult.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO

# ---------------------------- Stage results ----------------------------

OK = "ok"
TOOL_FAILED = "tool_failed"
REPORT_MISSING = "report_missing"


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage; ``report`` is set whenever the report exists."""

    stage: str
    status: str
    reason: str = ""
    returncode: Optional[int] = None
    report: Optional[Path] = None
    start: float = 0.0
    end: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == OK


# ------------------------------- Stages --------------------------------


@dataclass(frozen=True)
class Stage:
    """
    One tool invocation. ``argv`` may contain ``{project}`` and
    ``{revision}`` placeholders; ``report_suffix`` names the report the stage
    is expected to leave behind as ``<revision>.<report_suffix>``.
    """

    name: str
    argv: List[str] = field(default_factory=list)
    report_suffix: str = ""

    def command(
        self, project: str, revision: str, tool_dir: Optional[Path] = None
    ) -> List[str]:
        cmd = [a.format(project=project, revision=revision) for a in self.argv]
        if tool_dir is not None and cmd:
            cmd[0] = str(tool_dir / cmd[0])
        return cmd

    def report_path(self, workdir: Path, revision: str) -> Optional[Path]:
        if not self.report_suffix:
            return None
        return workdir / f"{revision}.{self.report_suffix}"


QUARTUS_STAGES: List[Stage] = [
    Stage(
        "map",
        [
            "quartus_map",
            "--64bit",
            "--read_settings_files=on",
            "--write_settings_files=off",
            "{project}",
            "-c",
            "{revision}",
        ],
        "map.rpt",
    ),
    Stage(
        "merge",
        [
            "quartus_cdb",
            "--64bit",
            "--merge=on",
            "--read_settings_files=off",
            "--write_settings_files=off",
            "{project}",
            "-c",
            "{revision}",
        ],
        "merge.rpt",
    ),
    Stage(
        "fit",
        [
            "quartus_fit",
            "--64bit",
            "--read_settings_files=off",
            "--write_settings_files=off",
            "{project}",
            "-c",
            "{revision}",
        ],
        "fit.rpt",
    ),
    Stage(
        "sta",
        ["quartus_sta", "--64bit", "{project}", "-c", "{revision}"],
        "sta.rpt",
    ),
]


# ------------------------------- Runners -------------------------------


def tee_process(
    cmd: List[str],
    cwd: Path,
    env: Optional[Dict[str, str]],
    log: TextIO,
    console: TextIO,
) -> int:
    """Run ``cmd`` to completion, copying each output line to both streams."""
    proc = subprocess.Popen(
        cmd,
        cwd=str(cwd),
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        encoding="utf-8",
        errors="ignore",
    )
    with proc.stdout:
        for line in proc.stdout:
            console.write(line)
            log.write(line)
    return proc.wait()


def run_stage(
    stage: Stage,
    workdir: Path,
    project: str,
    revision: str,
    log_path: Path,
    env: Optional[Dict[str, str]] = None,
    tool_dir: Optional[Path] = None,
    console: Optional[TextIO] = None,
) -> StageResult:
    """Execute one stage and classify its outcome."""
    console = console if console is not None else sys.stdout
    cmd = stage.command(project, revision, tool_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    start = time.time()
    returncode: Optional[int] = None
    with open(log_path, "w", encoding="utf-8", errors="ignore") as log:
        log.write("$ " + " ".join(shlex.quote(c) for c in cmd) + "\n")
        try:
            returncode = tee_process(cmd, workdir, env, log, console)
            reason = "ok" if returncode == 0 else f"nonzero_exit({returncode})"
        except OSError as e:
            reason = f"exception:{e}"
            log.write(f"\n[EXCEPTION] {e}\n")
    end = time.time()

    report = stage.report_path(workdir, revision)
    if report is not None and not report.exists():
        report = None

    if returncode != 0:
        status = TOOL_FAILED
    elif stage.report_suffix and report is None:
        status = REPORT_MISSING
        reason = f"no_report:{revision}.{stage.report_suffix}"
    else:
        status = OK
    return StageResult(
        stage.name, status, reason, returncode, report, start, end
    )


def run_stages(
    stages: List[Stage],
    workdir: Path,
    project: str,
    revision: str,
    run_dir: Path,
    run_name: str,
    env: Optional[Dict[str, str]] = None,
    tool_dir: Optional[Path] = None,
    console: Optional[TextIO] = None,
) -> Dict[str, StageResult]:
    """Run all stages in order; every stage runs regardless of the others."""
    results: Dict[str, StageResult] = {}
    for stage in stages:
        log_path = run_dir / f"{run_name}.{stage.name}.log"
        res = run_stage(
            stage, workdir, project, revision, log_path, env, tool_dir, console
        )
        if not res.ok:
            print(f"[stage failed] {run_name} {stage.name}: {res.reason}")
        results[stage.name] = res
    return results


def format_commands(
    stages: List[Stage],
    project: str,
    revision: str,
    tool_dir: Optional[Path] = None,
) -> List[str]:
    """Shell-quoted command lines, as printed by a dry run."""
    return [
        " ".join(
            shlex.quote(c) for c in s.command(project, revision, tool_dir)
        )
        for s in stages
    ]
