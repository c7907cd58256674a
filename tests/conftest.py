from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List

import pytest

from mpram_sweep.stages import Stage
from mpram_sweep.sweep import SweepSettings

FAKE_QUARTUS = Path(__file__).resolve().parent / "fake_quartus.py"

QSF = """\
set_global_assignment -name FAMILY "Stratix V"
set_global_assignment -name DEVICE 5SGXMA7H2F35C2
set_global_assignment -name TOP_LEVEL_ENTITY mpram
set_global_assignment -name VERILOG_FILE config.h
"""


def fake_stages() -> List[Stage]:
    return [
        Stage(
            name,
            [sys.executable, str(FAKE_QUARTUS), name, "{revision}"],
            f"{name}.rpt",
        )
        for name in ("map", "merge", "fit", "sta")
    ]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "ws"
    ws.mkdir()
    (ws / "mpram.qsf").write_text(QSF, encoding="utf-8")
    return ws


@pytest.fixture
def stages() -> List[Stage]:
    return fake_stages()


def make_settings(workspace: Path, fail: str = "", **kw) -> SweepSettings:
    env = os.environ.copy()
    env["FAKE_QUARTUS_FAIL"] = fail
    return SweepSettings(workdir=workspace, env=env, **kw)


def tool_calls(workspace: Path) -> List[str]:
    log = workspace / "calls.log"
    if not log.exists():
        return []
    return log.read_text(encoding="utf-8").split()
