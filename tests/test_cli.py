from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import fake_stages, tool_calls
from mpram_sweep import cli
from mpram_sweep.table import read_table


@pytest.fixture
def recorded(monkeypatch):
    """Replace run_sweep so no tool is started; record its arguments."""
    calls = []

    def fake_run_sweep(params, settings):
        calls.append((params, settings))
        return 0

    monkeypatch.setattr(cli, "run_sweep", fake_run_sweep)
    return calls


def test_bad_architecture_prints_full_help(recorded, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["BADARCH", "NON", "4", "8", "1", "1"])
    assert exc.value.code == 2
    err = capsys.readouterr().err
    assert "BADARCH" in err
    assert "Architectures:" in err
    assert "--result-file" in err
    assert recorded == []


@pytest.mark.parametrize(
    "argv",
    [
        ["REG", "NON", "4", "8", "1"],
        ["REG", "NON", "4", "8", "1", "1", "1"],
        ["REG", "NON", "4", "eight", "1", "1"],
        ["REG", "BYP", "4", "8", "1", "1"],
    ],
)
def test_invalid_invocations_exit_nonzero(recorded, argv, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    assert exc.value.code != 0
    assert "usage: mpram-sweep" in capsys.readouterr().err
    assert recorded == []


def test_valid_invocation_builds_settings(recorded, tmp_path: Path) -> None:
    rc = cli.main(
        [
            "[REG,XOR]",
            "NON",
            "4,8",
            "8",
            "1",
            "1",
            "--workdir",
            str(tmp_path),
            "--project",
            "top",
            "--result-file",
            "out.res",
            "--env",
            json.dumps({"LM_LICENSE_FILE": "1800@lic"}),
            "--dry-run",
        ]
    )
    assert rc == 0
    ((params, settings),) = recorded
    assert params.archs == ("REG", "XOR")
    assert params.depths == ("4", "8")
    assert settings.workdir == tmp_path
    assert settings.rev == "top"
    assert settings.result_file == Path("out.res")
    assert settings.env["LM_LICENSE_FILE"] == "1800@lic"
    assert settings.dry_run is True
    assert settings.keep_build is False


def test_end_to_end_with_fake_tools(workspace: Path, monkeypatch) -> None:
    real_run_sweep = cli.run_sweep

    def with_fake_stages(params, settings):
        return real_run_sweep(params, settings, fake_stages())

    monkeypatch.setattr(cli, "run_sweep", with_fake_stages)
    argv = ["REG", "NON", "4", "8", "1", "1", "--workdir", str(workspace)]
    assert cli.main(argv) == 0
    (row,) = read_table(workspace / "syn.res")
    assert [row[k] for k in ("arch", "bypass", "depth", "width")] == [
        "REG",
        "NON",
        "4",
        "8",
    ]
    assert tool_calls(workspace) == ["map", "merge", "fit", "sta"]


def test_log_dir_help_mentions_shared_bypass_directory() -> None:
    text = " ".join(cli.build_parser().format_help().split())
    assert "differing only in bypass type share" in text
