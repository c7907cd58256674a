"""
Command line entry point of the multi-ported RAM synthesis sweep.

    mpram-sweep ARCHS BYPASSES DEPTHS WIDTHS WRITE_PORTS READ_PORTS [options]
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from mpram_sweep.params import (
    ARCH_HELP,
    BYPASS_HELP,
    ParameterError,
    ParameterSet,
)
from mpram_sweep.sweep import SweepSettings, run_sweep

EPILOG = (
    "Lists are comma separated and may be wrapped in any of ()[]{}<>, "
    "without spaces.\n\n"
    "Architectures:\n"
    + "".join(f"  {k:<7} {v}\n" for k, v in ARCH_HELP.items())
    + "Bypassing:\n"
    + "".join(f"  {k:<7} {v}\n" for k, v in BYPASS_HELP.items())
    + "\nExamples:\n"
    "  mpram-sweep REG NON 1024 32 2 2\n"
    "  mpram-sweep LVTREG,LVTBIN NON,RAW 1024,2048 32 1,2 2,4\n"
    "  mpram-sweep [XOR,LVT1HT] [RDW] [4096] [8,16] [3] [3,6]\n\n"
    "Rows are appended to the result file; Quartus reports and stage logs "
    "of every run are moved under the log directory."
)


class SweepArgumentParser(argparse.ArgumentParser):
    """Prints the full help, not just the usage line, on any error."""

    def error(self, message: str):
        self.print_help(sys.stderr)
        self.exit(2, f"\n{self.prog}: error: {message}\n")


def build_parser() -> SweepArgumentParser:
    ap = SweepArgumentParser(
        prog="mpram-sweep",
        description="Synthesize multi-ported RAMs with Quartus over every "
        "combination of the given parameter lists and collect Fmax and "
        "resource usage into one result table",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Sweep lists
    ap.add_argument("archs", help="Architectures: REG,XOR,LVTREG,LVTBIN,LVT1HT")
    ap.add_argument("bypasses", help="Bypassing types: NON,WAW,RAW,RDW")
    ap.add_argument("depths", help="Memory depths (words)")
    ap.add_argument("widths", help="Data widths (bits)")
    ap.add_argument("write_ports", help="Numbers of write ports")
    ap.add_argument("read_ports", help="Numbers of read ports")

    # Workspace
    ap.add_argument(
        "--workdir",
        type=Path,
        default=Path("."),
        help="Quartus project directory (default: current directory)",
    )
    ap.add_argument("--project", type=str, default="mpram")
    ap.add_argument(
        "--revision",
        type=str,
        default="",
        help="Revision name passed with -c (default: project name)",
    )
    ap.add_argument("--config-file", type=Path, default=Path("config.h"))
    ap.add_argument("--result-file", type=Path, default=Path("syn.res"))
    ap.add_argument(
        "--log-dir",
        type=Path,
        default=Path("log"),
        help="Per-run logs and reports go to <log-dir>/<run name>/; runs "
        "differing only in bypass type share (and overwrite) one directory",
    )

    # Tools
    ap.add_argument(
        "--tool-dir",
        type=Path,
        default=None,
        help="Directory of the quartus_* executables (default: PATH)",
    )
    ap.add_argument(
        "--env", type=str, default="", help="Extra env as JSON dict string"
    )

    # Execution
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print commands; no execution",
    )
    ap.add_argument(
        "--keep-build",
        action="store_true",
        help="Keep db/, incremental_db/ and other byproducts after the sweep",
    )
    return ap


def settings_from_args(args: argparse.Namespace) -> SweepSettings:
    env = None
    if args.env:
        env = os.environ.copy()
        env.update(json.loads(args.env))
    return SweepSettings(
        workdir=args.workdir,
        project=args.project,
        revision=args.revision,
        config_file=args.config_file,
        result_file=args.result_file,
        log_dir=args.log_dir,
        tool_dir=args.tool_dir,
        env=env,
        dry_run=args.dry_run,
        keep_build=args.keep_build,
    )


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        params = ParameterSet.from_args(
            [
                args.archs,
                args.bypasses,
                args.depths,
                args.widths,
                args.write_ports,
                args.read_ports,
            ]
        )
    except ParameterError as e:
        ap.error(str(e))

    run_sweep(params, settings_from_args(args))
    return 0


if __name__ == "__main__":
    sys.exit(main())
