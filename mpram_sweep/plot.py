"""
Export and plot a result table produced by mpram-sweep.

- Rows are read back from the fixed-width table; N/A cells are skipped.
- X axis is any sweep parameter (depth, width, write_ports, ...); one curve
  per distinct value of --group-by (architecture by default).
- Legend sits outside the axes; figure size/aspect is enforced.
"""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from mpram_sweep.reports import MISSING
from mpram_sweep.table import COLUMNS, ROW_KEYS, read_table

PARAM_KEYS = ["arch", "bypass", "depth", "width", "write_ports", "read_ports"]
COLUMN_TITLES = {
    c.key: " ".join(t for t in (c.group, c.name, c.unit) if t) for c in COLUMNS
}


# ------------------------------ Storage --------------------------------


def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)


def write_csv_json(rows: List[Dict[str, str]], outdir: Path, tag: str):
    ensure_dir(outdir)
    csv_p = outdir / f"results_{tag}.csv"
    json_p = outdir / f"results_{tag}.json"

    with csv_p.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(ROW_KEYS)
        for r in rows:
            w.writerow([r.get(k, MISSING) for k in ROW_KEYS])

    with json_p.open("w", encoding="utf-8") as f:
        json.dump(rows, f, ensure_ascii=False, indent=2)
    print(f"[saved] {csv_p}")
    print(f"[saved] {json_p}")
    return csv_p, json_p


# ------------------------------- Series --------------------------------


def to_float(s: Optional[str]) -> Optional[float]:
    if s is None or s == MISSING:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def series_by_group(
    rows: List[Dict[str, str]],
    x_key: str,
    y_key: str,
    group_by: str,
) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """
    {group value: (xs, ys)} sorted by x. Rows sharing group and x (other
    parameters differing) are averaged.
    """
    acc: Dict[str, Dict[float, List[float]]] = {}
    for r in rows:
        x = to_float(r.get(x_key))
        y = to_float(r.get(y_key))
        if x is None or y is None:
            continue
        acc.setdefault(r.get(group_by, ""), {}).setdefault(x, []).append(y)

    out: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}
    for name, points in acc.items():
        xs = np.array(sorted(points))
        ys = np.array([np.mean(points[x]) for x in xs])
        out[name] = (xs, ys)
    return out


# ------------------------------- Plotting ------------------------------


def _compute_figsize(
    fig_width: float, fig_height: float, fig_aspect: float
) -> Tuple[float, float]:
    """(width, height) in inches; explicit height wins over aspect."""
    if fig_width > 0 and fig_height > 0:
        return fig_width, fig_height
    if fig_width > 0 and fig_aspect > 0:
        return fig_width, max(1e-3, fig_width / fig_aspect)
    w = 10.0
    h = w / (fig_aspect if fig_aspect > 0 else (16 / 9))
    return w, h


def plot_results(
    rows: List[Dict[str, str]],
    x_key: str,
    y_key: str,
    group_by: str,
    title: str,
    save_path: Path,
    log_x: bool = False,
    fig_width: float = 10.0,
    fig_height: float = 0.0,
    fig_aspect: float = 16 / 9,
    legend_right_frac: float = 0.20,
    dpi: int = 160,
) -> List[Path]:
    """One chart, one curve per group; saved as PNG and PDF."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import matplotlib as mpl

    W, H = _compute_figsize(fig_width, fig_height, fig_aspect)
    fig, ax = plt.subplots(figsize=(W, H))
    fig.set_size_inches(W, H, forward=True)

    series = series_by_group(rows, x_key, y_key, group_by)
    cmap = mpl.colormaps.get("tab10")
    markers = ["o", "s", "D", "^", "v", "P", "X", "*", "h", ">", "<"]
    for i, name in enumerate(sorted(series)):
        xs, ys = series[name]
        ax.plot(
            xs,
            ys,
            marker=markers[i % len(markers)],
            linestyle="-",
            linewidth=1.8,
            label=f"{group_by}={name}",
            color=cmap(i % cmap.N),
        )

    if log_x:
        ax.set_xscale("log", base=2)
    ax.set_xlabel(COLUMN_TITLES.get(x_key, x_key))
    ax.set_ylabel(COLUMN_TITLES.get(y_key, y_key))
    ax.grid(True, linestyle="--", alpha=0.4)
    if title:
        ax.set_title(title)

    legend_right_frac = max(0.05, min(0.40, legend_right_frac))
    if series:
        ax.legend(
            loc="center left",
            bbox_to_anchor=(1 + 0.02 / (1 - legend_right_frac), 0.5),
            frameon=True,
        )
    fig.tight_layout(rect=[0.0, 0.0, 1.0 - legend_right_frac, 1.0])
    fig.set_size_inches(W, H, forward=True)

    out_png = save_path.with_suffix(".png")
    out_pdf = save_path.with_suffix(".pdf")
    ensure_dir(out_png.parent)
    fig.savefig(out_png, dpi=dpi)
    fig.savefig(out_pdf)
    plt.close(fig)
    print(f"[saved plot] {out_png}")
    print(f"[saved plot] {out_pdf}")
    return [out_png, out_pdf]


# -------------------------------- Main ---------------------------------


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="mpram-plot",
        description="Export and plot an mpram-sweep result table",
    )
    ap.add_argument("result_file", type=Path)
    ap.add_argument(
        "--csv-json",
        type=Path,
        default=None,
        help="Write results_<tag>.csv/.json into this directory",
    )
    ap.add_argument("--save-tag", type=str, default="default")
    ap.add_argument(
        "--plot", action="store_true", help="Generate a plot of --y-metric"
    )
    ap.add_argument("--plot-out", type=Path, default=Path("plots/sweep"))
    ap.add_argument("--x-param", choices=PARAM_KEYS, default="depth")
    ap.add_argument(
        "--y-metric", choices=ROW_KEYS[len(PARAM_KEYS) :], default="fmax_85c"
    )
    ap.add_argument("--group-by", choices=PARAM_KEYS, default="arch")
    ap.add_argument("--log-x", action="store_true", help="log2 X axis")
    ap.add_argument("--title", type=str, default="Multi-ported RAM sweep")
    ap.add_argument(
        "--fig-width", type=float, default=10.0, help="Figure width in inches"
    )
    ap.add_argument(
        "--fig-height",
        type=float,
        default=0.0,
        help="Figure height in inches (if 0, computed from aspect)",
    )
    ap.add_argument(
        "--fig-aspect",
        type=float,
        default=16 / 9,
        help="Figure aspect ratio = width/height (used if height==0)",
    )
    ap.add_argument("--dpi", type=int, default=160, help="Output image DPI")
    args = ap.parse_args(argv)

    rows = read_table(args.result_file)
    print(f"[loaded] {len(rows)} row(s) from {args.result_file}")

    if args.csv_json is not None:
        write_csv_json(rows, args.csv_json, args.save_tag)
    if args.plot:
        plot_results(
            rows,
            x_key=args.x_param,
            y_key=args.y_metric,
            group_by=args.group_by,
            title=args.title,
            save_path=args.plot_out,
            log_x=args.log_x,
            fig_width=args.fig_width,
            fig_height=args.fig_height,
            fig_aspect=args.fig_aspect,
            dpi=args.dpi,
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
