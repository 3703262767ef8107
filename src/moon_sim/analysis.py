"""Analyze a recorded rover run and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
FIGS_SUBDIR = "figs"


def load_timeseries(path: Path) -> Dict[str, np.ndarray]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        columns: Dict[str, List[float]] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                if key is None:
                    continue
                columns.setdefault(key, []).append(float(value))
    return {key: np.asarray(values) for key, values in columns.items()}


def load_events(path: Path) -> List[dict]:
    if not path.exists():
        return []
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        return [
            {
                "t": float(row["t"]),
                "type": row["type"],
                "distance": float(row["distance"]),
                "details": row.get("details", ""),
            }
            for row in reader
            if row
        ]


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def plot_distance(fig_dir: Path, ts: Dict[str, np.ndarray], events: List[dict]) -> Path:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(ts["t"], ts["distance"], color="#6bc5c0", lw=1.5)
    contacts = [e for e in events if e["type"] == "contact"]
    if contacts:
        ax.scatter(
            [e["t"] for e in contacts],
            [e["distance"] for e in contacts],
            color="#ff6b6b",
            s=18,
            label="Contact",
        )
        ax.legend()
    ax.set_xlabel("t [s]")
    ax.set_ylabel("Distance from center")
    ax.set_title("Rover distance")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    out = fig_dir / "distance.png"
    fig.savefig(out, dpi=150)
    plt.close(fig)
    return out


def plot_trajectory(fig_dir: Path, ts: Dict[str, np.ndarray], moon_radius: float) -> Path:
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.plot(ts["x"], ts["y"], color="#ffa94d", lw=1.5, label="Rover")
    theta = np.linspace(0, 2 * np.pi, 256)
    ax.plot(moon_radius * np.cos(theta), moon_radius * np.sin(theta), color="#888888", alpha=0.6)
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title("Trajectory (x-y)")
    ax.legend()
    fig.tight_layout()
    out = fig_dir / "trajectory.png"
    fig.savefig(out, dpi=150)
    plt.close(fig)
    return out


def summarize(ts: Dict[str, np.ndarray], events: List[dict]) -> Dict[str, float]:
    distance = ts.get("distance", np.empty(0))
    return {
        "samples": float(distance.size),
        "min_distance": float(distance.min()) if distance.size else float("nan"),
        "max_distance": float(distance.max()) if distance.size else float("nan"),
        "contacts": float(sum(1 for e in events if e["type"] == "contact")),
    }


def resolve_run_dir(root: Path, run_id: Optional[str]) -> Path:
    if run_id:
        return root / run_id
    marker = root / "last_run.txt"
    if not marker.exists():
        raise FileNotFoundError(f"No run id given and {marker} does not exist")
    return root / marker.read_text(encoding="utf-8").strip()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Plot a recorded rover run")
    parser.add_argument("run_id", nargs="?", default=None)
    parser.add_argument("--root", default="data/runs")
    parser.add_argument("--moon-radius", type=float, default=5.0)
    args = parser.parse_args(argv)

    run_dir = resolve_run_dir(Path(args.root), args.run_id)
    ts = load_timeseries(run_dir / TIMESERIES_FILENAME)
    events = load_events(run_dir / EVENTS_FILENAME)
    fig_dir = ensure_fig_dir(run_dir)
    if ts.get("t") is not None and ts["t"].size:
        plot_distance(fig_dir, ts, events)
        plot_trajectory(fig_dir, ts, args.moon_radius)

    summary = summarize(ts, events)
    print(f"Run {run_dir.name}")
    for key, value in summary.items():
        print(f"  {key}: {value:g}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
