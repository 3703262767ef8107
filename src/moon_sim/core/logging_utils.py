"""Run telemetry written as buffered CSV files."""
from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence


def _unique_run_dir(root: Path, base: str) -> Path:
    candidate = root / base
    suffix = 1
    while candidate.exists():
        candidate = root / f"{base}_{suffix:02d}"
        suffix += 1
    candidate.mkdir(parents=True)
    return candidate


class RunLogger:
    """Rover telemetry for one run: ``timeseries.csv``, ``events.csv``, ``meta.json``.

    Rows are buffered and written once a threshold is reached or on
    :meth:`close`. A run id that already exists gets a ``_01``-style suffix.
    """

    TIMESERIES_HEADER = ["t", "x", "y", "z", "vx", "vy", "vz", "distance", "force"]
    EVENTS_HEADER = ["t", "type", "distance", "details"]

    def __init__(
        self,
        root_dir: str | Path = "data/runs",
        run_id: Optional[str] = None,
        *,
        timeseries_flush_threshold: int = 200,
        events_flush_threshold: int = 50,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        base = run_id or datetime.now().strftime("%Y%m%d_%H%M%S_run")
        self.run_dir = _unique_run_dir(self.root_dir, base)
        self.run_id = self.run_dir.name

        self.timeseries_path = self.run_dir / "timeseries.csv"
        self.events_path = self.run_dir / "events.csv"
        self.meta_path = self.run_dir / "meta.json"

        self._ts_file = self.timeseries_path.open("w", newline="")
        self._ev_file = self.events_path.open("w", newline="")
        self._ts_writer = csv.writer(self._ts_file, lineterminator="\n")
        self._ev_writer = csv.writer(self._ev_file, lineterminator="\n")
        self._ts_writer.writerow(self.TIMESERIES_HEADER)
        self._ev_writer.writerow(self.EVENTS_HEADER)

        self._ts_rows: list[list[str]] = []
        self._ev_rows: list[list[str]] = []
        self._ts_threshold = max(1, timeseries_flush_threshold)
        self._ev_threshold = max(1, events_flush_threshold)
        self.closed = False

        (self.root_dir / "last_run.txt").write_text(self.run_id, encoding="utf-8")

    def write_meta(self, meta: dict) -> None:
        self.meta_path.write_text(json.dumps(meta, indent=2, sort_keys=True), encoding="utf-8")

    def log_ts(self, values: Sequence[float]) -> None:
        self._ts_rows.append([_fmt(v) for v in values])
        if len(self._ts_rows) >= self._ts_threshold:
            self._flush(self._ts_rows, self._ts_writer, self._ts_file)

    def log_event(self, values: Sequence[object]) -> None:
        self._ev_rows.append([_fmt(v) for v in values])
        if len(self._ev_rows) >= self._ev_threshold:
            self._flush(self._ev_rows, self._ev_writer, self._ev_file)

    def close(self) -> None:
        if self.closed:
            return
        self._flush(self._ts_rows, self._ts_writer, self._ts_file)
        self._flush(self._ev_rows, self._ev_writer, self._ev_file)
        self._ts_file.close()
        self._ev_file.close()
        self.closed = True

    @staticmethod
    def _flush(rows: list[list[str]], writer, fh) -> None:
        if rows:
            writer.writerows(rows)
            fh.flush()
            rows.clear()

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _fmt(value: object) -> str:
    if isinstance(value, (int, float)):
        return f"{value:.10g}"
    return str(value)


__all__ = ["RunLogger"]
