import numpy as np
import pytest

from moon_sim import analysis
from moon_sim.core.logging_utils import RunLogger


def record_run(root):
    with RunLogger(root, run_id="sample") as logger:
        for i in range(5):
            y = 1.5 - 0.1 * i
            logger.log_ts([i / 60.0, 0.0, y, 0.0, 0.0, -0.1, 0.0, y, 10.0 / (y * y)])
        logger.log_event([3 / 60.0, "contact", 1.2, "impact_speed=0.5"])
    return logger.run_dir


def test_summary_of_recorded_run(tmp_path):
    run_dir = record_run(tmp_path)

    ts = analysis.load_timeseries(run_dir / analysis.TIMESERIES_FILENAME)
    events = analysis.load_events(run_dir / analysis.EVENTS_FILENAME)
    summary = analysis.summarize(ts, events)

    assert summary["samples"] == 5
    assert summary["min_distance"] == pytest.approx(1.1)
    assert summary["max_distance"] == pytest.approx(1.5)
    assert summary["contacts"] == 1


def test_missing_events_file_is_empty(tmp_path):
    assert analysis.load_events(tmp_path / "events.csv") == []


def test_resolve_run_dir_uses_last_run_marker(tmp_path):
    run_dir = record_run(tmp_path)

    assert analysis.resolve_run_dir(tmp_path, None) == run_dir
    assert analysis.resolve_run_dir(tmp_path, "other") == tmp_path / "other"


def test_resolve_run_dir_without_marker(tmp_path):
    with pytest.raises(FileNotFoundError):
        analysis.resolve_run_dir(tmp_path, None)


def test_main_writes_figures(tmp_path, capsys):
    run_dir = record_run(tmp_path)

    assert analysis.main(["--root", str(tmp_path)]) == 0

    assert (run_dir / "figs" / "distance.png").exists()
    assert (run_dir / "figs" / "trajectory.png").exists()
    assert "samples: 5" in capsys.readouterr().out
