"""Tests for the recorded-run viewer"""

import logging

import matplotlib
import pytest

matplotlib.use("Agg")

from robot_control.data_collector import (  # noqa: E402
    TRACKING_COLUMNS,
    WHEEL_COLUMNS,
    DataCollector,
    find_runs,
    read_run_summary,
)
from robot_control.plot_results import describe_run, main, select_run  # noqa: E402


def record_run(results_dir, name, outcome=None, final_error=0.02):
    """Write a short recorded run; no summary when outcome is None"""
    with DataCollector(run_dir=str(results_dir / name)) as collector:
        for i in range(5):
            row = {column: 0.1 * i for column in TRACKING_COLUMNS + WHEEL_COLUMNS}
            row["elapsed"] = i * 0.02
            collector.log_tracking(row)
        if outcome is not None:
            collector.log_summary(outcome, 4.2, final_error)
    return collector.run_dir


@pytest.fixture
def results_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("RUN_DIR", raising=False)
    results = tmp_path / "results"
    record_run(results, "run_20250101_090000", "complete")
    record_run(results, "run_20250101_100000", "failed: FeedbackUnavailable: no pose", None)
    record_run(results, "run_20250101_110000")
    (results / "notes").mkdir()
    return results


def test_find_runs_sorted_and_filtered(results_dir):
    """Test that only run_* directories are listed, oldest first"""
    names = [run.name for run in find_runs(results_dir)]
    assert names == ["run_20250101_090000", "run_20250101_100000", "run_20250101_110000"]


def test_find_runs_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_runs(tmp_path / "nowhere")


def test_read_run_summary(results_dir):
    """Test that outcomes containing colons survive parsing"""
    summary = read_run_summary(results_dir / "run_20250101_100000")
    assert summary["outcome"] == "failed: FeedbackUnavailable: no pose"
    assert summary["final_error_m"] == "n/a"
    assert summary["cycles"] == "5"

    assert read_run_summary(results_dir / "run_20250101_110000") == {}


def test_select_run(results_dir):
    """Test selection by default, number and name"""
    assert select_run(results_dir).name == "run_20250101_110000"
    assert select_run(results_dir, "1").name == "run_20250101_090000"
    assert select_run(results_dir, "run_20250101_100000").name == "run_20250101_100000"

    with pytest.raises(FileNotFoundError):
        select_run(results_dir, "4")
    with pytest.raises(FileNotFoundError):
        select_run(results_dir, "notes")


def test_select_run_empty_results(tmp_path):
    (tmp_path / "results").mkdir()
    with pytest.raises(FileNotFoundError):
        select_run(tmp_path / "results")


def test_describe_run(results_dir):
    line = describe_run(results_dir / "run_20250101_090000")
    assert "complete" in line
    assert "error=0.0200m" in line
    assert describe_run(results_dir / "run_20250101_110000").endswith("(no summary)")


def test_list_shows_outcomes(results_dir, caplog):
    """Test that --list reports every run with its outcome"""
    with caplog.at_level(logging.INFO):
        assert main(["--results-dir", str(results_dir), "--list"]) == 0

    assert "1. run_20250101_090000  complete" in caplog.text
    assert "failed: FeedbackUnavailable" in caplog.text
    assert "3. run_20250101_110000  (no summary)" in caplog.text


def test_plot_selected_run(results_dir):
    """Test that plotting by number saves figures into that run"""
    assert main(["--results-dir", str(results_dir), "--run", "1", "--save", "--no-show"]) == 0

    run_dir = results_dir / "run_20250101_090000"
    for name in ("path", "tracking_error", "wheel_control"):
        assert (run_dir / f"{name}.png").exists()
    assert not (results_dir / "run_20250101_110000" / "path.png").exists()


def test_missing_results_dir_exit_code(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert main(["--results-dir", str(tmp_path / "nowhere"), "--no-show"]) == 1
    assert "Results directory not found" in caplog.text
