import csv
import json
import os

from shelter_sim.main import main
from shelter_sim.simulation.engine import SimulationEngine
from shelter_sim.viz.dashboard import Dashboard
from shelter_sim.viz.logger import SimLogger


def _finished_engine(days: int = 5) -> SimulationEngine:
    engine = SimulationEngine(seed=13, tenants=2, autopilot=True)
    engine.initialize()
    engine.run(days)
    return engine


def test_logger_verbosity_filters_output(tmp_path, capsys) -> None:
    log_path = tmp_path / "run.log"
    logger = SimLogger(verbosity=0, log_file=str(log_path), stdout=True)
    logger.log(SimLogger.EVENT, "Raiders spotted", day=2)
    logger.log(SimLogger.RESOURCE, "Harvested food", day=2)

    logger.flush_day(2)
    logger.close()

    printed = capsys.readouterr().out
    assert "Raiders spotted" in printed
    assert "Harvested food" not in printed
    assert "Raiders spotted" in log_path.read_text()
    assert len(logger.entries) == 2
    assert "Harvested food" in logger.get_narrative(2)
    assert logger.get_narrative(3) == "Day 3: Nothing notable happened."


def test_logger_json_export(tmp_path) -> None:
    logger = SimLogger(stdout=False)
    logger.log(SimLogger.TENANT, "Ann moved in", tenant_ids=[1], day=1)
    logger.notify("resource_threshold", "warning", day=1, resource="food", value=9)
    path = tmp_path / "out" / "events.json"

    logger.export_json(str(path))

    data = json.loads(path.read_text())
    assert data["entries"][0]["tenant_ids"] == [1]
    assert data["notifications"] == [
        {"day": 1, "kind": "resource_threshold", "level": "warning", "data": {"resource": "food", "value": 9}},
    ]


def test_metrics_csv_and_summary(tmp_path) -> None:
    engine = _finished_engine()
    path = tmp_path / "metrics.csv"

    engine.metrics.export_csv(str(path))

    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][:3] == ["day", "tenants", "food"]
    assert len(rows) == 6
    summary = engine.metrics.summary_report()
    assert "Shelter Summary" in summary
    assert "food:" in summary
    assert engine.metrics.summary_report(start_day=500) == "No data available for the specified period."


def test_dashboard_writes_charts(tmp_path) -> None:
    engine = _finished_engine()

    paths = Dashboard.comprehensive_report(engine.metrics, str(tmp_path))

    assert len(paths) == 4
    assert all(os.path.exists(p) for p in paths)


def test_cli_runs_headless(tmp_path) -> None:
    out = tmp_path / "results"

    main(["--days", "3", "--seed", "4", "--output-dir", str(out), "--no-plots"])

    assert (out / "metrics.csv").exists()
    assert (out / "events.json").exists()
    assert (out / "simulation.log").exists()
