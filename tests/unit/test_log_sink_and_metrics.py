import logging

import pytest

from core.log_sink import LogSink, SEVERITY_CRITICAL, SEVERITY_DEBUG, SEVERITY_WARNING
from core.metrics_collector import MetricsCollector


@pytest.mark.parametrize("severity,level", [
    (SEVERITY_CRITICAL, logging.CRITICAL),
    (SEVERITY_WARNING, logging.WARNING),
    (SEVERITY_DEBUG, logging.DEBUG),
    (99, logging.INFO),
])
def test_log_sink_maps_severity(caplog, severity, level):
    caplog.set_level(logging.DEBUG, logger="veeam.monitoring")
    sink = LogSink()

    sink.log(severity, "message text")

    assert sink.entries[0].severity == severity
    record = caplog.records[-1]
    assert record.levelno == level
    assert record.getMessage() == "message text"


def test_log_sink_keeps_most_recent_entries():
    sink = LogSink(max_entries=3)

    for n in range(5):
        sink.log(SEVERITY_WARNING, f"run {n}")

    assert [entry.message for entry in sink.entries] == ["run 2", "run 3", "run 4"]


def test_time_operation_records_failures():
    metrics = MetricsCollector()
    metrics.start_run("run-1")

    with metrics.time_operation("login"):
        pass
    with pytest.raises(RuntimeError):
        with metrics.time_operation("jobs_states"):
            raise RuntimeError("down")

    operations = metrics.operations
    assert [op.operation for op in operations] == ["login", "jobs_states"]
    assert operations[0].success
    assert not operations[1].success
    assert operations[1].error_message == "down"

    run = metrics.end_run(success=False)
    assert run.run_id == "run-1"
    assert not run.success
    assert run.to_dict()["operations"][1]["error_message"] == "down"


def test_end_run_without_start_returns_none(caplog):
    caplog.set_level(logging.WARNING, logger="core.metrics_collector")

    assert MetricsCollector().end_run() is None
    assert "No active run to end" in caplog.text


def test_stats_are_counted():
    metrics = MetricsCollector()
    metrics.start_run()
    metrics.record_stat("jobs_total", 4)
    metrics.increment_stat("jobs_failed")
    metrics.increment_stat("jobs_failed")

    assert metrics.end_run().stats == {"jobs_total": 4, "jobs_failed": 2}
