"""End-to-end checks against the stub reporting service."""
import uuid
from datetime import datetime, timedelta

import httpx
import pytest

from reporting_client import CSV_COLUMNS, RemoteServiceError, ReportServiceClient, ResultCollector, TankResult
from reporting_client.urls import escape_segment


def _job_id() -> str:
    # space and '#' must survive path escaping
    return f"job {uuid.uuid4().hex[:8]}#1"


def _results(start: datetime, count: int, name: str = "login") -> list[TankResult]:
    return [TankResult(name, 100 + i, timestamp=start + timedelta(seconds=i)) for i in range(count)]


def test_post_then_fetch_timing_csv(live_client):
    job_id = _job_id()
    live_client.post_timing_results(job_id, "agent-1", _results(datetime(2024, 1, 1, 10, 0, 0), 3))

    with live_client.get_timing_csv(job_id) as stream:
        rows = list(stream.iter_csv())

    assert tuple(rows[0]) == CSV_COLUMNS
    assert [row[0] for row in rows[1:]] == [job_id] * 3
    assert [row[3] for row in rows[1:]] == ["100", "101", "102"]


def test_empty_submission_is_accepted(live_client):
    live_client.post_timing_results(_job_id(), "agent-1", [])


def test_timing_csv_for_unknown_job_is_404(live_client):
    with pytest.raises(RemoteServiceError) as excinfo:
        live_client.get_timing_csv(_job_id())
    assert excinfo.value.status_code == 404
    assert "no timing data" in excinfo.value.detail


def test_periodic_csv_filters_and_periods(live_client):
    job_id = _job_id()
    start = datetime(2024, 1, 1, 10, 0, 0)
    live_client.post_timing_results(job_id, "agent-1", _results(start, 60))

    with live_client.get_bucket_timing_data(job_id) as stream:
        rows = list(stream.iter_csv())[1:]
    assert len(rows) == 4
    assert {row[6] for row in rows} == {"15"}

    with live_client.get_bucket_timing_data(job_id, period=30) as stream:
        rows = list(stream.iter_csv())[1:]
    assert len(rows) == 2
    assert {row[6] for row in rows} == {"30"}

    with live_client.get_bucket_timing_data(
        job_id, min_date=start + timedelta(seconds=15), max_date=start + timedelta(seconds=45)
    ) as stream:
        rows = list(stream.iter_csv())[1:]
    assert [int(row[2]) for row in rows] == [15, 15]


def test_periodic_csv_without_data_is_empty_stream(live_client):
    with live_client.get_bucket_timing_data(_job_id()) as stream:
        assert stream.read() == b""


def test_summary_requires_processing(live_client):
    job_id = _job_id()
    live_client.post_timing_results(job_id, "agent-1", _results(datetime(2024, 1, 1, 10, 0, 0), 5))

    with pytest.raises(RemoteServiceError):
        live_client.get_summary_timing_csv(job_id)

    live_client.process_summary(job_id)
    live_client.process_summary(job_id)

    with live_client.get_summary_timing_csv(job_id) as stream:
        rows = list(stream.iter_csv())
    assert rows[1][2] == "5"


def test_delete_timing(live_client):
    job_id = _job_id()
    live_client.post_timing_results(job_id, "agent-1", _results(datetime(2024, 1, 1, 10, 0, 0), 1))

    live_client.delete_timing(job_id)

    with pytest.raises(RemoteServiceError) as excinfo:
        live_client.delete_timing(job_id)
    assert excinfo.value.status_code == 404


def test_get_file_resumes_from_offset(live_client):
    with live_client.get_file("agent/debug.log") as stream:
        first = stream.read()

    with live_client.get_file("agent/debug.log", start=9) as stream:
        rest = stream.read()

    assert first == b"line one\nline two\nline three\n"
    assert rest == first[9:]


def test_get_missing_file(live_client):
    with pytest.raises(RemoteServiceError) as excinfo:
        live_client.get_file("agent/missing.log")
    assert excinfo.value.status_code == 404


def test_collector_flush(live_client, api_server):
    job_id = _job_id()
    collector = ResultCollector()
    for result in _results(datetime(2024, 1, 1, 10, 0, 0), 20, name="search"):
        collector.record(result)

    assert collector.flush(live_client, job_id, "agent-2") == 20

    posted = httpx.get(f"{api_server}/rest/v1/report-service/tps/{escape_segment(job_id)}").json()
    assert posted == [{"instance_id": "agent-2", "total_tps": 20, "infos": 2}]


def test_connection_refused_is_a_transport_error():
    with ReportServiceClient("http://127.0.0.1:9", timeout=2.0) as client:
        with pytest.raises(httpx.TransportError):
            client.get_timing_csv("42")
