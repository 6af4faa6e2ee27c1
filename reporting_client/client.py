"""
Client for the performance-test reporting service.

Submits TPS and timing results for a job, fetches timing CSV exports and
raw server-side files, triggers summary processing and deletes timing data.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

import httpx

from reporting_client import config
from reporting_client.config import ServiceEndpoint
from reporting_client.dates import format_date
from reporting_client.executor import RestExecutor
from reporting_client.models import (
    TankResult,
    TankResultPackage,
    TPSInfoContainer,
    TPSReportingPackage,
)
from reporting_client.streams import ReportStream

logger = logging.getLogger(__name__)

XML_HEADERS = {"Content-Type": "application/xml"}
OCTET_STREAM_HEADERS = {"Accept": "application/octet-stream"}
TEXT_HEADERS = {"Accept": "text/plain"}


def _require(name: str, value) -> None:
    if value is None or value == "":
        raise ValueError(f"{name} is required")


class ReportServiceClient:
    """Typed client for the reporting service.

    Usage:
        with ReportServiceClient("http://tank.example.com") as client:
            client.post_timing_results("42", "agent-1", results)
            with client.get_timing_csv("42") as stream:
                data = stream.read()

    Every call raises `RemoteServiceError` on a non-2xx response. Transport
    failures propagate as ``httpx`` exceptions.
    """

    def __init__(
        self,
        service_url: str,
        proxy_server: str | None = None,
        proxy_port: int | None = None,
        timeout: float | None = 300.0,
        transport: httpx.BaseTransport | None = None,
    ):
        endpoint = ServiceEndpoint(service_url, proxy_server, proxy_port)
        self._executor = RestExecutor(endpoint, timeout=timeout, transport=transport)

    @classmethod
    def from_endpoint(cls, endpoint: ServiceEndpoint, **kwargs) -> ReportServiceClient:
        return cls(endpoint.service_url, endpoint.proxy_server, endpoint.proxy_port, **kwargs)

    def __enter__(self) -> ReportServiceClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def endpoint(self) -> ServiceEndpoint:
        return self._executor.endpoint

    def close(self) -> None:
        """Release pooled connections."""
        self._executor.close()

    def _fetch(self, url: str) -> ReportStream:
        response = self._executor.dispatch("GET", url, headers=OCTET_STREAM_HEADERS, stream=True)
        return ReportStream(response)

    def post_tps_results(self, job_id: str, instance_id: str, container: TPSInfoContainer) -> None:
        """Submit throughput samples for one instance of a job."""
        _require("job_id", job_id)
        _require("instance_id", instance_id)
        _require("container", container)

        package = TPSReportingPackage(job_id, instance_id, container)
        url = self._executor.target(config.METHOD_TPS_INFO)
        response = self._executor.dispatch("POST", url, content=package.to_xml(), headers=XML_HEADERS)
        logger.debug(f"Posted {len(container.tps_infos)} TPS samples for job {job_id}/{instance_id} ({response.status_code})")

    def post_timing_results(self, job_id: str, instance_id: str, results: Sequence[TankResult]) -> None:
        """Submit timing results for one instance of a job.

        An empty sequence is a valid submission.
        """
        _require("job_id", job_id)
        _require("instance_id", instance_id)
        _require("results", results)

        package = TankResultPackage(job_id, instance_id, list(results))
        url = self._executor.target(config.METHOD_TIMING_RESULTS)
        response = self._executor.dispatch("POST", url, content=package.to_xml(), headers=XML_HEADERS)
        logger.debug(f"Posted {len(package.results)} timing results for job {job_id}/{instance_id} ({response.status_code})")

    def get_bucket_timing_data(
        self,
        job_id: str,
        period: int | None = None,
        min_date: datetime | date | None = None,
        max_date: datetime | date | None = None,
    ) -> ReportStream:
        """Get timing data aggregated into periods as a CSV stream.

        Args:
            job_id: Job whose timing data to fetch
            period: Bucket size in seconds, one of 15, 30, 45 or 60.
                None means the service default of 15.
            min_date: Inclusive lower bound, unbounded when None
            max_date: Exclusive upper bound, unbounded when None

        Returns:
            Stream of CSV rows with columns Job ID, Page ID, Sample Size,
            Average, Min, Max, Period, Start Time; header row first. An empty
            stream means there were no results.
        """
        _require("job_id", job_id)
        if period is not None and period not in config.VALID_PERIODS:
            raise ValueError(f"period must be one of {config.VALID_PERIODS}, got {period}")

        params = {
            "minTime": format_date(min_date) if min_date is not None else None,
            "maxTime": format_date(max_date) if max_date is not None else None,
            # 15 is the service default and is never sent
            "period": period if period is not None and period != config.DEFAULT_PERIOD else None,
        }
        url = self._executor.target(config.METHOD_TIMING_PERIODIC_CSV, job_id, params=params)
        return self._fetch(url)

    def get_file(self, file_path: str, start: int | None = None) -> ReportStream:
        """Get a server-side file as a stream, starting at a byte offset.

        Args:
            file_path: Path relative to the service's logs directory
            start: Number of bytes to skip. None or 0 reads the whole file.
        """
        _require("file_path", file_path)
        if start is not None and start < 0:
            raise ValueError(f"start must not be negative, got {start}")

        url = self._executor.urls.build_path(config.METHOD_FILE, file_path)
        if start:
            url = self._executor.urls.with_query(url, {"from": start})
        return self._fetch(url)

    def process_summary(self, job_id: str) -> None:
        """Trigger processing of the summary data for a job."""
        _require("job_id", job_id)
        url = self._executor.target(config.METHOD_PROCESS_TIMING, job_id)
        response = self._executor.dispatch("GET", url, headers=TEXT_HEADERS)
        logger.debug(f"Summary processing for job {job_id}: {response.text[:200]!r}")

    def get_timing_csv(self, job_id: str) -> ReportStream:
        """Get the raw timing data for a job as a CSV stream."""
        _require("job_id", job_id)
        return self._fetch(self._executor.target(config.METHOD_TIMING_CSV, job_id))

    def get_summary_timing_csv(self, job_id: str) -> ReportStream:
        """Get the summary timing data for a job as a CSV stream."""
        _require("job_id", job_id)
        return self._fetch(self._executor.target(config.METHOD_TIMING_SUMMARY_CSV, job_id))

    def delete_timing(self, job_id: str) -> None:
        """Delete the raw timing data stored for a job."""
        _require("job_id", job_id)
        url = self._executor.target(config.METHOD_TIMING, job_id)
        self._executor.dispatch("DELETE", url)
        logger.debug(f"Deleted timing data for job {job_id}")
