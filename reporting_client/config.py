"""
Service constants and endpoint configuration for the reporting client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from reporting_client.errors import ConfigurationError

# Read from environment, no default service location
SERVICE_URL = os.environ.get("REPORT_SERVICE_URL")
PROXY_SERVER = os.environ.get("REPORT_PROXY_SERVER")
PROXY_PORT = os.environ.get("REPORT_PROXY_PORT")

REST_SERVICE_CONTEXT = "/rest"
SERVICE_RELATIVE_PATH = "/v1/report-service"

METHOD_TPS_INFO = "/tps"
METHOD_TIMING_RESULTS = "/timing"
METHOD_TIMING = "/timing"
METHOD_TIMING_CSV = "/timing/csv"
METHOD_TIMING_PERIODIC_CSV = "/timing/periodic/csv"
METHOD_TIMING_SUMMARY_CSV = "/timing/summary/csv"
METHOD_PROCESS_TIMING = "/timing/process"
METHOD_FILE = "/file"

# strftime pattern shared with the service for minTime/maxTime
DATE_FORMAT = "%Y%m%d-%H%M%S"

DEFAULT_PERIOD = 15
VALID_PERIODS = (15, 30, 45, 60)

CSV_COLUMNS = (
    "Job ID",
    "Page ID",
    "Sample Size",
    "Average",
    "Min",
    "Max",
    "Period",
    "Start Time",
)


@dataclass(frozen=True)
class ServiceEndpoint:
    """Location of the reporting service and the optional forward proxy."""

    service_url: str
    proxy_server: str | None = None
    proxy_port: int | None = None

    def __post_init__(self) -> None:
        parts = urlsplit(self.service_url or "")
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"Invalid service URL: {self.service_url!r}")
        object.__setattr__(self, "service_url", self.service_url.rstrip("/"))

        if self.proxy_port is not None:
            if not self.proxy_server:
                raise ConfigurationError("proxy_port given without proxy_server")
            try:
                port = int(self.proxy_port)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid proxy port: {self.proxy_port!r}") from None
            if not 0 < port < 65536:
                raise ConfigurationError(f"Proxy port out of range: {port}")
            object.__setattr__(self, "proxy_port", port)

    @property
    def proxy_url(self) -> str | None:
        """Proxy URL for the transport, or None when requests go direct."""
        if not self.proxy_server:
            return None
        server = self.proxy_server
        if "://" not in server:
            server = f"http://{server}"
        if self.proxy_port is not None:
            server = f"{server.rstrip('/')}:{self.proxy_port}"
        return server

    @classmethod
    def from_env(cls) -> ServiceEndpoint:
        """Build the endpoint from REPORT_SERVICE_URL / REPORT_PROXY_* variables."""
        if not SERVICE_URL:
            raise ConfigurationError("REPORT_SERVICE_URL is not set")
        return cls(
            service_url=SERVICE_URL,
            proxy_server=PROXY_SERVER or None,
            proxy_port=PROXY_PORT or None,
        )
