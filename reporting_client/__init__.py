"""
Client for the performance-test reporting service.

Submits TPS and timing results, retrieves timing CSV exports and raw log
files, triggers summary processing and deletes stored timing data.

Usage:
    python -m reporting_client --service-url http://tank:8080 timing-csv 42
    python -m reporting_client periodic-csv 42 --period 30 -o timing.csv
"""

from reporting_client.config import CSV_COLUMNS, ServiceEndpoint
from reporting_client.errors import ConfigurationError, RemoteServiceError, ReportingError
from reporting_client.models import (
    TankResult,
    TankResultPackage,
    TPSInfo,
    TPSInfoContainer,
    TPSReportingPackage,
)
from reporting_client.streams import ReportStream
from reporting_client.client import ReportServiceClient
from reporting_client.timing import TimingContext
from reporting_client.collector import ResultCollector

__all__ = [
    # Configuration
    "ServiceEndpoint",
    "CSV_COLUMNS",
    # Errors
    "ReportingError",
    "ConfigurationError",
    "RemoteServiceError",
    # Report packages
    "TankResult",
    "TankResultPackage",
    "TPSInfo",
    "TPSInfoContainer",
    "TPSReportingPackage",
    # HTTP client
    "ReportServiceClient",
    "ReportStream",
    # Result collection
    "TimingContext",
    "ResultCollector",
]
