"""
Exceptions raised by the reporting client.

Transport failures (connection refused, timeouts, proxy errors) are not
wrapped: they surface as the ``httpx.TransportError`` subclasses raised by
the underlying client.
"""

from __future__ import annotations


class ReportingError(Exception):
    """Base class for errors raised by the reporting client itself."""


class ConfigurationError(ReportingError, ValueError):
    """The endpoint configuration is malformed."""


class RemoteServiceError(ReportingError):
    """The reporting service answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        method: str | None = None,
        url: str | None = None,
    ):
        self.status_code = status_code
        self.detail = detail
        self.method = method
        self.url = url
        target = f"{method} {url} " if method and url else ""
        message = f"{target}failed with status {status_code}"
        if detail:
            message = f"{message}: {detail[:200]}"
        super().__init__(message)
