"""
Shared request plumbing for reporting service clients.

Service clients hold a `RestExecutor` rather than subclassing it.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping

import httpx

from reporting_client.config import SERVICE_RELATIVE_PATH, ServiceEndpoint
from reporting_client.status import check_status
from reporting_client.urls import UrlBuilder

logger = logging.getLogger(__name__)


class RestExecutor:
    """Builds targets, dispatches requests and classifies their responses.

    The `httpx.Client` is created on first use and released by `close()`.
    """

    def __init__(
        self,
        endpoint: ServiceEndpoint,
        service_path: str = SERVICE_RELATIVE_PATH,
        timeout: float | None = 300.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.urls = UrlBuilder(endpoint.service_url, service_path)
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> RestExecutor:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                proxy=self.endpoint.proxy_url,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def target(self, method_path: str, *segments, params: Mapping | None = None) -> str:
        """URL for a service method, with optional query parameters."""
        url = self.urls.build(method_path, *segments)
        if params:
            url = self.urls.with_query(url, params)
        return url

    def dispatch(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> httpx.Response:
        """Send a request and fail fast on a non-2xx response.

        With ``stream=True`` the body of a successful response is left
        unread and the caller owns closing it.
        """
        request = self.client.build_request(method, url, content=content, headers=headers)
        start = time.perf_counter_ns()

        response = self.client.send(request, stream=stream)

        duration_ms = (time.perf_counter_ns() - start) / 1_000_000
        logger.debug(f"{method} {url} -> {response.status_code} in {duration_ms:.1f}ms")

        check_status(response)
        return response
