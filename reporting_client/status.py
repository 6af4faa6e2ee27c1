"""Classification of reporting service responses."""

from __future__ import annotations

import logging

import httpx

from reporting_client.errors import RemoteServiceError

logger = logging.getLogger(__name__)


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def check_status(response: httpx.Response) -> None:
    """Raise `RemoteServiceError` if the response is not a 2xx.

    The body is read (streamed responses included) so its text can travel
    with the error, and the response is closed before raising.
    """
    if is_success(response.status_code):
        return

    try:
        response.read()
        detail = response.text
    finally:
        response.close()

    request = response.request
    logger.warning(
        f"{request.method} {request.url} returned {response.status_code}: {detail[:200]}"
    )
    raise RemoteServiceError(
        response.status_code,
        detail,
        method=request.method,
        url=str(request.url),
    )
