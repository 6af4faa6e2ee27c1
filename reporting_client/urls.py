"""
URL assembly for reporting service requests.

Pure string work: nothing here touches the network.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from reporting_client.config import REST_SERVICE_CONTEXT, SERVICE_RELATIVE_PATH


def escape_segment(value: Any) -> str:
    """Percent-escape a single path identifier, including any '/'.

    Dot segments are escaped too, otherwise URL normalization would drop
    them and the request would reach a different path.
    """
    text = str(value)
    if text in (".", ".."):
        return "%2E" * len(text)
    return quote(text, safe="")


def escape_path(path: str) -> str:
    """Percent-escape a relative path component by component.

    Raises:
        ValueError: If the path has empty, '.' or '..' components
    """
    parts = path.strip("/").split("/")
    for part in parts:
        if part in ("", ".", ".."):
            raise ValueError(f"Invalid component {part!r} in path {path!r}")
    return "/".join(escape_segment(part) for part in parts)


class UrlBuilder:
    """Builds absolute URLs below the service base.

    The base is ``service_url + /rest + service_path``; it is fixed when the
    builder is created.
    """

    def __init__(self, service_url: str, service_path: str = SERVICE_RELATIVE_PATH):
        self.base_url = service_url.rstrip("/") + REST_SERVICE_CONTEXT + service_path

    def build(self, method_path: str, *segments: Any) -> str:
        """Join a method path and escaped identifiers onto the base URL."""
        url = self.base_url + "/" + method_path.strip("/")
        for segment in segments:
            url = f"{url.rstrip('/')}/{escape_segment(segment)}"
        return url

    def build_path(self, method_path: str, relative_path: str) -> str:
        """Like build(), but keeps the '/' separators of a relative path."""
        return f"{self.build(method_path)}/{escape_path(relative_path)}"

    @staticmethod
    def with_query(url: str, params: Mapping[str, Any]) -> str:
        """Append query parameters, skipping those whose value is None."""
        pairs = [(name, str(value)) for name, value in params.items() if value is not None]
        if not pairs:
            return url
        scheme, netloc, path, query, fragment = urlsplit(url)
        encoded = urlencode(pairs)
        query = f"{query}&{encoded}" if query else encoded
        return urlunsplit((scheme, netloc, path, query, fragment))
