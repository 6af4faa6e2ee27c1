"""
Byte streams returned by the retrieval operations.
"""

from __future__ import annotations

import codecs
import csv
from typing import BinaryIO, Iterator

import httpx


class ReportStream:
    """An open, single-pass byte stream over a streamed response.

    The stream holds a pooled connection until it is fully read or closed,
    so use it as a context manager:

        with client.get_timing_csv("42") as stream:
            for row in stream.iter_csv():
                ...

    A zero-length stream means the service had no data to return.
    """

    def __init__(self, response: httpx.Response):
        self._response = response
        self._consumed = False

    def __enter__(self) -> ReportStream:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_bytes()

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    def _start(self) -> None:
        if self._consumed:
            raise RuntimeError("Stream has already been consumed")
        self._consumed = True

    def iter_bytes(self, chunk_size: int | None = None) -> Iterator[bytes]:
        """Yield the body in chunks, closing the response when exhausted."""
        self._start()
        try:
            yield from self._response.iter_bytes(chunk_size)
        finally:
            self._response.close()

    def read(self) -> bytes:
        """Read the remaining body into memory."""
        return b"".join(self.iter_bytes())

    def iter_lines(self, encoding: str = "utf-8", keepends: bool = False) -> Iterator[str]:
        """Yield decoded lines, without their line endings unless keepends."""
        decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        pending = ""
        for chunk in self.iter_bytes():
            pending += decoder.decode(chunk)
            *lines, pending = pending.split("\n")
            for line in lines:
                yield line + "\n" if keepends else line.rstrip("\r")
        pending += decoder.decode(b"", final=True)
        if pending:
            yield pending if keepends else pending.rstrip("\r")

    def iter_csv(self, encoding: str = "utf-8") -> Iterator[list[str]]:
        """Yield CSV rows as lists of strings; the header row comes first."""
        # line endings stay so quoted fields keep embedded newlines
        yield from csv.reader(self.iter_lines(encoding, keepends=True))

    def copy_to(self, fileobj: BinaryIO, chunk_size: int = 64 * 1024) -> int:
        """Write the body to a binary file object, returning bytes written.

        The count can be added to the start offset of a file retrieval to
        resume reading where this stream ended.
        """
        written = 0
        for chunk in self.iter_bytes(chunk_size):
            fileobj.write(chunk)
            written += len(chunk)
        return written

    def close(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
        self._response.close()
