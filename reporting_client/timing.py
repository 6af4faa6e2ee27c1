"""
Timing primitives for recording request results.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import TYPE_CHECKING, Any

from reporting_client.models import TankResult

if TYPE_CHECKING:
    from reporting_client.collector import ResultCollector


class TimingContext:
    """Context manager that times a block and records a `TankResult`.

    Usage:
        with collector.time("login") as timer:
            response = session.post(...)
            timer.status_code = response.status_code
            timer.response_size = len(response.content)

    A block that raises is recorded as an error and the exception propagates.
    """

    def __init__(self, name: str, collector: ResultCollector, status_code: int = 200, response_size: int = 0):
        self.name = name
        self.collector = collector
        self.status_code = status_code
        self.response_size = response_size
        self._started_at: datetime | None = None
        self._start_ns: int = 0
        self._result: TankResult | None = None

    def __enter__(self) -> TimingContext:
        self._started_at = datetime.now()
        self._start_ns = time.perf_counter_ns()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration_ms = (time.perf_counter_ns() - self._start_ns) / 1_000_000
        self._result = TankResult(
            request_name=self.name,
            response_time_ms=round(duration_ms),
            status_code=self.status_code,
            response_size=self.response_size,
            timestamp=self._started_at,
            error=exc_type is not None or self.status_code >= 400,
        )
        self.collector.record(self._result)

    @property
    def result(self) -> TankResult | None:
        """The recorded result, available after the block exits."""
        return self._result
