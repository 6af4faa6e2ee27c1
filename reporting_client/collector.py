"""
Buffering of timing results and TPS aggregation before submission.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from reporting_client.config import DEFAULT_PERIOD
from reporting_client.models import TankResult, TPSInfo, TPSInfoContainer
from reporting_client.timing import TimingContext

if TYPE_CHECKING:
    from reporting_client.client import ReportServiceClient

logger = logging.getLogger(__name__)


def bucket_start(timestamp: datetime, period: int) -> datetime:
    """Start of the period-second window containing timestamp."""
    seconds = int(timestamp.timestamp())
    return datetime.fromtimestamp(seconds - seconds % period, tz=timestamp.tzinfo)


class ResultCollector:
    """Collects timing results for one job instance.

    Thread-safe: test threads may record concurrently while another thread
    flushes. Concurrent flushes are serialized.
    """

    def __init__(self, period: int = DEFAULT_PERIOD) -> None:
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.period = period
        self._results: list[TankResult] = []
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        # TPS containers whose timing results were already posted
        self._unsent_tps: list[TPSInfoContainer] = []

    def record(self, result: TankResult) -> None:
        """Thread-safe recording of a result."""
        with self._lock:
            self._results.append(result)

    def time(self, name: str, **kwargs: Any) -> TimingContext:
        """Create a timing context manager that records into this collector."""
        return TimingContext(name, self, **kwargs)

    def pending(self) -> list[TankResult]:
        """Results waiting for the next flush."""
        with self._lock:
            return list(self._results)

    def tps_container(self, results: list[TankResult] | None = None) -> TPSInfoContainer | None:
        """Count transactions per request name in period-second windows.

        Returns None when there is nothing to count.
        """
        if results is None:
            results = self.pending()
        if not results:
            return None

        counts = Counter((bucket_start(r.timestamp, self.period), r.request_name) for r in results)
        infos = [
            TPSInfo(key=key, timestamp=start, transactions=count, period=self.period)
            for (start, key), count in sorted(counts.items())
        ]
        return TPSInfoContainer(
            start_time=infos[0].timestamp,
            end_time=max(info.timestamp for info in infos) + timedelta(seconds=self.period),
            period=self.period,
            tps_infos=infos,
        )

    def flush(self, client: ReportServiceClient, job_id: str, instance_id: str) -> int:
        """Post pending results and their TPS counts.

        The batch leaves the buffer before posting, so results recorded
        meanwhile wait for the next flush. If the timing post fails the batch
        goes back to the front of the buffer. If only the TPS post fails, the
        container is kept and retried by the next flush without posting the
        timing results again. Errors propagate in both cases.

        Returns:
            Number of timing results submitted
        """
        with self._flush_lock:
            while self._unsent_tps:
                client.post_tps_results(job_id, instance_id, self._unsent_tps[0])
                self._unsent_tps.pop(0)

            with self._lock:
                batch, self._results = self._results, []
            if not batch:
                return 0

            try:
                client.post_timing_results(job_id, instance_id, batch)
            except Exception:
                with self._lock:
                    self._results[:0] = batch
                raise

            container = self.tps_container(batch)
            self._unsent_tps.append(container)
            client.post_tps_results(job_id, instance_id, container)
            self._unsent_tps.pop()

        logger.info(f"Flushed {len(batch)} results for job {job_id}/{instance_id}")
        return len(batch)
