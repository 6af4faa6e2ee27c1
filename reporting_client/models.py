"""
Report packages submitted to the reporting service.

Packages are serialized to XML request bodies. Timestamps are written as
ISO-8601 strings.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from reporting_client.config import DEFAULT_PERIOD


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _set_attrs(element: ET.Element, **attrs: Any) -> ET.Element:
    for name, value in attrs.items():
        if value is not None:
            element.set(name, _text(value))
    return element


@dataclass
class TankResult:
    """A single timed request made by a test instance."""

    request_name: str
    response_time_ms: int
    status_code: int = 200
    response_size: int = 0
    timestamp: datetime = field(default_factory=datetime.now)
    error: bool = False

    def to_element(self) -> ET.Element:
        return _set_attrs(
            ET.Element("tankResult"),
            requestName=self.request_name,
            responseTime=self.response_time_ms,
            statusCode=self.status_code,
            responseSize=self.response_size,
            timeStamp=self.timestamp,
            error=self.error,
        )


@dataclass
class TPSInfo:
    """Transactions counted for one key during one period."""

    key: str
    timestamp: datetime
    transactions: int
    period: int = DEFAULT_PERIOD

    @property
    def tps(self) -> float:
        return self.transactions / self.period if self.period else 0.0

    def to_element(self) -> ET.Element:
        return _set_attrs(
            ET.Element("tpsInfo"),
            key=self.key,
            timestamp=self.timestamp,
            transactions=self.transactions,
            period=self.period,
        )


@dataclass
class TPSInfoContainer:
    """Throughput samples covering [start_time, end_time)."""

    start_time: datetime
    end_time: datetime
    period: int = DEFAULT_PERIOD
    tps_infos: list[TPSInfo] = field(default_factory=list)

    @property
    def total_tps(self) -> int:
        """Total transactions across all samples."""
        return sum(info.transactions for info in self.tps_infos)

    def to_element(self) -> ET.Element:
        element = _set_attrs(
            ET.Element("container"),
            startTime=self.start_time,
            endTime=self.end_time,
            period=self.period,
            totalTps=self.total_tps,
        )
        infos = ET.SubElement(element, "tpsInfos")
        infos.extend([info.to_element() for info in self.tps_infos])
        return element


@dataclass
class TPSReportingPackage:
    """Body of a TPS submission."""

    job_id: str
    instance_id: str
    container: TPSInfoContainer

    def to_xml(self) -> bytes:
        root = _set_attrs(ET.Element("tpsReportingPackage"), jobId=self.job_id, instanceId=self.instance_id)
        root.append(self.container.to_element())
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)


@dataclass
class TankResultPackage:
    """Body of a timing result submission.

    An empty result list is still written as an explicit ``<results/>``.
    """

    job_id: str
    instance_id: str
    results: Sequence[TankResult] = ()

    def to_xml(self) -> bytes:
        root = _set_attrs(ET.Element("tankResultPackage"), jobId=self.job_id, instanceId=self.instance_id)
        results = ET.SubElement(root, "results")
        results.extend([result.to_element() for result in self.results])
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)
