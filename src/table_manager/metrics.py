"""Metrics recording for the table manager.

Two kinds of values are recorded:

- Durations of reconciliation passes and of individual store requests,
  labelled by operation name and outcome.
- Per-table provisioned capacity gauges, labelled by direction
  (``read``/``write``) and table name.

``InMemoryMetrics`` keeps the latest values in process so a monitor (or a
test) can read them. ``EmbeddedMetricsSink`` additionally emits every value to
CloudWatch using the Embedded Metric Format.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar, runtime_checkable

from aws_embedded_metrics import metric_scope
from aws_embedded_metrics.config import get_config
from aws_embedded_metrics.logger.metrics_logger import MetricsLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")

SYNC_TABLES_SECONDS = "SyncTablesSeconds"
"""Histogram of reconciliation pass durations."""

DYNAMO_REQUEST_SECONDS = "DynamoRequestSeconds"
"""Histogram of individual table store request durations."""

TABLE_CAPACITY_UNITS = "TableCapacityUnits"
"""Gauge of per-table provisioned capacity."""

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@runtime_checkable
class MetricsSink(Protocol):
    """Destination for durations and capacity gauges."""

    def observe_duration(self, histogram: str, operation: str, status: str, seconds: float) -> None:
        """Record how long an operation took and whether it succeeded."""
        ...

    def set_table_capacity(self, direction: str, table: str, units: int) -> None:
        """Record the current capacity of a table in one direction."""
        ...


@dataclass(frozen=True)
class DurationObservation:
    """A single recorded duration."""

    histogram: str
    operation: str
    status: str
    seconds: float


class InMemoryMetrics:
    """Thread-safe in-process metrics sink."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._capacity: dict[tuple[str, str], int] = {}
        self._durations: list[DurationObservation] = []

    def observe_duration(self, histogram: str, operation: str, status: str, seconds: float) -> None:
        with self._lock:
            self._durations.append(DurationObservation(histogram, operation, status, seconds))

    def set_table_capacity(self, direction: str, table: str, units: int) -> None:
        with self._lock:
            self._capacity[(direction, table)] = units

    def table_capacity(self, direction: str, table: str) -> int | None:
        """Latest recorded capacity, or None if never observed."""
        with self._lock:
            return self._capacity.get((direction, table))

    @property
    def capacities(self) -> dict[tuple[str, str], int]:
        """Snapshot of all capacity gauges keyed by ``(direction, table)``."""
        with self._lock:
            return dict(self._capacity)

    def durations(
        self,
        histogram: str | None = None,
        operation: str | None = None,
    ) -> list[DurationObservation]:
        """Recorded durations, optionally filtered."""
        with self._lock:
            return [
                d
                for d in self._durations
                if (histogram is None or d.histogram == histogram)
                and (operation is None or d.operation == operation)
            ]


class EmbeddedMetricsSink(InMemoryMetrics):
    """
    Metrics sink that emits CloudWatch Embedded Metric Format records.

    Values are also kept in memory, exactly like ``InMemoryMetrics``.

    Args:
        namespace: CloudWatch namespace for all metrics
        environment: EMF environment override (e.g. "Local" to print records
            to stdout, "Agent" for the CloudWatch agent). None autodetects.
    """

    def __init__(self, namespace: str, environment: str | None = None) -> None:
        super().__init__()
        self.namespace = namespace
        config = get_config()
        config.namespace = namespace
        if environment:
            config.environment = environment

    def observe_duration(self, histogram: str, operation: str, status: str, seconds: float) -> None:
        super().observe_duration(histogram, operation, status, seconds)
        try:
            emit_duration_metric(histogram, operation, status, seconds)
        except Exception as e:
            logger.warning("Failed to emit %s metric for %s: %s", histogram, operation, e)

    def set_table_capacity(self, direction: str, table: str, units: int) -> None:
        super().set_table_capacity(direction, table, units)
        try:
            emit_capacity_metric(direction, table, units)
        except Exception as e:
            logger.warning("Failed to emit capacity metric for %s: %s", table, e)


@metric_scope
def emit_duration_metric(
    histogram: str,
    operation: str,
    status: str,
    seconds: float,
    metrics: MetricsLogger = None,  # Will be injected by the decorator
) -> None:
    """Emit one duration with Operation and Status dimensions."""
    metrics.set_dimensions({"Operation": operation, "Status": status})
    metrics.put_metric(histogram, seconds, "Seconds")


@metric_scope
def emit_capacity_metric(
    direction: str,
    table: str,
    units: int,
    metrics: MetricsLogger = None,  # Will be injected by the decorator
) -> None:
    """Emit one capacity gauge with Op and Table dimensions."""
    metrics.set_dimensions({"Op": direction, "Table": table})
    metrics.put_metric(TABLE_CAPACITY_UNITS, units, "Count")


def time_request(
    metrics: MetricsSink,
    histogram: str,
    operation: str,
    fn: Callable[[], T],
) -> T:
    """
    Call ``fn`` and record its duration and outcome.

    Any exception raised by ``fn`` is recorded as an error and re-raised.
    """
    start = time.perf_counter()
    status = STATUS_ERROR
    try:
        result = fn()
        status = STATUS_SUCCESS
        return result
    finally:
        metrics.observe_duration(histogram, operation, status, time.perf_counter() - start)
