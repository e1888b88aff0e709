"""Table manager: reconciliation pass and polling loop.

A reconciliation pass computes the expected tables, diffs them against the
store, creates what is missing and converges throughput on what exists. The
polling loop runs a pass immediately on ``start()`` and then once per poll
interval on a single background thread until ``stop()``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from types import TracebackType

from .applier import TableApplier
from .config import TableManagerConfig
from .differ import partition_tables
from .exceptions import TableManagerError
from .metrics import SYNC_TABLES_SECONDS, InMemoryMetrics, MetricsSink, time_request
from .models import SyncPlan, SyncResult, TableDescriptor
from .store import TableStore
from .windows import calculate_expected_tables

logger = logging.getLogger(__name__)

SYNC_OPERATION = "TableManager.sync_tables"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def realign_tick(next_tick: float, now: float, interval: float) -> float:
    """
    Move a missed tick forward onto the schedule.

    If one or more ticks were overrun, the result is the latest tick at or
    before ``now``, so exactly one pass fires right away and later ticks stay
    aligned with the original schedule.
    """
    if next_tick < now:
        next_tick += ((now - next_tick) // interval) * interval
    return next_tick


class ManagerState(Enum):
    """Lifecycle state of the polling loop."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class TableManager:
    """
    Creates tables and manages their provisioned throughput.

    Example:
        store = DynamoDBTableStore.from_url("dynamodb://us-east-1/chunks")
        manager = TableManager(config, store)
        manager.start()
        ...
        manager.stop()  # blocks until the loop has exited

    Args:
        config: Table manager configuration (read-only)
        store: Table store to reconcile
        metrics: Sink for pass durations and capacity gauges
        clock: Returns the current time; defaults to UTC wall-clock time
    """

    def __init__(
        self,
        config: TableManagerConfig,
        store: TableStore,
        metrics: MetricsSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.metrics: MetricsSink = metrics if metrics is not None else InMemoryMetrics()
        self.clock = clock or _utc_now
        self.applier = TableApplier(store, self.metrics)

        self._done = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._state = ManagerState.IDLE
        self._stopped = False

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def expected_tables(self) -> list[TableDescriptor]:
        """Tables that should exist right now, sorted by name."""
        return calculate_expected_tables(self.clock(), self.config)

    def plan(self) -> SyncPlan:
        """
        Diff the expected tables against the store without changing anything.

        Raises:
            StoreError: If the store cannot list its tables
        """
        expected = self.expected_tables()
        logger.info("Expecting %d tables", len(expected))
        existing = self.store.list_table_names()
        to_create, to_check = partition_tables(expected, existing)
        return SyncPlan(expected=expected, to_create=to_create, to_check=to_check)

    def sync_tables(self) -> SyncResult:
        """
        Run one reconciliation pass.

        Fails fast: the first store error aborts the pass. Changes already
        made are kept; the next pass re-derives everything from scratch.

        Raises:
            StoreError: If listing, creating, describing or updating fails
        """
        plan = self.plan()
        created = self.applier.create_tables(plan.to_create)
        checked = self.applier.update_tables(plan.to_check)
        result = created.merge(checked)
        result.expected = len(plan.expected)
        logger.info(
            "Synced %d tables: created = %d, updated = %d, unchanged = %d, not active = %d",
            result.expected,
            result.created,
            result.updated,
            result.unchanged,
            result.skipped,
        )
        return result

    def run_once(self) -> SyncResult | None:
        """
        Run one timed pass the way the polling loop does.

        Errors are logged and recorded, never raised.

        Returns:
            The pass result, or None if the pass failed
        """
        self._set_state(ManagerState.RUNNING)
        try:
            return time_request(self.metrics, SYNC_TABLES_SECONDS, SYNC_OPERATION, self.sync_tables)
        except Exception:
            logger.exception("Error syncing tables")
            return None
        finally:
            self._set_state(ManagerState.IDLE)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ManagerState:
        with self._lock:
            return self._state

    def _set_state(self, state: ManagerState) -> None:
        with self._lock:
            if self._state is not ManagerState.STOPPED:
                self._state = state

    def start(self) -> None:
        """
        Start polling in a background thread.

        Raises:
            TableManagerError: If already started or stopped
        """
        with self._lock:
            if self._stopped:
                raise TableManagerError("TableManager cannot be restarted after stop()")
            if self._thread is not None:
                raise TableManagerError("TableManager is already running")
            self._thread = threading.Thread(
                target=self._loop, name="table-manager", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        """
        Stop polling and wait for the loop to exit.

        A pass in progress is allowed to finish first. Once this returns no
        more reconciliation work happens. Calling it again is a no-op.
        """
        with self._lock:
            thread = self._thread
            self._stopped = True
        if thread is threading.current_thread():
            raise TableManagerError("stop() cannot be called from the polling thread")
        self._done.set()
        if thread is not None:
            thread.join()
        with self._lock:
            self._state = ManagerState.STOPPED

    def _loop(self) -> None:
        interval = self.config.poll_interval.total_seconds()
        next_tick = time.monotonic() + interval

        self.run_once()
        next_tick = realign_tick(next_tick, time.monotonic(), interval)

        while not self._done.wait(max(0.0, next_tick - time.monotonic())):
            self.run_once()
            next_tick = realign_tick(next_tick + interval, time.monotonic(), interval)

    def __enter__(self) -> TableManager:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.stop()
