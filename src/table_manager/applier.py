"""Applies table changes to the store.

Creates missing tables and converges the provisioned throughput of existing
ones. Each call is idempotent; the first failure aborts the rest of the batch
and propagates, and the next reconciliation pass picks up where this one
stopped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .metrics import InMemoryMetrics, MetricsSink
from .models import READ_LABEL, WRITE_LABEL, SyncResult, TableDescriptor
from .store import TableStore

logger = logging.getLogger(__name__)


class TableApplier:
    """
    Drives the store towards a set of table descriptors.

    Args:
        store: Table store to create and update tables in
        metrics: Sink for per-table capacity gauges
    """

    def __init__(self, store: TableStore, metrics: MetricsSink | None = None) -> None:
        self.store = store
        self.metrics: MetricsSink = metrics if metrics is not None else InMemoryMetrics()

    def create_tables(self, descriptors: Iterable[TableDescriptor]) -> SyncResult:
        """
        Create each table with its desired throughput.

        Raises:
            StoreError: On the first failed create; later tables are not attempted
        """
        result = SyncResult()
        for desc in descriptors:
            logger.info("Creating table %s", desc.name)
            self.store.create_table(desc.name, desc.provisioned_read, desc.provisioned_write)
            result.created += 1
        return result

    def update_tables(self, descriptors: Iterable[TableDescriptor]) -> SyncResult:
        """
        Bring the throughput of existing tables in line with their descriptors.

        Tables that are still provisioning are skipped until a later pass.
        Current capacity is recorded for every active table, whether or not
        it needs an update.

        Raises:
            StoreError: On the first failed describe or update; later tables
                are not attempted
        """
        result = SyncResult()
        for desc in descriptors:
            logger.info("Checking provisioned throughput on table %s", desc.name)
            current = self.store.describe_table(desc.name)

            if not current.is_active:
                logger.info(
                    "Skipping update on table %s, not yet ACTIVE (%s)", desc.name, current.status
                )
                result.skipped += 1
                continue

            self.metrics.set_table_capacity(READ_LABEL, desc.name, current.read_capacity)
            self.metrics.set_table_capacity(WRITE_LABEL, desc.name, current.write_capacity)

            if current.matches(desc):
                logger.info(
                    "  Provisioned throughput: read = %d, write = %d, skipping.",
                    current.read_capacity,
                    current.write_capacity,
                )
                result.unchanged += 1
                continue

            logger.info(
                "  Updating provisioned throughput on table %s to read = %d, write = %d",
                desc.name,
                desc.provisioned_read,
                desc.provisioned_write,
            )
            self.store.update_table(desc.name, desc.provisioned_read, desc.provisioned_write)
            result.updated += 1
        return result
