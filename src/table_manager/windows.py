"""Expected table calculation.

Works out which tables should exist at a given instant and the throughput
each one should be provisioned with. Pure arithmetic, no I/O.
"""

from datetime import datetime, timedelta

from .config import TableManagerConfig
from .models import TableDescriptor


def _seconds(value: timedelta) -> int:
    return int(value.total_seconds())


def periodic_table_name(prefix: str, index: int) -> str:
    """Build the name of the periodic table for window ``index``."""
    return f"{prefix}{index}"


def table_range(now: datetime, config: TableManagerConfig) -> tuple[int, int]:
    """
    Window indexes of the first and last periodic tables that should exist.

    The last table is the one covering ``now + grace``, so it is created a
    grace period ahead of its window. ``first > last`` means no periodic
    tables exist yet.
    """
    period = _seconds(config.periodic.table_period)
    grace = _seconds(config.creation_grace_period)
    first_table = int(config.periodic.periodic_table_start_at.timestamp()) // period
    last_table = (int(now.timestamp()) + grace) // period
    return first_table, last_table


def calculate_expected_tables(now: datetime, config: TableManagerConfig) -> list[TableDescriptor]:
    """
    Compute the tables that should exist at ``now``, sorted by name.

    With periodic tables disabled this is just the legacy table at the active
    tier. Otherwise it is the legacy table plus one table per window from the
    configured start up to the window covering ``now + grace``.

    A table gets the active tier while ``now`` is inside its write window,
    ``[start - grace, end + grace + max_chunk_age)``; the window is asymmetric
    because chunks may be flushed up to ``max_chunk_age`` late, never early.
    The legacy table stays active until the first periodic window has passed
    its own grace and chunk-age allowance.

    Args:
        now: The instant to compute for
        config: Table manager configuration

    Returns:
        Table descriptors sorted by name, with unique names
    """
    active_read = config.provisioned_read_throughput
    active_write = config.provisioned_write_throughput

    if not config.periodic.use_periodic_tables:
        return [TableDescriptor(config.table_name, active_read, active_write)]

    inactive_read = config.inactive_read_throughput
    inactive_write = config.inactive_write_throughput

    period = _seconds(config.periodic.table_period)
    grace = _seconds(config.creation_grace_period)
    max_chunk_age = _seconds(config.max_chunk_age)
    first_table, last_table = table_range(now, config)
    now_secs = int(now.timestamp())

    def descriptor(name: str, active: bool) -> TableDescriptor:
        if active:
            return TableDescriptor(name, active_read, active_write)
        return TableDescriptor(name, inactive_read, inactive_write, active=False)

    # Before the switch to periodic tables the legacy table takes the writes.
    legacy_active = now_secs < first_table * period + grace + max_chunk_age
    result = [descriptor(config.table_name, legacy_active)]

    for i in range(first_table, last_table + 1):
        start = i * period
        name = periodic_table_name(config.periodic.table_prefix, i)
        active = start - grace <= now_secs < start + period + grace + max_chunk_age
        result.append(descriptor(name, active))

    result.sort(key=lambda t: t.name)
    return result
