"""Tests for models."""

import dataclasses

import pytest

from table_manager.models import SyncResult, TableDescription, TableDescriptor


class TestTableDescriptor:
    """Tests for TableDescriptor."""

    def test_orders_by_name(self) -> None:
        tables = [TableDescriptor("cortex_2", 1, 1), TableDescriptor("chunks", 300, 3000)]

        assert [t.name for t in sorted(tables)] == ["chunks", "cortex_2"]

    def test_frozen(self) -> None:
        table = TableDescriptor("cortex_1", 300, 3000)

        with pytest.raises(dataclasses.FrozenInstanceError):
            table.provisioned_write = 1  # type: ignore[misc]


class TestTableDescription:
    """Tests for TableDescription."""

    @pytest.mark.parametrize(
        "status,active", [("ACTIVE", True), ("CREATING", False), ("UPDATING", False)]
    )
    def test_is_active(self, status: str, active: bool) -> None:
        assert TableDescription(1, 1, status).is_active is active

    def test_matches_requires_both_directions(self) -> None:
        description = TableDescription(read_capacity=300, write_capacity=3000, status="ACTIVE")

        assert description.matches(TableDescriptor("t", 300, 3000))
        assert not description.matches(TableDescriptor("t", 300, 1))
        assert not description.matches(TableDescriptor("t", 30, 3000))


class TestSyncResult:
    """Tests for SyncResult."""

    def test_merge_sums_counters(self) -> None:
        created = SyncResult(created=2)
        checked = SyncResult(updated=1, unchanged=3, skipped=1)

        merged = created.merge(checked)

        assert merged == SyncResult(created=2, updated=1, unchanged=3, skipped=1)
