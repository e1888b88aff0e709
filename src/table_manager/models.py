"""Core models for table-manager."""

from dataclasses import dataclass, field

TABLE_STATUS_ACTIVE = "ACTIVE"
"""Status reported by the store once a table can accept throughput updates."""

READ_LABEL = "read"
WRITE_LABEL = "write"


@dataclass(frozen=True, order=True)
class TableDescriptor:
    """
    Desired state of one table for a single reconciliation pass.

    Descriptors order by name first, which is the order the set reconciler
    walks them in.

    Attributes:
        name: Table name (legacy name, or periodic prefix + window index)
        provisioned_read: Desired read capacity units
        provisioned_write: Desired write capacity units
        active: Whether the table is in its write window (active tier).
            Informational only; not part of equality or ordering.
    """

    name: str
    provisioned_read: int
    provisioned_write: int
    active: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class TableDescription:
    """Current state of a table as reported by the store."""

    read_capacity: int
    write_capacity: int
    status: str

    @property
    def is_active(self) -> bool:
        """Whether the table has finished provisioning."""
        return self.status == TABLE_STATUS_ACTIVE

    def matches(self, descriptor: TableDescriptor) -> bool:
        """Whether both read and write capacity already equal the descriptor's."""
        return (
            self.read_capacity == descriptor.provisioned_read
            and self.write_capacity == descriptor.provisioned_write
        )


@dataclass(frozen=True)
class SyncPlan:
    """
    Output of diffing the expected tables against the store.

    ``to_create`` and ``to_check`` partition ``expected``.
    """

    expected: list[TableDescriptor]
    to_create: list[TableDescriptor]
    to_check: list[TableDescriptor]


@dataclass
class SyncResult:
    """Counters for one applied reconciliation pass."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    expected: int = 0

    def merge(self, other: "SyncResult") -> "SyncResult":
        """Return the sum of two results."""
        return SyncResult(
            created=self.created + other.created,
            updated=self.updated + other.updated,
            unchanged=self.unchanged + other.unchanged,
            skipped=self.skipped + other.skipped,
            expected=max(self.expected, other.expected),
        )
