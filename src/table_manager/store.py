"""Table store protocol.

The table manager only needs four operations from the remote key-value
store. Any backend that provides them can be reconciled; ``DynamoDBTableStore``
is the production implementation.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import TableDescription


@runtime_checkable
class TableStore(Protocol):
    """
    Protocol for remote table stores.

    Every method raises ``StoreError`` on failure. Calls are synchronous;
    timeouts are the implementation's responsibility.

    Example:
        class MyStore:
            def list_table_names(self) -> list[str]:
                return ["cortex_2500"]

            ...

        assert isinstance(MyStore(), TableStore)  # duck typing
    """

    def list_table_names(self) -> list[str]:
        """Names of all tables in the store, in no particular order."""
        ...

    def create_table(self, name: str, read_capacity: int, write_capacity: int) -> None:
        """Create a table with the given provisioned throughput."""
        ...

    def describe_table(self, name: str) -> "TableDescription":
        """Current provisioned throughput and status of a table."""
        ...

    def update_table(self, name: str, read_capacity: int, write_capacity: int) -> None:
        """Change the provisioned throughput of a table."""
        ...
