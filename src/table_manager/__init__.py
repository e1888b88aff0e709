"""
table-manager: lifecycle management for time-sharded DynamoDB tables.

Keeps the set of periodic (e.g. weekly) tables and their provisioned
throughput in sync with a state computed from the current time:

- Tables are created a grace period before their window starts
- Tables being written to get the active throughput tier
- Cold tables are throttled to the inactive tier, never deleted
- A single legacy table is kept alongside the periodic ones

Example:
    from table_manager import DynamoDBTableStore, TableManager, TableManagerConfig

    config = TableManagerConfig.from_dict(
        {
            "dynamodb_url": "dynamodb://us-east-1/chunks",
            "periodic_table_start_at": "2017-01-02",
        }
    )
    store = DynamoDBTableStore.from_url(config.dynamodb_url)

    with TableManager(config, store) as manager:
        ...  # reconciles every poll interval until the block exits
"""

from .applier import TableApplier
from .config import PeriodicTableConfig, TableManagerConfig
from .differ import partition_tables
from .dynamodb import DynamoDBTableStore, DynamoDBURL
from .exceptions import ConfigurationError, StoreError, TableManagerError
from .manager import ManagerState, TableManager
from .metrics import EmbeddedMetricsSink, InMemoryMetrics, MetricsSink
from .models import SyncPlan, SyncResult, TableDescription, TableDescriptor
from .store import TableStore
from .windows import calculate_expected_tables

__version__ = "0.1.0"

__all__ = [
    # Manager
    "TableManager",
    "ManagerState",
    "TableApplier",
    # Config
    "TableManagerConfig",
    "PeriodicTableConfig",
    # Reconciliation
    "calculate_expected_tables",
    "partition_tables",
    # Models
    "TableDescriptor",
    "TableDescription",
    "SyncPlan",
    "SyncResult",
    # Stores
    "TableStore",
    "DynamoDBTableStore",
    "DynamoDBURL",
    # Metrics
    "MetricsSink",
    "InMemoryMetrics",
    "EmbeddedMetricsSink",
    # Exceptions
    "TableManagerError",
    "StoreError",
    "ConfigurationError",
]
