"""Command-line interface for the table manager."""

import signal
import sys
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from .config import TableManagerConfig, load_yaml
from .dynamodb import DynamoDBTableStore
from .exceptions import ConfigurationError, StoreError
from .log import LOG_FORMAT_JSON, LOG_FORMAT_TEXT, configure_logging
from .manager import TableManager
from .metrics import EmbeddedMetricsSink, InMemoryMetrics, MetricsSink

ENV_PREFIX = "TABLE_MANAGER_"

# CLI option name -> config key
_CONFIG_OPTIONS = {
    "dynamodb_url": "dynamodb_url",
    "legacy_table_name": "legacy_table_name",
    "poll_interval": "poll_interval",
    "periodic_tables": "use_periodic_tables",
    "table_prefix": "table_prefix",
    "table_period": "table_period",
    "periodic_table_start": "periodic_table_start_at",
    "grace_period": "creation_grace_period",
    "max_chunk_age": "max_chunk_age",
    "write_throughput": "provisioned_write_throughput",
    "read_throughput": "provisioned_read_throughput",
    "inactive_write_throughput": "inactive_write_throughput",
    "inactive_read_throughput": "inactive_read_throughput",
}

_OPTIONS = [
    click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False),
        envvar=f"{ENV_PREFIX}CONFIG",
        help="YAML configuration file (command-line options take precedence)",
    ),
    click.option(
        "--dynamodb-url",
        envvar=f"{ENV_PREFIX}DYNAMODB_URL",
        help="DynamoDB URL: dynamodb://region/table or http://host:port/table",
    ),
    click.option(
        "--region",
        envvar=f"{ENV_PREFIX}REGION",
        help="AWS region (default: from --dynamodb-url, then boto3 defaults)",
    ),
    click.option(
        "--endpoint-url",
        envvar=f"{ENV_PREFIX}ENDPOINT_URL",
        help=(
            "AWS endpoint URL "
            "(e.g., http://localhost:4566 for LocalStack, or other AWS-compatible services)"
        ),
    ),
    click.option(
        "--legacy-table-name",
        envvar=f"{ENV_PREFIX}LEGACY_TABLE_NAME",
        help="Name of the non-periodic table (default: table in --dynamodb-url)",
    ),
    click.option(
        "--poll-interval",
        envvar=f"{ENV_PREFIX}POLL_INTERVAL",
        help="How frequently to reconcile tables (default: 2m)",
    ),
    click.option(
        "--periodic-tables/--no-periodic-tables",
        default=None,
        envvar=f"{ENV_PREFIX}USE_PERIODIC_TABLES",
        help="Use periodic tables (default: enabled)",
    ),
    click.option(
        "--table-prefix",
        envvar=f"{ENV_PREFIX}TABLE_PREFIX",
        help="Periodic table name prefix (default: cortex_)",
    ),
    click.option(
        "--table-period",
        envvar=f"{ENV_PREFIX}TABLE_PERIOD",
        help="Periodic table period (default: 168h)",
    ),
    click.option(
        "--periodic-table-start",
        envvar=f"{ENV_PREFIX}PERIODIC_TABLE_START",
        help="Periodic tables start day, YYYY-MM-DD (default: 1970-01-01)",
    ),
    click.option(
        "--grace-period",
        envvar=f"{ENV_PREFIX}GRACE_PERIOD",
        help="How long before it is needed a table is created (default: 10m)",
    ),
    click.option(
        "--max-chunk-age",
        envvar=f"{ENV_PREFIX}MAX_CHUNK_AGE",
        help="Maximum chunk age before flushing (default: 12h)",
    ),
    click.option(
        "--write-throughput",
        type=click.IntRange(min=1),
        envvar=f"{ENV_PREFIX}WRITE_THROUGHPUT",
        help="Write throughput of active tables (default: 3000)",
    ),
    click.option(
        "--read-throughput",
        type=click.IntRange(min=1),
        envvar=f"{ENV_PREFIX}READ_THROUGHPUT",
        help="Read throughput of active tables (default: 300)",
    ),
    click.option(
        "--inactive-write-throughput",
        type=click.IntRange(min=1),
        envvar=f"{ENV_PREFIX}INACTIVE_WRITE_THROUGHPUT",
        help="Write throughput of inactive tables (default: 1)",
    ),
    click.option(
        "--inactive-read-throughput",
        type=click.IntRange(min=1),
        envvar=f"{ENV_PREFIX}INACTIVE_READ_THROUGHPUT",
        help="Read throughput of inactive tables (default: 300)",
    ),
    click.option(
        "--metrics",
        "metrics_backend",
        type=click.Choice(["emf", "memory"]),
        default="emf",
        envvar=f"{ENV_PREFIX}METRICS",
        help="Metrics backend: CloudWatch Embedded Metric Format or in-memory only",
    ),
    click.option(
        "--metrics-namespace",
        default="TableManager",
        envvar=f"{ENV_PREFIX}METRICS_NAMESPACE",
        help="CloudWatch namespace for EMF metrics",
    ),
    click.option(
        "--metrics-environment",
        envvar="AWS_EMF_ENVIRONMENT",
        help="EMF environment override (e.g., Local, Agent, Lambda)",
    ),
    click.option(
        "--log-level",
        default="INFO",
        envvar="LOG_LEVEL",
        help="Log level (default: INFO)",
    ),
    click.option(
        "--log-format",
        type=click.Choice([LOG_FORMAT_TEXT, LOG_FORMAT_JSON]),
        default=LOG_FORMAT_TEXT,
        envvar=f"{ENV_PREFIX}LOG_FORMAT",
        help="Log output format",
    ),
]


def manager_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared configuration options to a command."""
    for option in reversed(_OPTIONS):
        fn = option(fn)
    return fn


def build_config(config_path: str | None, **options: Any) -> TableManagerConfig:
    """
    Build the configuration from an optional YAML file and CLI options.

    Options that were not given (None) leave the file's value, or the
    default, in place.
    """
    data: dict[str, Any] = {}
    if config_path:
        data = load_yaml(Path(config_path).read_text())
    periodic = dict(data.pop("periodic", None) or {})
    for option, key in _CONFIG_OPTIONS.items():
        value = options.get(option)
        if value is not None:
            data.pop(key, None)
            periodic.pop(key, None)
            data[key] = value
    if periodic:
        data["periodic"] = periodic
    return TableManagerConfig.from_dict(data)


def build_manager(
    config: TableManagerConfig,
    region: str | None,
    endpoint_url: str | None,
    metrics_backend: str,
    metrics_namespace: str,
    metrics_environment: str | None,
) -> TableManager:
    """Wire a TableManager to DynamoDB and the chosen metrics backend."""
    metrics: MetricsSink
    if metrics_backend == "emf":
        metrics = EmbeddedMetricsSink(metrics_namespace, environment=metrics_environment)
    else:
        metrics = InMemoryMetrics()

    if config.dynamodb_url:
        store = DynamoDBTableStore.from_url(
            config.dynamodb_url, metrics=metrics, region=region, endpoint_url=endpoint_url
        )
    else:
        store = DynamoDBTableStore(region=region, endpoint_url=endpoint_url, metrics=metrics)
    return TableManager(config, store, metrics)


def _setup(options: dict[str, Any]) -> TableManager:
    configure_logging(options.pop("log_level"), options.pop("log_format"))
    region = options.pop("region")
    endpoint_url = options.pop("endpoint_url")
    metrics_backend = options.pop("metrics_backend")
    metrics_namespace = options.pop("metrics_namespace")
    metrics_environment = options.pop("metrics_environment")
    try:
        config = build_config(**options)
    except ConfigurationError as e:
        click.echo(f"✗ Invalid configuration: {e}", err=True)
        sys.exit(1)
    return build_manager(
        config,
        region,
        endpoint_url,
        metrics_backend,
        metrics_namespace,
        metrics_environment,
    )


@click.group()
@click.version_option(package_name="table-manager")
def cli() -> None:
    """Periodic DynamoDB table manager CLI."""
    pass


@cli.command()
@manager_options
def run(**options: Any) -> None:
    """Reconcile tables continuously until interrupted."""
    manager = _setup(options)
    shutdown = threading.Event()

    def _handle_signal(signum: int, frame: Any) -> None:
        click.echo(f"Received signal {signum}, shutting down gracefully...", err=True)
        shutdown.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    click.echo(f"Managing tables (poll interval: {manager.config.poll_interval})")
    manager.start()
    try:
        while not shutdown.wait(1.0):
            pass
    finally:
        manager.stop()
    click.echo("✓ Table manager stopped")


@cli.command()
@manager_options
def sync(**options: Any) -> None:
    """Run a single reconciliation pass."""
    manager = _setup(options)
    try:
        result = manager.sync_tables()
    except StoreError as e:
        click.echo(f"✗ Sync failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Synced {result.expected} tables")
    click.echo(f"  Created: {result.created}")
    click.echo(f"  Updated: {result.updated}")
    click.echo(f"  Unchanged: {result.unchanged}")
    click.echo(f"  Not yet active: {result.skipped}")


@cli.command()
@manager_options
def plan(**options: Any) -> None:
    """Show which tables would be created or checked, without changing anything."""
    manager = _setup(options)
    try:
        sync_plan = manager.plan()
    except StoreError as e:
        click.echo(f"✗ Plan failed: {e}", err=True)
        sys.exit(1)

    to_create = {t.name for t in sync_plan.to_create}
    click.echo(f"Expected tables: {len(sync_plan.expected)}")
    for table in sync_plan.expected:
        action = "create" if table.name in to_create else "check"
        tier = "active" if table.active else "inactive"
        click.echo(
            f"  {action:<6}  {table.name}  {tier:<8}  "
            f"read={table.provisioned_read} write={table.provisioned_write}"
        )
    click.echo()
    click.echo(f"To create: {len(sync_plan.to_create)}")
    click.echo(f"To check: {len(sync_plan.to_check)}")


if __name__ == "__main__":
    cli()
