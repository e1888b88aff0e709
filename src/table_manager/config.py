"""Configuration for the table manager.

Configuration is read once at construction time and never mutated while the
manager runs. Values can come from a YAML file, a plain dict, or the CLI.
Durations accept Go-style strings (``"2m"``, ``"168h"``, ``"1h30m"``), day
and week suffixes (``"7d"``, ``"1w"``), or a number of seconds.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlparse

from .exceptions import ConfigurationError

DEFAULT_POLL_INTERVAL = timedelta(minutes=2)
DEFAULT_GRACE_PERIOD = timedelta(minutes=10)
DEFAULT_MAX_CHUNK_AGE = timedelta(hours=12)
DEFAULT_TABLE_PERIOD = timedelta(days=7)
DEFAULT_TABLE_PREFIX = "cortex_"
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d|w)")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def parse_duration(
    value: str | int | float | timedelta,
    field_name: str = "duration",
) -> timedelta:
    """
    Parse a duration value.

    Args:
        value: A timedelta, a number of seconds, or a string like ``"1h30m"``
        field_name: Field name used in error messages

    Returns:
        The parsed duration

    Raises:
        ConfigurationError: If the value cannot be parsed
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(field_name, value, "expected a duration")
    if isinstance(value, int | float):
        return timedelta(seconds=value)

    text = str(value).strip()
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return timedelta(seconds=float(text))

    pos = 0
    total = timedelta()
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ConfigurationError(
            field_name, value, "expected a duration such as '10m', '12h' or '168h'"
        )
    return total


def parse_start_time(
    value: str | datetime,
    field_name: str = "periodic_table_start_at",
) -> datetime:
    """
    Parse the periodic table start time.

    A bare ``YYYY-MM-DD`` day means midnight UTC. Naive datetimes are taken
    to be UTC.

    Raises:
        ConfigurationError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
                parsed = datetime.strptime(text, "%Y-%m-%d")
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise ConfigurationError(field_name, value, f"expected YYYY-MM-DD ({e})") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def load_yaml(yaml_str: str) -> dict[str, Any]:
    """Parse a YAML configuration document into a plain mapping."""
    import yaml

    data = yaml.safe_load(yaml_str) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("config", data, "expected a YAML mapping")
    return data


def table_name_from_url(url: str) -> str:
    """Extract the table name from the path of a DynamoDB URL."""
    if not url:
        return ""
    return urlparse(url).path.strip("/")


@dataclass(frozen=True)
class PeriodicTableConfig:
    """
    Controls the use of periodic (e.g. weekly) tables.

    Attributes:
        use_periodic_tables: Whether tables are sharded by time at all
        table_prefix: Name prefix of periodic tables; the window index follows
        table_period: Length of the window each periodic table covers
        periodic_table_start_at: When the first periodic table starts
    """

    use_periodic_tables: bool = True
    table_prefix: str = DEFAULT_TABLE_PREFIX
    table_period: timedelta = DEFAULT_TABLE_PERIOD
    periodic_table_start_at: datetime = EPOCH

    def __post_init__(self) -> None:
        if self.table_period < timedelta(seconds=1):
            raise ConfigurationError(
                "table_period", self.table_period, "must be at least one second"
            )
        if self.use_periodic_tables and not self.table_prefix:
            raise ConfigurationError("table_prefix", self.table_prefix, "cannot be empty")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PeriodicTableConfig:
        # A key with no value keeps its default
        d = {k: v for k, v in d.items() if v is not None}
        kwargs: dict[str, Any] = {}
        if "use_periodic_tables" in d:
            value = d["use_periodic_tables"]
            if isinstance(value, str):
                value = value.strip().lower() not in ("false", "no", "off", "0", "")
            kwargs["use_periodic_tables"] = bool(value)
        if "table_prefix" in d:
            kwargs["table_prefix"] = str(d["table_prefix"])
        if "table_period" in d:
            kwargs["table_period"] = parse_duration(d["table_period"], "table_period")
        if "periodic_table_start_at" in d:
            kwargs["periodic_table_start_at"] = parse_start_time(d["periodic_table_start_at"])
        return cls(**kwargs)


@dataclass(frozen=True)
class TableManagerConfig:
    """
    Configuration for a TableManager.

    Attributes:
        dynamodb_url: DynamoDB URL; its path names the legacy table
        poll_interval: How often the store is reconciled
        creation_grace_period: How long before it is needed a table is created,
            and how long after its window it keeps write throughput
        max_chunk_age: Maximum time data is buffered before being flushed
        provisioned_read_throughput: Read capacity of active tables
        provisioned_write_throughput: Write capacity of active tables
        inactive_read_throughput: Read capacity of inactive tables
        inactive_write_throughput: Write capacity of inactive tables
        legacy_table_name: Name of the non-periodic table; defaults to the
            table named by ``dynamodb_url``
        periodic: Periodic table settings
    """

    dynamodb_url: str = ""
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL
    creation_grace_period: timedelta = DEFAULT_GRACE_PERIOD
    max_chunk_age: timedelta = DEFAULT_MAX_CHUNK_AGE
    provisioned_read_throughput: int = 300
    provisioned_write_throughput: int = 3000
    inactive_read_throughput: int = 300
    inactive_write_throughput: int = 1
    legacy_table_name: str = ""
    periodic: PeriodicTableConfig = field(default_factory=PeriodicTableConfig)

    def __post_init__(self) -> None:
        if self.poll_interval <= timedelta():
            raise ConfigurationError("poll_interval", self.poll_interval, "must be positive")
        if self.creation_grace_period < timedelta():
            raise ConfigurationError(
                "creation_grace_period", self.creation_grace_period, "cannot be negative"
            )
        if self.max_chunk_age < timedelta():
            raise ConfigurationError("max_chunk_age", self.max_chunk_age, "cannot be negative")
        for name in (
            "provisioned_read_throughput",
            "provisioned_write_throughput",
            "inactive_read_throughput",
            "inactive_write_throughput",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(name, value, "must be a positive integer")
        if not self.table_name:
            raise ConfigurationError(
                "legacy_table_name",
                self.legacy_table_name,
                "set legacy_table_name or include the table in dynamodb_url",
            )
        prefix = self.periodic.table_prefix
        if (
            self.periodic.use_periodic_tables
            and self.table_name.startswith(prefix)
            and self.table_name[len(prefix) :].lstrip("-").isdigit()
        ):
            raise ConfigurationError(
                "legacy_table_name", self.table_name, "collides with periodic table names"
            )

    @property
    def table_name(self) -> str:
        """Resolved legacy table name."""
        return self.legacy_table_name or table_name_from_url(self.dynamodb_url)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TableManagerConfig:
        """
        Build a config from a plain mapping.

        Periodic table keys may be given at the top level or nested under
        ``periodic``. Unknown keys are rejected.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        data = dict(d)
        periodic_data = dict(data.pop("periodic", None) or {})
        periodic_keys = {f.name for f in fields(PeriodicTableConfig)}
        for key in list(data):
            if key in periodic_keys:
                periodic_data[key] = data.pop(key)

        known = {f.name for f in fields(cls)} - {"periodic"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError("config", ", ".join(unknown), "unknown configuration keys")

        kwargs: dict[str, Any] = {"periodic": PeriodicTableConfig.from_dict(periodic_data)}
        for key, value in data.items():
            if value is None:
                continue
            if key in ("poll_interval", "creation_grace_period", "max_chunk_age"):
                kwargs[key] = parse_duration(value, key)
            elif key.endswith("_throughput"):
                try:
                    kwargs[key] = int(value)
                except (TypeError, ValueError) as e:
                    raise ConfigurationError(key, value, "must be a positive integer") from e
            else:
                kwargs[key] = str(value)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> TableManagerConfig:
        return cls.from_dict(load_yaml(yaml_str))
