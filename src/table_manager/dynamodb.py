"""DynamoDB table store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import schema
from .exceptions import ConfigurationError, StoreError
from .metrics import DYNAMO_REQUEST_SECONDS, InMemoryMetrics, MetricsSink, time_request
from .models import TableDescription

T = TypeVar("T")

DYNAMODB_SCHEME = "dynamodb"
ENDPOINT_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class DynamoDBURL:
    """
    Parsed DynamoDB URL.

    Two forms are accepted:

    - ``dynamodb://[key:secret@]region/table`` for AWS
    - ``http(s)://[key:secret@]host:port/table`` for a local endpoint such as
      DynamoDB Local or LocalStack
    """

    region: str | None
    endpoint_url: str | None
    table_name: str
    access_key_id: str | None = None
    secret_access_key: str | None = None

    @classmethod
    def parse(cls, url: str) -> DynamoDBURL:
        """
        Parse a DynamoDB URL.

        Raises:
            ConfigurationError: If the scheme is not supported
        """
        parsed = urlparse(url)
        access_key = unquote(parsed.username) if parsed.username else None
        secret_key = unquote(parsed.password) if parsed.password else None
        table_name = parsed.path.strip("/")

        if parsed.scheme == DYNAMODB_SCHEME:
            return cls(
                region=parsed.hostname or None,
                endpoint_url=None,
                table_name=table_name,
                access_key_id=access_key,
                secret_access_key=secret_key,
            )
        if parsed.scheme in ENDPOINT_SCHEMES:
            if not parsed.hostname:
                raise ConfigurationError("dynamodb_url", url, "endpoint URL needs a host")
            netloc = parsed.hostname
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            return cls(
                region=None,
                endpoint_url=f"{parsed.scheme}://{netloc}",
                table_name=table_name,
                access_key_id=access_key,
                secret_access_key=secret_key,
            )
        raise ConfigurationError(
            "dynamodb_url",
            url,
            "expected dynamodb://region/table or http(s)://host:port/table",
        )


class DynamoDBTableStore:
    """
    Table store backed by DynamoDB.

    Uses boto3 (sync) directly. Every request is timed on the metrics sink,
    and botocore failures are raised as ``StoreError``.

    Args:
        region: AWS region (default: use boto3 defaults)
        endpoint_url: Custom endpoint URL (e.g., LocalStack, DynamoDB Local)
        metrics: Sink for request durations
        client: Optional boto3 DynamoDB client (injected for testing)
        access_key_id: Explicit AWS access key
        secret_access_key: Explicit AWS secret key
    """

    def __init__(
        self,
        region: str | None = None,
        endpoint_url: str | None = None,
        metrics: MetricsSink | None = None,
        client: Any | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self.metrics: MetricsSink = metrics if metrics is not None else InMemoryMetrics()
        self._client = client
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key

    @classmethod
    def from_url(
        cls,
        url: str,
        metrics: MetricsSink | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> DynamoDBTableStore:
        """Create a store from a DynamoDB URL; explicit arguments win."""
        parsed = DynamoDBURL.parse(url)
        return cls(
            region=region or parsed.region,
            endpoint_url=endpoint_url or parsed.endpoint_url,
            metrics=metrics,
            access_key_id=parsed.access_key_id,
            secret_access_key=parsed.secret_access_key,
        )

    def _get_client(self) -> Any:
        """Get or create the DynamoDB client."""
        if self._client is None:
            self._client = boto3.client(
                "dynamodb",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self._access_key_id,
                aws_secret_access_key=self._secret_access_key,
            )
        return self._client

    def _request(self, operation: str, fn: Callable[[], T], table_name: str | None = None) -> T:
        """Run one DynamoDB request, timed, with errors wrapped in StoreError."""

        def call() -> T:
            try:
                return fn()
            except ClientError as e:
                code = e.response.get("Error", {}).get("Code", "Unknown")
                raise StoreError(operation, code, table_name=table_name, cause=e) from e
            except BotoCoreError as e:
                raise StoreError(operation, str(e), table_name=table_name, cause=e) from e

        return time_request(self.metrics, DYNAMO_REQUEST_SECONDS, f"DynamoDB.{operation}", call)

    # -------------------------------------------------------------------------
    # TableStore
    # -------------------------------------------------------------------------

    def list_table_names(self) -> list[str]:
        def list_all() -> list[str]:
            paginator = self._get_client().get_paginator("list_tables")
            names: list[str] = []
            for page in paginator.paginate():
                names.extend(page.get("TableNames", []))
            return names

        return self._request("ListTables", list_all)

    def create_table(self, name: str, read_capacity: int, write_capacity: int) -> None:
        definition = schema.get_table_definition(name, read_capacity, write_capacity)
        self._request(
            "CreateTable",
            lambda: self._get_client().create_table(**definition),
            table_name=name,
        )

    def describe_table(self, name: str) -> TableDescription:
        response = self._request(
            "DescribeTable",
            lambda: self._get_client().describe_table(TableName=name),
            table_name=name,
        )
        table = response["Table"]
        throughput = table.get("ProvisionedThroughput", {})
        return TableDescription(
            read_capacity=int(throughput.get("ReadCapacityUnits", 0)),
            write_capacity=int(throughput.get("WriteCapacityUnits", 0)),
            status=table.get("TableStatus", ""),
        )

    def update_table(self, name: str, read_capacity: int, write_capacity: int) -> None:
        throughput = schema.provisioned_throughput(read_capacity, write_capacity)
        self._request(
            "UpdateTable",
            lambda: self._get_client().update_table(
                TableName=name, ProvisionedThroughput=throughput
            ),
            table_name=name,
        )
