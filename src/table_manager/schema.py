"""DynamoDB schema definitions for chunk tables."""

from typing import Any

# Key attribute names shared by the legacy and periodic tables
HASH_KEY = "h"
RANGE_KEY = "r"


def get_table_definition(
    table_name: str,
    read_capacity: int,
    write_capacity: int,
) -> dict[str, Any]:
    """Get the CreateTable request for a chunk table."""
    return {
        "TableName": table_name,
        "KeySchema": [
            {"AttributeName": HASH_KEY, "KeyType": "HASH"},
            {"AttributeName": RANGE_KEY, "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": HASH_KEY, "AttributeType": "S"},
            {"AttributeName": RANGE_KEY, "AttributeType": "B"},
        ],
        "ProvisionedThroughput": provisioned_throughput(read_capacity, write_capacity),
    }


def provisioned_throughput(read_capacity: int, write_capacity: int) -> dict[str, int]:
    """Build a ProvisionedThroughput block."""
    return {
        "ReadCapacityUnits": read_capacity,
        "WriteCapacityUnits": write_capacity,
    }
