"""Key-value storage backed by a DynamoDB table.

Each key is stored as a single item::

    {"key": "submission:1700000000000-abc1234", "value": "<json>", "ttl": 1707776000}

DynamoDB removes expired items lazily (often hours after the TTL passes), so
reads treat any item whose ``ttl`` is in the past as missing.
"""

import time
from typing import Protocol

KEY_ATTRIBUTE = "key"
VALUE_ATTRIBUTE = "value"
TTL_ATTRIBUTE = "ttl"


class KeyValueStore(Protocol):
    """Minimal get/put contract. Each call is atomic on its own; there are no
    cross-key transactions."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None: ...


class DynamoDBKeyValueStore:
    """KeyValueStore over a boto3 DynamoDB ``Table`` resource."""

    def __init__(self, table, clock=time.time):
        """Initialize the store.

        Args:
            table: DynamoDB table with a string hash key named ``key``
            clock: Callable returning the current epoch time in seconds
        """
        self.table = table
        self.clock = clock

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or expired.

        Raises:
            botocore.exceptions.ClientError: On DynamoDB errors
        """
        response = self.table.get_item(Key={KEY_ATTRIBUTE: key})
        item = response.get("Item")
        if not item:
            return None

        # DynamoDB returns numbers as Decimal
        expires_at = item.get(TTL_ATTRIBUTE)
        if expires_at is not None and int(expires_at) <= self.clock():
            return None

        return item.get(VALUE_ATTRIBUTE)

    def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store a value, optionally expiring after ``ttl_seconds``.

        Raises:
            botocore.exceptions.ClientError: On DynamoDB errors
        """
        item = {KEY_ATTRIBUTE: key, VALUE_ATTRIBUTE: value}
        if ttl_seconds is not None:
            item[TTL_ATTRIBUTE] = int(self.clock()) + int(ttl_seconds)
        self.table.put_item(Item=item)
