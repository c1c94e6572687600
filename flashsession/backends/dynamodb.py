"""DynamoDB session backend for production deployments."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

import aioboto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import BackendError
from ..ids import MAX_ID_ATTEMPTS
from ..record import SessionRecord
from .base import DefaultIdentity

logger = logging.getLogger(__name__)


class DynamoDBSessionBackend(DefaultIdentity):
    """Session backend using AWS DynamoDB.

    Table schema:
        Partition key: session_id (S)
        Attributes: data (S, JSON-encoded record), last_activity (N), ttl (N)

    Enable TTL on the `ttl` attribute for automatic cleanup; ``clean`` covers
    the window before DynamoDB gets around to deleting expired items.
    """

    def __init__(
        self,
        table_name: str = "sessions",
        endpoint_url: str = "",
        region_name: str = "us-west-2",
        id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self._table_name = table_name
        self._session = aioboto3.Session()
        self._endpoint_url = endpoint_url or None
        self._region_name = region_name
        self.id_attempts = id_attempts

    def _resource(self):
        return self._session.resource(
            "dynamodb",
            endpoint_url=self._endpoint_url,
            region_name=self._region_name,
        )

    async def load(self, key: str) -> SessionRecord | None:
        try:
            async with self._resource() as dynamodb:
                table = await dynamodb.Table(self._table_name)
                response = await table.get_item(Key={"session_id": key})
        except (BotoCoreError, ClientError) as e:
            logger.error("DynamoDB error loading session: %s", e)
            raise BackendError("DynamoDB error during session load") from e

        item = response.get("Item")
        if item is None:
            return None
        return SessionRecord.loads(item.get("data"))

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        last_activity = record.last_activity or int(time.time())
        try:
            async with self._resource() as dynamodb:
                table = await dynamodb.Table(self._table_name)
                await table.put_item(
                    Item={
                        "session_id": record.id,
                        "data": record.dumps(),
                        "last_activity": last_activity,
                        "ttl": last_activity + int(config.get("lifetime", 0)) * 60,
                    }
                )
        except (BotoCoreError, ClientError) as e:
            logger.error("DynamoDB error saving session %s: %s", record.id, e)
            raise BackendError("DynamoDB error during session save") from e

    async def delete(self, key: str) -> None:
        try:
            async with self._resource() as dynamodb:
                table = await dynamodb.Table(self._table_name)
                await table.delete_item(Key={"session_id": key})
        except (BotoCoreError, ClientError) as e:
            logger.error("DynamoDB error deleting session: %s", e)
            raise BackendError("DynamoDB error during session delete") from e

    async def clean(self, threshold: int) -> int:
        removed = 0
        scan_kwargs: dict[str, Any] = {
            "FilterExpression": Attr("last_activity").lt(threshold),
            "ProjectionExpression": "session_id",
        }
        try:
            async with self._resource() as dynamodb:
                table = await dynamodb.Table(self._table_name)
                while True:
                    response = await table.scan(**scan_kwargs)
                    for item in response.get("Items", []):
                        await table.delete_item(Key={"session_id": item["session_id"]})
                        removed += 1
                    last_key = response.get("LastEvaluatedKey")
                    if not last_key:
                        break
                    scan_kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as e:
            logger.error("DynamoDB error cleaning sessions: %s", e)
            raise BackendError("DynamoDB error during session clean") from e
        return removed
