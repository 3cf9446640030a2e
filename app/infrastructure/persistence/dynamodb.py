"""DynamoDB event repository.

Table schema:
- Partition Key: id (S)
- GSI: date-statusCode-index, hash statusCode (N), range date (S), projects ALL
- TTL: expiration (epoch seconds, deleted asynchronously by DynamoDB)

Dates are stored as fixed-width UTC strings so the index range condition
compares chronologically. Expired items that DynamoDB has not removed yet
are filtered out on read.
"""

import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer  # type: ignore

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.logging import get_module_logger
from infrastructure.observability import Instrumentation, NoopInstrumentation
from infrastructure.operations import OperationContext, OperationResult, OperationStatus
from infrastructure.persistence.base import (
    Clock,
    EventRepository,
    StorageCancelledError,
    StorageError,
)
from modules.events.models import Event

logger = get_module_logger()

BACKEND = "dynamodb"
INDEX_NAME = "date-statusCode-index"
TTL_ATTRIBUTE = "expiration"

TABLE_DEFINITION: Dict[str, Any] = {
    "AttributeDefinitions": [
        {"AttributeName": "id", "AttributeType": "S"},
        {"AttributeName": "date", "AttributeType": "S"},
        {"AttributeName": "statusCode", "AttributeType": "N"},
    ],
    "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
    "GlobalSecondaryIndexes": [
        {
            "IndexName": INDEX_NAME,
            "KeySchema": [
                {"AttributeName": "statusCode", "KeyType": "HASH"},
                {"AttributeName": "date", "KeyType": "RANGE"},
            ],
            "Projection": {"ProjectionType": "ALL"},
        }
    ],
    "BillingMode": "PAY_PER_REQUEST",
}

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def format_date(value: datetime) -> str:
    """Fixed-width UTC representation, e.g. ``2024-05-01T12:00:00.000000Z``."""
    utc = value.astimezone(timezone.utc).replace(tzinfo=None)
    return utc.isoformat(timespec="microseconds") + "Z"


def parse_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def event_to_item(event: Event) -> Dict[str, Any]:
    """Serialize an event to DynamoDB attribute values."""
    record: Dict[str, Any] = {
        "id": event.id,
        "date": format_date(event.date),
        "statusCode": event.status_code,
        "statusMessage": event.status_message,
        "expiration": event.expiration,
    }
    if event.metadata is not None:
        record["metadata"] = dict(event.metadata)
    return {key: _serializer.serialize(value) for key, value in record.items()}


def _as_int(value: Any) -> int:
    if isinstance(value, Decimal):
        return int(value)
    return value


def item_to_event(item: Dict[str, Any]) -> Event:
    """Deserialize DynamoDB attribute values into an event.

    Raises:
        ValueError: If the item does not hold a valid event.
    """
    record = {key: _deserializer.deserialize(value) for key, value in item.items()}
    return Event(
        id=record.get("id"),
        date=parse_date(record["date"]) if record.get("date") else None,
        status_code=_as_int(record.get("statusCode", 0)),
        status_message=record.get("statusMessage", ""),
        expiration=_as_int(record.get("expiration", 0)),
        metadata=record.get("metadata"),
    )


class DynamoDBEventRepository(EventRepository):
    """Event repository backed by a DynamoDB table.

    Args:
        client: DynamoDBClient used for every call
        table_name: Table holding the events
        ttl: Lifetime assigned to records saved without an expiration
        ready_timeout: Max seconds to wait for a new table to become ACTIVE
        poll_interval: Seconds between table status checks
        clock: Source of the current UTC time
        instrumentation: Optional instrumentation collaborator
    """

    def __init__(
        self,
        client: DynamoDBClient,
        table_name: str,
        ttl: timedelta,
        ready_timeout: float = 300.0,
        poll_interval: float = 5.0,
        clock: Optional[Clock] = None,
        instrumentation: Optional[Instrumentation] = None,
    ):
        super().__init__(ttl, clock)
        self._client = client
        self._table_name = table_name
        self._ready_timeout = ready_timeout
        self._poll_interval = poll_interval
        self._instrumentation = instrumentation or NoopInstrumentation()

    @property
    def table_name(self) -> str:
        return self._table_name

    def _fail(self, action: str, result: OperationResult) -> StorageError:
        logger.error(
            "dynamodb_operation_failed",
            action=action,
            table=self._table_name,
            error=result.message,
            error_code=result.error_code,
        )
        if result.is_cancelled:
            return StorageCancelledError(result.message, result.error_code)
        return StorageError(f"{action}, {result.message}", result.error_code)

    def _decode(self, item: Dict[str, Any]) -> Event:
        try:
            return item_to_event(item)
        except (ValueError, KeyError, TypeError) as e:
            logger.error("dynamodb_item_decode_failed", table=self._table_name, error=str(e))
            raise StorageError(
                f"unable to convert dynamodb object to record, {e}", "UNMARSHAL_ERROR"
            ) from e

    def create(self, ctx: OperationContext) -> None:
        """Create the table, wait until it is ACTIVE, then enable TTL.

        An existing table counts as success and skips the wait and TTL steps.
        """
        with self._instrumentation.span("repository.create", backend=BACKEND):
            result = self._client.create_table(ctx, self._table_name, **TABLE_DEFINITION)
            if not result.is_success:
                if result.error_code == "ResourceInUseException":
                    logger.info("dynamodb_table_exists", table=self._table_name)
                    return
                raise self._fail("unable to create table", result)

            logger.info("dynamodb_table_created", table=self._table_name)
            self._wait_until_active(ctx)

            result = self._client.update_time_to_live(
                ctx, self._table_name, TTL_ATTRIBUTE
            )
            if not result.is_success:
                raise self._fail("unable to configure TTL on table", result)
            logger.info(
                "dynamodb_ttl_enabled", table=self._table_name, attribute=TTL_ATTRIBUTE
            )

    def _wait_until_active(self, ctx: OperationContext) -> None:
        give_up_at = time.monotonic() + self._ready_timeout
        while True:
            result = self._client.describe_table(ctx, self._table_name)
            if result.is_success:
                status = (result.data or {}).get("Table", {}).get("TableStatus")
                logger.debug(
                    "dynamodb_table_status", table=self._table_name, status=status
                )
                if status == "ACTIVE":
                    return
            elif result.status != OperationStatus.NOT_FOUND:
                raise self._fail("unable to check if table is ready", result)

            if time.monotonic() >= give_up_at:
                raise StorageError(
                    f"table {self._table_name} not active after {self._ready_timeout}s",
                    "TABLE_NOT_READY",
                )
            if not ctx.wait(self._poll_interval):
                raise StorageCancelledError(
                    "cancelled while waiting for table to become active",
                    "DEADLINE_EXCEEDED" if ctx.expired else "CANCELLED",
                )

    def save(self, ctx: OperationContext, event: Event) -> Event:
        with self._instrumentation.span("repository.save", backend=BACKEND):
            stored = self.prepare_for_save(event)
            try:
                item = event_to_item(stored)
            except (TypeError, ValueError, AttributeError, OverflowError) as e:
                raise StorageError(
                    f"unable to convert record to dynamodb object, {e}", "MARSHAL_ERROR"
                ) from e

            result = self._client.put_item(ctx, self._table_name, Item=item)
            if not result.is_success:
                raise self._fail("unable to put item on dynamodb", result)
            logger.debug("event_saved", backend=BACKEND, event_id=stored.id)
            return stored

    def delete(self, ctx: OperationContext, event_id: str) -> Optional[Event]:
        with self._instrumentation.span("repository.delete", backend=BACKEND):
            result = self._client.delete_item(
                ctx,
                self._table_name,
                Key={"id": {"S": event_id}},
                ReturnValues="ALL_OLD",
            )
            if not result.is_success:
                raise self._fail("unable to delete item from dynamodb", result)
            attributes = (result.data or {}).get("Attributes")
            if not attributes:
                logger.debug("event_not_found", backend=BACKEND, event_id=event_id)
                return None
            return self._decode(attributes)

    def get(self, ctx: OperationContext, event_id: str) -> Optional[Event]:
        with self._instrumentation.span("repository.get", backend=BACKEND):
            result = self._client.get_item(
                ctx, self._table_name, Key={"id": {"S": event_id}}
            )
            if not result.is_success:
                raise self._fail("unable to get item from dynamodb", result)
            item = (result.data or {}).get("Item")
            if not item:
                return None
            event = self._decode(item)
            if event.is_expired(self.now()):
                return None
            return event

    def find_by_date_and_status_code(
        self,
        ctx: OperationContext,
        date_from: datetime,
        date_to: datetime,
        status_code: int,
    ) -> List[Event]:
        with self._instrumentation.span("repository.find", backend=BACKEND):
            # DynamoDB rejects BETWEEN with reversed bounds
            if date_from > date_to:
                return []

            result = self._client.query(
                ctx,
                self._table_name,
                KeyConditionExpression=(
                    "statusCode = :statusCode AND #date BETWEEN :from AND :to"
                ),
                IndexName=INDEX_NAME,
                ExpressionAttributeNames={"#date": "date"},
                ExpressionAttributeValues={
                    ":statusCode": {"N": str(status_code)},
                    ":from": {"S": format_date(date_from)},
                    ":to": {"S": format_date(date_to)},
                },
            )
            if not result.is_success:
                raise self._fail("unable to query items from dynamodb", result)

            now = self.now()
            events = [self._decode(item) for item in result.data or []]
            return [event for event in events if not event.is_expired(now)]
