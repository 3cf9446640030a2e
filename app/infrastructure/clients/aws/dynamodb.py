"""DynamoDB client for AWS operations.

Provides typed access to the DynamoDB operations the event repository needs
(table lifecycle, single-item reads and writes, paginated queries) with
consistent error handling and OperationResult return types. Every method
takes the caller's ``OperationContext`` first.
"""

from typing import Any, Dict, Iterable, Optional

from infrastructure.clients.aws.client import (
    DEFAULT_THROTTLING_CODES,
    execute_aws_api_call,
)
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationContext, OperationResult

logger = get_module_logger()


class DynamoDBClient:
    """Client for DynamoDB operations.

    All methods return OperationResult for consistent error handling and
    downstream processing.

    Args:
        session_provider: SessionProvider used to build the boto3 client
        max_retries: Retry attempts for throttled or transient failures
        backoff_factor: Base delay for exponential retry backoff
        throttling_codes: Error codes treated as throttling
        client: Prebuilt boto3 client, used instead of the session provider
    """

    def __init__(
        self,
        session_provider: Optional[SessionProvider] = None,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        throttling_codes: Iterable[str] = DEFAULT_THROTTLING_CODES,
        client: Any = None,
    ) -> None:
        if client is None:
            if session_provider is None:
                raise ValueError("session_provider or client is required")
            client = session_provider.get_boto3_client("dynamodb")
        self._client = client
        self._max_retries = max_retries
        self._backoff_factor = backoff_factor
        self._throttling_codes = tuple(throttling_codes)
        self._service_name = "dynamodb"

    def _execute(
        self, ctx: OperationContext, method: str, **kwargs: Any
    ) -> OperationResult:
        return execute_aws_api_call(
            self._client,
            method,
            ctx,
            service_name=self._service_name,
            max_retries=self._max_retries,
            backoff_factor=self._backoff_factor,
            throttling_codes=self._throttling_codes,
            **kwargs,
        )

    def create_table(
        self, ctx: OperationContext, table_name: str, **kwargs
    ) -> OperationResult:
        """Create a table.

        Args:
            ctx: Operation context
            table_name: Name of the DynamoDB table
            **kwargs: KeySchema, AttributeDefinitions, GlobalSecondaryIndexes, ...

        Returns:
            OperationResult; ``error_code`` is ``ResourceInUseException`` when
            the table already exists
        """
        return self._execute(ctx, "create_table", TableName=table_name, **kwargs)

    def describe_table(self, ctx: OperationContext, table_name: str) -> OperationResult:
        """Describe a table. ``data["Table"]["TableStatus"]`` holds its status."""
        return self._execute(ctx, "describe_table", TableName=table_name)

    def update_time_to_live(
        self, ctx: OperationContext, table_name: str, attribute_name: str
    ) -> OperationResult:
        """Enable native expiry on ``attribute_name``."""
        return self._execute(
            ctx,
            "update_time_to_live",
            TableName=table_name,
            TimeToLiveSpecification={
                "Enabled": True,
                "AttributeName": attribute_name,
            },
        )

    def get_item(
        self,
        ctx: OperationContext,
        table_name: str,
        Key: Dict[str, Any],
        **kwargs,
    ) -> OperationResult:
        """Get an item from DynamoDB.

        Args:
            ctx: Operation context
            table_name: Name of the DynamoDB table
            Key: Primary key of the item (e.g., {"id": {"S": "123"}})
            **kwargs: Additional DynamoDB get_item parameters

        Returns:
            OperationResult with the raw response; ``data`` has no "Item" key
            when the item does not exist
        """
        return self._execute(ctx, "get_item", TableName=table_name, Key=Key, **kwargs)

    def put_item(
        self,
        ctx: OperationContext,
        table_name: str,
        Item: Dict[str, Any],
        **kwargs,
    ) -> OperationResult:
        """Put an item into DynamoDB.

        Args:
            ctx: Operation context
            table_name: Name of the DynamoDB table
            Item: Item to store (DynamoDB format with type descriptors)
            **kwargs: Additional DynamoDB put_item parameters

        Returns:
            OperationResult with status
        """
        return self._execute(ctx, "put_item", TableName=table_name, Item=Item, **kwargs)

    def delete_item(
        self,
        ctx: OperationContext,
        table_name: str,
        Key: Dict[str, Any],
        **kwargs,
    ) -> OperationResult:
        """Delete an item from DynamoDB.

        Pass ``ReturnValues="ALL_OLD"`` to get the deleted item back under
        ``data["Attributes"]``.
        """
        return self._execute(
            ctx, "delete_item", TableName=table_name, Key=Key, **kwargs
        )

    def query(
        self,
        ctx: OperationContext,
        table_name: str,
        KeyConditionExpression: str,
        **kwargs,
    ) -> OperationResult:
        """Query items, following every result page.

        Args:
            ctx: Operation context, checked between pages
            table_name: Name of the DynamoDB table
            KeyConditionExpression: Key condition expression
            **kwargs: IndexName, ExpressionAttributeNames/Values, ...

        Returns:
            OperationResult whose ``data`` is the list of items from all pages
        """
        return self._execute(
            ctx,
            "query",
            keys=["Items"],
            force_paginate=True,
            TableName=table_name,
            KeyConditionExpression=KeyConditionExpression,
            **kwargs,
        )
