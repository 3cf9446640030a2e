"""Infrastructure AWS clients public API.

    from infrastructure.clients.aws import DynamoDBClient, SessionProvider

    provider = SessionProvider.from_settings(settings.aws)
    dynamodb = DynamoDBClient(provider, max_retries=settings.aws.MAX_RETRIES)

    result = dynamodb.get_item(ctx, "events", {"id": {"S": "123"}})
    if result.is_success:
        item = result.data.get("Item")
"""

from infrastructure.clients.aws.client import execute_aws_api_call, get_boto3_client
from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import SessionProvider

__all__ = [
    "DynamoDBClient",
    "SessionProvider",
    "execute_aws_api_call",
    "get_boto3_client",
]
