"""AWS integration settings."""

from typing import Optional

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """AWS configuration settings.

    Environment Variables:
        AWS_REGION: AWS region for services (default: ca-central-1)
        DYNAMODB_ENDPOINT_URL: Custom DynamoDB endpoint (DynamoDB Local, LocalStack)
        AWS_CONNECT_TIMEOUT_SECONDS: botocore connect timeout
        AWS_READ_TIMEOUT_SECONDS: botocore read timeout
        AWS_MAX_RETRIES: Retry attempts for throttled calls

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        region = settings.aws.AWS_REGION
        endpoint = settings.aws.DYNAMODB_ENDPOINT_URL
        ```
    """

    AWS_REGION: str = Field(default="ca-central-1", alias="AWS_REGION")
    DYNAMODB_ENDPOINT_URL: Optional[str] = Field(
        default=None, alias="DYNAMODB_ENDPOINT_URL"
    )
    CONNECT_TIMEOUT_SECONDS: float = Field(
        default=5.0, gt=0, alias="AWS_CONNECT_TIMEOUT_SECONDS"
    )
    READ_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, alias="AWS_READ_TIMEOUT_SECONDS"
    )
    MAX_RETRIES: int = Field(default=3, ge=0, alias="AWS_MAX_RETRIES")

    THROTTLING_ERRS: list[str] = [
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "ProvisionedThroughputExceededException",
    ]
