"""Session provider for AWS client operations.

Centralizes boto3 session and client configuration for AWS service
clients: region, custom endpoint and the botocore timeouts that bound every
network call.
"""

from typing import Any, Dict, Optional

from botocore.config import Config  # type: ignore

from infrastructure.clients.aws.client import get_boto3_client
from infrastructure.logging import get_module_logger

logger = get_module_logger()


class SessionProvider:
    """Centralized provider for AWS session configuration.

    Manages region, endpoint URL and timeouts so per-service clients don't
    need to duplicate this code. Retries are handled by
    ``execute_aws_api_call``, so botocore's own retry loop is limited to a
    single attempt.

    Args:
        region: AWS region for all clients (e.g., 'ca-central-1')
        endpoint_url: Custom endpoint URL (DynamoDB Local, LocalStack)
        connect_timeout: Seconds allowed to establish a connection
        read_timeout: Seconds allowed to wait for a response
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 10.0,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

    @classmethod
    def from_settings(cls, aws_settings: Any) -> "SessionProvider":
        """Build a provider from ``AwsSettings``."""
        return cls(
            region=aws_settings.AWS_REGION,
            endpoint_url=aws_settings.DYNAMODB_ENDPOINT_URL,
            connect_timeout=aws_settings.CONNECT_TIMEOUT_SECONDS,
            read_timeout=aws_settings.READ_TIMEOUT_SECONDS,
        )

    def build_client_kwargs(self) -> Dict[str, Any]:
        """Build session and client configuration kwargs for boto3.

        Returns:
            Dict with session_config and client_config for ``get_boto3_client``
        """
        session_config: Dict[str, Any] = {}
        client_config: Dict[str, Any] = {
            "config": Config(
                connect_timeout=self.connect_timeout,
                read_timeout=self.read_timeout,
                retries={"total_max_attempts": 1},
            )
        }

        if self.region:
            session_config["region_name"] = self.region
            client_config["region_name"] = self.region

        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url

        logger.debug(
            "built_client_kwargs",
            region=self.region,
            endpoint_url=self.endpoint_url,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )
        return {
            "session_config": session_config or None,
            "client_config": client_config,
        }

    def get_boto3_client(self, service_name: str) -> Any:
        """Get a fully-configured boto3 client for the given service.

        Args:
            service_name: AWS service name (e.g., 'dynamodb')

        Returns:
            Configured boto3 client instance
        """
        kw = self.build_client_kwargs()
        return get_boto3_client(
            service_name,
            session_config=kw["session_config"],
            client_config=kw["client_config"],
        )
