"""Build the configured event repository."""

from typing import TYPE_CHECKING, Optional

from infrastructure.clients.aws import DynamoDBClient, SessionProvider
from infrastructure.logging import get_module_logger
from infrastructure.observability import Instrumentation
from infrastructure.persistence.base import Clock, EventRepository
from infrastructure.persistence.dynamodb import DynamoDBEventRepository
from infrastructure.persistence.memory import InMemoryEventRepository

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = get_module_logger()


def build_event_repository(
    settings: "Settings",
    instrumentation: Optional[Instrumentation] = None,
    dynamodb_client: Optional[DynamoDBClient] = None,
    clock: Optional[Clock] = None,
) -> EventRepository:
    """Construct the repository selected by ``EVENTS_STORAGE_BACKEND``.

    The caller owns the returned repository and still has to run
    ``create`` on it before serving requests.

    Args:
        settings: Application settings
        instrumentation: Optional instrumentation collaborator
        dynamodb_client: Prebuilt client for the DynamoDB backend
        clock: Source of the current UTC time

    Returns:
        The repository instance.
    """
    storage = settings.storage
    logger.info(
        "building_event_repository",
        backend=storage.BACKEND,
        ttl_minutes=storage.RECORD_TTL_MINUTES,
    )

    if storage.BACKEND == "dynamodb":
        if dynamodb_client is None:
            dynamodb_client = DynamoDBClient(
                SessionProvider.from_settings(settings.aws),
                max_retries=settings.aws.MAX_RETRIES,
                throttling_codes=settings.aws.THROTTLING_ERRS,
            )
        return DynamoDBEventRepository(
            client=dynamodb_client,
            table_name=storage.TABLE_NAME,
            ttl=storage.ttl,
            ready_timeout=storage.TABLE_READY_TIMEOUT_SECONDS,
            poll_interval=storage.TABLE_READY_POLL_SECONDS,
            clock=clock,
            instrumentation=instrumentation,
        )

    return InMemoryEventRepository(
        ttl=storage.ttl, clock=clock, instrumentation=instrumentation
    )
