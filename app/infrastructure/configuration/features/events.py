"""Event storage feature settings."""

from datetime import timedelta
from typing import Literal

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class EventsStorageSettings(FeatureSettings):
    """Configuration for the event repository.

    Environment Variables:
        EVENTS_STORAGE_BACKEND: Repository implementation (memory, dynamodb)
        EVENTS_TABLE_NAME: DynamoDB table holding event records
        RECORD_TTL_MINUTES: Minutes until a newly saved record expires (0 disables)
        TABLE_READY_TIMEOUT_SECONDS: Max wait for a new table to become ACTIVE
        TABLE_READY_POLL_SECONDS: Interval between table status checks

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.storage.BACKEND == "dynamodb":
            table = settings.storage.TABLE_NAME
        ttl = settings.storage.ttl
        ```
    """

    BACKEND: Literal["memory", "dynamodb"] = Field(
        default="memory", alias="EVENTS_STORAGE_BACKEND"
    )
    TABLE_NAME: str = Field(default="events", min_length=3, alias="EVENTS_TABLE_NAME")
    RECORD_TTL_MINUTES: int = Field(default=24 * 60, ge=0, alias="RECORD_TTL_MINUTES")
    TABLE_READY_TIMEOUT_SECONDS: float = Field(
        default=300.0, gt=0, alias="TABLE_READY_TIMEOUT_SECONDS"
    )
    TABLE_READY_POLL_SECONDS: float = Field(
        default=5.0, gt=0, alias="TABLE_READY_POLL_SECONDS"
    )

    @property
    def ttl(self) -> timedelta:
        """Record time-to-live as a timedelta."""
        return timedelta(minutes=self.RECORD_TTL_MINUTES)
