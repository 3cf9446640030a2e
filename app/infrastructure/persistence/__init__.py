"""Persistence layer for event records.

Provides the storage contract every backend implements, the in-process
and DynamoDB backends, and the factory that picks one from settings.
"""

from infrastructure.persistence.base import (
    EventRepository,
    StorageCancelledError,
    StorageError,
)
from infrastructure.persistence.dynamodb import DynamoDBEventRepository
from infrastructure.persistence.factory import build_event_repository
from infrastructure.persistence.memory import InMemoryEventRepository

__all__ = [
    "DynamoDBEventRepository",
    "EventRepository",
    "InMemoryEventRepository",
    "StorageCancelledError",
    "StorageError",
    "build_event_repository",
]
