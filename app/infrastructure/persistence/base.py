"""Storage contract for event records.

Every backend implements ``EventRepository``. Absence of a record is a
normal outcome (``None``), never an exception; only genuine backend
failures raise ``StorageError``.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from infrastructure.operations import OperationContext
from modules.events.models import Event

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageError(Exception):
    """Backend failure: network, serialization or schema.

    Attributes:
        message: Backend error text
        error_code: Optional machine error code from the backend
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class StorageCancelledError(StorageError):
    """The caller's context was cancelled or its deadline passed."""


class EventRepository(ABC):
    """Abstract operation set shared by all event storage backends.

    Every method takes the caller's ``OperationContext`` first and must stop
    promptly once it is done.

    Args:
        ttl: Lifetime assigned to records saved without an expiration;
            a zero TTL leaves ``expiration`` unassigned
        clock: Source of the current UTC time
    """

    def __init__(self, ttl: timedelta, clock: Optional[Clock] = None):
        self._ttl = ttl
        self._clock = clock or utc_now

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def now(self) -> datetime:
        return self._clock()

    def prepare_for_save(self, event: Event) -> Event:
        """Return a copy of ``event`` ready to be stored.

        The copy gets a generated id when it has none, and an expiration of
        now + TTL when it has none and the TTL is positive. A non-zero
        expiration supplied by the caller is kept.
        """
        update = {}
        if not event.id:
            update["id"] = str(uuid.uuid4())
        if event.expiration == 0 and self._ttl > timedelta(0):
            update["expiration"] = int((self.now() + self._ttl).timestamp())
        return event.model_copy(update=update, deep=True)

    @abstractmethod
    def create(self, ctx: OperationContext) -> None:
        """Initialize the backend; succeeds silently when already initialized."""

    @abstractmethod
    def save(self, ctx: OperationContext, event: Event) -> Event:
        """Insert or fully replace the record with ``event.id``.

        Returns:
            The stored record, with its id and expiration assigned.
        """

    @abstractmethod
    def delete(self, ctx: OperationContext, event_id: str) -> Optional[Event]:
        """Remove a record, returning it, or ``None`` if there was none."""

    @abstractmethod
    def get(self, ctx: OperationContext, event_id: str) -> Optional[Event]:
        """Return the record, or ``None`` when missing or expired."""

    @abstractmethod
    def find_by_date_and_status_code(
        self,
        ctx: OperationContext,
        date_from: datetime,
        date_to: datetime,
        status_code: int,
    ) -> List[Event]:
        """Return non-expired records with ``date_from <= date <= date_to``
        and exactly ``status_code``. Order is unspecified."""
