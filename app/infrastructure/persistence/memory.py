"""In-process event repository.

Records live in a dict keyed by id. Expired records are evicted lazily:
``get`` drops an expired record it finds, and a range query drops every
expired record it scans. All access to the dict goes through one lock,
acquired within the caller's remaining deadline.
"""

import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.observability import Instrumentation, NoopInstrumentation
from infrastructure.operations import OperationCancelledError, OperationContext
from infrastructure.persistence.base import (
    Clock,
    EventRepository,
    StorageCancelledError,
)
from modules.events.models import Event

logger = get_module_logger()

BACKEND = "memory"


class InMemoryEventRepository(EventRepository):
    """Dict-backed repository shared by every request in the process.

    Args:
        ttl: Lifetime assigned to records saved without an expiration
        clock: Source of the current UTC time
        instrumentation: Optional instrumentation collaborator
    """

    def __init__(
        self,
        ttl: timedelta,
        clock: Optional[Clock] = None,
        instrumentation: Optional[Instrumentation] = None,
    ):
        super().__init__(ttl, clock)
        self._events: Dict[str, Event] = {}
        self._lock = threading.Lock()
        self._instrumentation = instrumentation or NoopInstrumentation()

    @contextmanager
    def _store(self, ctx: OperationContext) -> Iterator[Dict[str, Event]]:
        try:
            ctx.check()
        except OperationCancelledError as e:
            raise StorageCancelledError(e.message, e.error_code) from e

        remaining = ctx.remaining()
        acquired = self._lock.acquire(timeout=-1 if remaining is None else remaining)
        if not acquired:
            raise StorageCancelledError(
                "timed out waiting for the event store", "DEADLINE_EXCEEDED"
            )
        try:
            yield self._events
        finally:
            self._lock.release()

    def __len__(self) -> int:
        """Number of physically stored records, expired ones included."""
        with self._lock:
            return len(self._events)

    def create(self, ctx: OperationContext) -> None:
        logger.debug("repository_created", backend=BACKEND)

    def save(self, ctx: OperationContext, event: Event) -> Event:
        with self._instrumentation.span("repository.save", backend=BACKEND):
            stored = self.prepare_for_save(event)
            with self._store(ctx) as events:
                events[stored.id] = stored
            logger.debug("event_saved", backend=BACKEND, event_id=stored.id)
            return stored.model_copy(deep=True)

    def delete(self, ctx: OperationContext, event_id: str) -> Optional[Event]:
        with self._instrumentation.span("repository.delete", backend=BACKEND):
            with self._store(ctx) as events:
                removed = events.pop(event_id, None)
            logger.debug(
                "event_deleted",
                backend=BACKEND,
                event_id=event_id,
                found=removed is not None,
            )
            return removed

    def get(self, ctx: OperationContext, event_id: str) -> Optional[Event]:
        with self._instrumentation.span("repository.get", backend=BACKEND):
            now = self.now()
            with self._store(ctx) as events:
                event = events.get(event_id)
                if event is not None and event.is_expired(now):
                    del events[event_id]
                    logger.debug("event_evicted", backend=BACKEND, event_id=event_id)
                    return None
            if event is None:
                return None
            return event.model_copy(deep=True)

    def find_by_date_and_status_code(
        self,
        ctx: OperationContext,
        date_from: datetime,
        date_to: datetime,
        status_code: int,
    ) -> List[Event]:
        with self._instrumentation.span("repository.find", backend=BACKEND):
            now = self.now()
            results: List[Event] = []
            evicted: List[str] = []
            with self._store(ctx) as events:
                for event_id, event in events.items():
                    if event.is_expired(now):
                        evicted.append(event_id)
                        continue
                    if (
                        event.status_code == status_code
                        and event.date is not None
                        and date_from <= event.date <= date_to
                    ):
                        results.append(event.model_copy(deep=True))
                for event_id in evicted:
                    del events[event_id]
            if evicted:
                logger.debug("events_evicted", backend=BACKEND, count=len(evicted))
            return results
