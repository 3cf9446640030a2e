# modules/events/handlers.py
"""Transport-neutral request handling for the events API.

``EventsHandler`` implements the six operations both transports expose.
Transports decode their wire format into plain arguments (path, ids, query
mapping, raw body), call one method here and wrap the returned
``EventsResponse`` in their own envelope. That keeps status codes and
bodies identical across transports.
"""

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional, Tuple, Union

from pydantic import AwareDatetime, TypeAdapter, ValidationError

from infrastructure.logging import get_module_logger
from infrastructure.observability import Instrumentation, NoopInstrumentation
from infrastructure.operations import OperationContext
from infrastructure.persistence import EventRepository, StorageError
from modules.events.models import Event, EventValidationError, validate_event
from modules.events.responses import (
    EventsResponse,
    describe_validation_error,
    format_event,
    format_event_list,
    format_health,
    format_invalid_body,
    format_invalid_json,
    format_invalid_parameter,
    format_missing_id,
    format_no_content,
    format_not_found,
    format_storage_error,
)

logger = get_module_logger()

DEFAULT_WINDOW = timedelta(hours=1)
REQUESTS_COUNTER = "events.requests.total"

_datetime_adapter = TypeAdapter(AwareDatetime)
_integer_pattern = re.compile(r"^[+-]?\d+$")
_rfc3339_pattern = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)

Body = Union[str, bytes, None]


class InvalidParameter(ValueError):
    """A query parameter is present but cannot be parsed."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"parameter {{{name}}} invalid, {reason}")
        self.name = name
        self.reason = reason


def _parse_datetime(name: str, value: str) -> datetime:
    # The adapter alone would also take Unix timestamps
    if not _rfc3339_pattern.match(value):
        raise InvalidParameter(name, f'"{value}" is not an RFC 3339 date-time')
    try:
        parsed = _datetime_adapter.validate_python(value)
        return parsed.astimezone(timezone.utc)
    except ValidationError as e:
        raise InvalidParameter(name, describe_validation_error(e)) from e
    except OverflowError as e:
        raise InvalidParameter(name, "date out of range") from e


def _parse_int(name: str, value: str) -> int:
    if not _integer_pattern.match(value):
        raise InvalidParameter(name, f'"{value}" is not an integer')
    return int(value)


def parse_find_parameters(
    query: Mapping[str, str], now: datetime
) -> Tuple[datetime, datetime, int]:
    """Parse ``from``, ``to`` and ``statusCode`` from query parameters.

    Missing or blank values take their defaults: the hour before ``now``
    and status code 0.

    Raises:
        InvalidParameter: If a present value cannot be parsed.
    """
    date_from = now - DEFAULT_WINDOW
    date_to = now
    status_code = 0

    value = (query.get("from") or "").strip()
    if value:
        date_from = _parse_datetime("from", value)

    value = (query.get("to") or "").strip()
    if value:
        date_to = _parse_datetime("to", value)

    value = (query.get("statusCode") or "").strip()
    if value:
        status_code = _parse_int("statusCode", value)

    return date_from, date_to, status_code


class EventsHandler:
    """Implements health, list, get, create, replace and delete.

    Args:
        repository: Storage contract implementation
        instrumentation: Optional instrumentation collaborator
        clock: Source of the current UTC time, used for query defaults
        id_factory: Generates ids for created events
    """

    def __init__(
        self,
        repository: EventRepository,
        instrumentation: Optional[Instrumentation] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._repository = repository
        self._instrumentation = instrumentation or NoopInstrumentation()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    @property
    def repository(self) -> EventRepository:
        return self._repository

    def _finish(self, operation: str, response: EventsResponse) -> EventsResponse:
        self._instrumentation.increment(
            REQUESTS_COUNTER, operation=operation, status=response.status_code
        )
        return response

    def _storage_failure(
        self, operation: str, path: str, error: StorageError
    ) -> EventsResponse:
        logger.error(
            "repository_operation_failed",
            operation=operation,
            path=path,
            error=error.message,
            error_code=error.error_code,
        )
        return format_storage_error(path, error.message)

    def _decode(self, path: str, body: Body) -> Tuple[Optional[Event], Optional[EventsResponse]]:
        try:
            event = Event.model_validate_json(body or "")
        except ValidationError as e:
            logger.warning("invalid_json_body", path=path, error=str(e))
            return None, format_invalid_json(path, describe_validation_error(e))
        try:
            validate_event(event)
        except EventValidationError as e:
            logger.info("event_validation_failed", path=path, error=e.message)
            return None, format_invalid_body(path, e.message)
        return event, None

    def health(self) -> EventsResponse:
        return self._finish("health", format_health())

    def list_events(
        self, ctx: OperationContext, path: str, query: Mapping[str, str]
    ) -> EventsResponse:
        """Return events in a date range with one status code."""
        try:
            date_from, date_to, status_code = parse_find_parameters(
                query, self._clock()
            )
        except InvalidParameter as e:
            logger.info("invalid_query_parameter", parameter=e.name, reason=e.reason)
            return self._finish("list", format_invalid_parameter(path, e.name, e.reason))

        with self._instrumentation.span("handler.list", path=path):
            try:
                events = self._repository.find_by_date_and_status_code(
                    ctx, date_from, date_to, status_code
                )
            except StorageError as e:
                return self._finish("list", self._storage_failure("list", path, e))

        logger.debug(
            "events_listed",
            date_from=date_from.isoformat(),
            date_to=date_to.isoformat(),
            status_code=status_code,
            count=len(events),
        )
        return self._finish("list", format_event_list(events))

    def get_event(
        self, ctx: OperationContext, path: str, event_id: Optional[str]
    ) -> EventsResponse:
        if not event_id:
            return self._finish("get", format_missing_id(path))

        with self._instrumentation.span("handler.get", path=path):
            try:
                event = self._repository.get(ctx, event_id)
            except StorageError as e:
                return self._finish("get", self._storage_failure("get", path, e))

        if event is None:
            return self._finish("get", format_not_found(path))
        return self._finish("get", format_event(event))

    def create_event(self, ctx: OperationContext, path: str, body: Body) -> EventsResponse:
        """Store a new event under a generated id; any id in the body is ignored."""
        event, problem = self._decode(path, body)
        if problem is not None:
            return self._finish("create", problem)

        event.id = self._id_factory()
        with self._instrumentation.span("handler.create", path=path):
            try:
                stored = self._repository.save(ctx, event)
            except StorageError as e:
                return self._finish("create", self._storage_failure("create", path, e))

        logger.info("event_created", event_id=stored.id, status_code=stored.status_code)
        return self._finish("create", format_event(stored, status_code=201))

    def replace_event(
        self,
        ctx: OperationContext,
        path: str,
        event_id: Optional[str],
        body: Body,
    ) -> EventsResponse:
        """Create or fully replace the event with ``event_id``."""
        if not event_id:
            return self._finish("replace", format_missing_id(path))

        event, problem = self._decode(path, body)
        if problem is not None:
            return self._finish("replace", problem)

        event.id = event_id
        with self._instrumentation.span("handler.replace", path=path):
            try:
                stored = self._repository.save(ctx, event)
            except StorageError as e:
                return self._finish(
                    "replace", self._storage_failure("replace", path, e)
                )

        logger.info("event_replaced", event_id=stored.id)
        return self._finish("replace", format_event(stored, status_code=201))

    def delete_event(
        self, ctx: OperationContext, path: str, event_id: Optional[str]
    ) -> EventsResponse:
        if not event_id:
            return self._finish("delete", format_missing_id(path))

        with self._instrumentation.span("handler.delete", path=path):
            try:
                removed = self._repository.delete(ctx, event_id)
            except StorageError as e:
                return self._finish("delete", self._storage_failure("delete", path, e))

        if removed is None:
            return self._finish("delete", format_not_found(path))
        logger.info("event_deleted", event_id=event_id)
        return self._finish("delete", format_no_content())
