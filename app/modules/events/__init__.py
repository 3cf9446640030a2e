"""Event audit log module.

Records, retrieves, replaces, deletes and range-queries status events.
Two transports serve the same operations with identical results:

- ``modules.events.api``: FastAPI router mounted by the long-running server
- ``modules.events.function``: adapter for single-invocation serverless events

Both delegate to ``EventsHandler`` in ``modules.events.handlers``.
"""

from modules.events.models import (
    Event,
    EventValidationError,
    InvalidDate,
    InvalidStatusCode,
    validate_event,
)

__all__ = [
    "Event",
    "EventValidationError",
    "InvalidDate",
    "InvalidStatusCode",
    "validate_event",
]
