# modules/events/bootstrap.py
"""Startup wiring shared by the server lifespan and the function entry point."""

from typing import TYPE_CHECKING, Optional

from infrastructure.logging import get_module_logger
from infrastructure.observability import Instrumentation
from infrastructure.operations import OperationContext
from infrastructure.persistence import EventRepository, build_event_repository
from modules.events.handlers import EventsHandler

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = get_module_logger()


def build_events_handler(
    settings: "Settings",
    instrumentation: Optional[Instrumentation] = None,
    repository: Optional[EventRepository] = None,
) -> EventsHandler:
    """Build the repository, initialize it and wrap it in an ``EventsHandler``.

    Initialization failures (table creation, readiness wait, TTL setup)
    raise ``StorageError`` and must abort startup.

    Args:
        settings: Application settings
        instrumentation: Optional instrumentation collaborator
        repository: Repository to use instead of the configured one

    Returns:
        Handler ready to serve requests.
    """
    if repository is None:
        repository = build_event_repository(settings, instrumentation=instrumentation)

    startup_timeout = (
        settings.storage.TABLE_READY_TIMEOUT_SECONDS
        + settings.server.REQUEST_TIMEOUT_SECONDS
    )
    repository.create(OperationContext.with_timeout(startup_timeout))
    logger.info("event_repository_ready", backend=settings.storage.BACKEND)

    return EventsHandler(repository, instrumentation=instrumentation)
