"""Serverless entry point.

The adapter (and the repository behind it) is built on the first invocation
of a process and reused by later invocations; each invocation handles
exactly one request.
"""

from functools import lru_cache

from dotenv import load_dotenv

from infrastructure.logging import configure_logging
from infrastructure.services import get_instrumentation, get_settings
from modules.events.bootstrap import build_events_handler
from modules.events.function import FunctionInvocationAdapter

load_dotenv()


@lru_cache
def get_adapter() -> FunctionInvocationAdapter:
    """Cold start: configure logging, build and initialize the repository."""
    settings = get_settings()
    configure_logging(settings=settings)
    handler = build_events_handler(settings, get_instrumentation())
    return FunctionInvocationAdapter(
        handler, request_timeout=settings.server.REQUEST_TIMEOUT_SECONDS
    )


def handler(event, context):
    return get_adapter().handle(event, context)
