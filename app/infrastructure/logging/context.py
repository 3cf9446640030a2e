"""Request context binding for structured logging.

Binds request-scoped values (correlation id, path, method, transport) to
structlog's context vars so every log line emitted while handling a request
carries them, whichever transport received it.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(
        correlation_id=request.headers.get("X-Correlation-ID"),
        request_path="/events",
        request_method="GET",
        transport="http",
    ):
        logger.info("processing_request")
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    transport: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind request-scoped context to all logs within the block.

    Args:
        correlation_id: Unique request identifier. Generated if not provided.
        request_path: Request path (e.g. "/events/abc").
        request_method: HTTP method (e.g. "GET").
        transport: Transport that received the request ("http" or "function").
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation id in effect for the block.
    """
    context: dict[str, Any] = {}
    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    if request_path is not None:
        context["request_path"] = request_path

    if request_method is not None:
        context["request_method"] = request_method

    if transport is not None:
        context["transport"] = transport

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context.

    The function transport calls this at the start of every invocation since
    a warm Lambda container reuses the same thread.
    """
    structlog.contextvars.clear_contextvars()
