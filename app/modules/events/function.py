# modules/events/function.py
"""Function-invocation transport for the events API.

Accepts API Gateway HTTP API (payload format 2.0) events, one request per
invocation, and returns the matching response structure. Routing and
rendering go through the same ``EventsHandler`` as the HTTP transport.
"""

import base64
import binascii
import time
from typing import Any, Mapping, Optional, Tuple, Union

from infrastructure.logging import (
    bind_request_context,
    clear_request_context,
    get_module_logger,
)
from infrastructure.operations import OperationContext
from modules.events.handlers import EventsHandler
from modules.events.responses import (
    EventsResponse,
    format_invalid_json,
    format_method_not_allowed,
)

logger = get_module_logger()

HEALTH_PATH = "/health"

# Time kept back from the invocation's remaining time to return a response
DEADLINE_MARGIN_SECONDS = 0.5


class FunctionInvocationAdapter:
    """Route one invocation event to the events handler.

    Args:
        handler: Transport-neutral events handler
        request_timeout: Upper bound for the storage deadline of a request
    """

    def __init__(self, handler: EventsHandler, request_timeout: float = 30.0):
        self._handler = handler
        self._request_timeout = request_timeout

    @property
    def handler(self) -> EventsHandler:
        return self._handler

    def _operation_context(self, lambda_context: Any) -> OperationContext:
        timeout = self._request_timeout
        get_remaining = getattr(lambda_context, "get_remaining_time_in_millis", None)
        if callable(get_remaining):
            remaining = get_remaining() / 1000.0 - DEADLINE_MARGIN_SECONDS
            timeout = max(0.0, min(timeout, remaining))
        return OperationContext.with_timeout(timeout)

    def handle(self, event: Mapping[str, Any], lambda_context: Any = None) -> dict:
        """Process one invocation.

        Returns:
            ``{"statusCode", "headers", "body", "isBase64Encoded"}``
        """
        clear_request_context()
        started = time.perf_counter()

        request_context = event.get("requestContext") or {}
        http = request_context.get("http") or {}
        method = (http.get("method") or "").upper()
        path = http.get("path") or event.get("rawPath") or "/"
        headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}

        with bind_request_context(
            correlation_id=headers.get("x-correlation-id")
            or request_context.get("requestId"),
            request_path=path,
            request_method=method,
            transport="function",
        ) as correlation_id:
            result = self._route(event, method, path, lambda_context)
            logger.info(
                "request_completed",
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                status_code=result.status_code,
                method=method,
                path=path,
                remote_address=http.get("sourceIp"),
                user_agent=http.get("userAgent"),
            )

        response_headers = dict(result.headers)
        response_headers["X-Correlation-ID"] = correlation_id
        return {
            "statusCode": result.status_code,
            "headers": response_headers,
            "body": result.body,
            "isBase64Encoded": False,
        }

    def _route(
        self,
        event: Mapping[str, Any],
        method: str,
        path: str,
        lambda_context: Any,
    ) -> EventsResponse:
        if method == "GET" and path == HEALTH_PATH:
            return self._handler.health()

        if method not in ("GET", "POST", "PUT", "DELETE"):
            logger.info("method_not_allowed", method=method, path=path)
            return format_method_not_allowed(path, method)

        path_parameters = event.get("pathParameters") or {}
        event_id = path_parameters.get("id") or ""
        ctx = self._operation_context(lambda_context)

        if method == "GET":
            # /events/ with an empty id is a get-by-id, only /events lists
            if event_id or "id" in path_parameters or path.endswith("/"):
                return self._handler.get_event(ctx, path, event_id)
            query = event.get("queryStringParameters") or {}
            return self._handler.list_events(ctx, path, query)

        if method == "DELETE":
            return self._handler.delete_event(ctx, path, event_id)

        if method == "PUT" and not event_id:
            return self._handler.replace_event(ctx, path, event_id, None)

        body, problem = _decode_body(event, path)
        if problem is not None:
            return problem
        if method == "POST":
            return self._handler.create_event(ctx, path, body)
        return self._handler.replace_event(ctx, path, event_id, body)


def _decode_body(
    event: Mapping[str, Any], path: str
) -> Tuple[Optional[Union[bytes, str]], Optional[EventsResponse]]:
    body = event.get("body")
    if body is None or not event.get("isBase64Encoded"):
        return body, None
    try:
        return base64.b64decode(body, validate=True), None
    except (binascii.Error, ValueError) as e:
        return None, format_invalid_json(path, f"body is not valid base64: {e}")
