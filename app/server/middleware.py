import time

from starlette.middleware.base import BaseHTTPMiddleware

from infrastructure.logging import bind_request_context, get_module_logger

logger = get_module_logger()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context and log one ``request_completed`` line per request."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        with bind_request_context(
            correlation_id=request.headers.get("x-correlation-id"),
            request_path=request.url.path,
            request_method=request.method,
            transport="http",
        ) as correlation_id:
            response = await call_next(request)
            logger.info(
                "request_completed",
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                status_code=response.status_code,
                method=request.method,
                path=request.url.path,
                remote_address=request.client.host if request.client else "unknown",
                user_agent=request.headers.get("user-agent"),
            )
        response.headers["X-Correlation-ID"] = correlation_id
        return response
