from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.router import api_router
from infrastructure.logging import get_module_logger
from infrastructure.models import ErrorResponse
from modules.events.api import to_response
from modules.events.responses import (
    format_invalid_body,
    format_method_not_allowed,
    format_not_found,
    problem_response,
)
from server.lifespan import lifespan
from server.middleware import RequestLoggingMiddleware

logger = get_module_logger()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render routing errors (unknown path, wrong method) as problem details."""
    path = request.url.path
    if exc.status_code == 404:
        result = format_not_found(path, detail="Route not found")
    elif exc.status_code == 405:
        result = format_method_not_allowed(path, request.method)
    else:
        result = problem_response(
            ErrorResponse(
                status=exc.status_code,
                title=HTTPStatus(exc.status_code).phrase,
                detail=str(exc.detail),
                instance=path,
            )
        )
    response = to_response(result)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(str(error.get("msg")) for error in exc.errors())
    logger.info("request_validation_failed", path=request.url.path, errors=errors)
    return to_response(format_invalid_body(request.url.path, errors))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


handler = FastAPI(title="Events API", lifespan=lifespan)
register_exception_handlers(handler)
handler.add_middleware(RequestLoggingMiddleware)

handler.include_router(api_router)
