# modules/events/api.py
"""HTTP transport for the events API.

Routes read the raw request, hand plain arguments to ``EventsHandler`` in
Starlette's threadpool (storage calls block) and wrap the result in a
``Response``. Bodies are rendered by the handler, not by FastAPI, so they
match the function transport byte for byte.
"""

from typing import Annotated, Dict

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from infrastructure.operations import OperationContext
from infrastructure.services import SettingsDep
from modules.events.handlers import EventsHandler
from modules.events.responses import EventsResponse

router = APIRouter(prefix="/events", tags=["Events"])


def get_events_handler(request: Request) -> EventsHandler:
    """The handler built at startup by the application lifespan."""
    return request.app.state.events_handler


EventsHandlerDep = Annotated[EventsHandler, Depends(get_events_handler)]


def get_operation_context(settings: SettingsDep) -> OperationContext:
    """Per-request deadline for storage calls."""
    return OperationContext.with_timeout(settings.server.REQUEST_TIMEOUT_SECONDS)


OperationContextDep = Annotated[OperationContext, Depends(get_operation_context)]


def to_response(result: EventsResponse) -> Response:
    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.content_type,
    )


def _first_values(request: Request) -> Dict[str, str]:
    params = request.query_params
    return {key: params.getlist(key)[0] for key in params.keys()}


@router.get("")
async def list_events(
    request: Request, handler: EventsHandlerDep, ctx: OperationContextDep
) -> Response:
    """List events with ``statusCode`` whose date is in ``[from, to]``."""
    result = await run_in_threadpool(
        handler.list_events, ctx, request.url.path, _first_values(request)
    )
    return to_response(result)


@router.post("")
async def create_event(
    request: Request, handler: EventsHandlerDep, ctx: OperationContextDep
) -> Response:
    """Create an event under a generated id."""
    body = await request.body()
    result = await run_in_threadpool(handler.create_event, ctx, request.url.path, body)
    return to_response(result)


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    request: Request,
    handler: EventsHandlerDep,
    ctx: OperationContextDep,
) -> Response:
    result = await run_in_threadpool(
        handler.get_event, ctx, request.url.path, event_id
    )
    return to_response(result)


@router.put("/{event_id}")
async def replace_event(
    event_id: str,
    request: Request,
    handler: EventsHandlerDep,
    ctx: OperationContextDep,
) -> Response:
    """Create or fully replace the event with ``event_id``."""
    body = await request.body()
    result = await run_in_threadpool(
        handler.replace_event, ctx, request.url.path, event_id, body
    )
    return to_response(result)


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    request: Request,
    handler: EventsHandlerDep,
    ctx: OperationContextDep,
) -> Response:
    result = await run_in_threadpool(
        handler.delete_event, ctx, request.url.path, event_id
    )
    return to_response(result)


# An empty id never reaches the routes above; answer it the same way the
# function transport does instead of redirecting.
@router.api_route("/", methods=["GET", "PUT", "DELETE"], include_in_schema=False)
async def missing_event_id(
    request: Request, handler: EventsHandlerDep, ctx: OperationContextDep
) -> Response:
    method = request.method
    path = request.url.path
    if method == "GET":
        result = await run_in_threadpool(handler.get_event, ctx, path, "")
    elif method == "PUT":
        result = await run_in_threadpool(handler.replace_event, ctx, path, "", None)
    else:
        result = await run_in_threadpool(handler.delete_event, ctx, path, "")
    return to_response(result)
