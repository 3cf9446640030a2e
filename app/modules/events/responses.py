# modules/events/responses.py
"""Transport-neutral responses for the events API.

Both transports render through this module: problem details for every
error path, the same JSON encoding for every success body. Transports only
wrap ``EventsResponse`` in their own envelope.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from infrastructure.models import ABOUT_BLANK, ErrorResponse
from modules.events.models import Event

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

INVALID_JSON_TYPE = "https://www.rfc-editor.org/rfc/rfc8259"


@dataclass(frozen=True)
class EventsResponse:
    """Status code, encoded body and content type of one response."""

    status_code: int
    body: str = ""
    content_type: Optional[str] = JSON_CONTENT_TYPE

    @property
    def headers(self) -> dict:
        if self.content_type is None:
            return {}
        return {"Content-Type": self.content_type}


def render_json(payload: Any) -> str:
    """Compact JSON encoding shared by both transports."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def describe_validation_error(exc: ValidationError) -> str:
    """One-line summary of a pydantic validation error."""
    parts = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def problem_response(problem: ErrorResponse) -> EventsResponse:
    return EventsResponse(
        status_code=problem.status, body=render_json(problem.to_dict())
    )


def format_invalid_json(instance: str, detail: str) -> EventsResponse:
    return problem_response(
        ErrorResponse(
            type=INVALID_JSON_TYPE,
            status=400,
            title="Invalid JSON",
            detail=detail,
            instance=instance,
            code="INVALID_JSON",
        )
    )


def format_invalid_body(instance: str, detail: str) -> EventsResponse:
    return problem_response(
        ErrorResponse(
            status=400,
            title="Invalid Body",
            detail=detail,
            instance=instance,
            code="INVALID_BODY",
        )
    )


def format_invalid_parameter(instance: str, name: str, reason: str) -> EventsResponse:
    return problem_response(
        ErrorResponse(
            status=400,
            title="Invalid Body",
            detail=f"parameter {{{name}}} invalid, {reason}",
            instance=instance,
            code="INVALID_PARAMETER",
        )
    )


def format_missing_id(instance: str) -> EventsResponse:
    return problem_response(
        ErrorResponse(
            status=400,
            title="Bad Request",
            detail="Missing event ID in URL",
            instance=instance,
            code="BAD_REQUEST",
        )
    )


def format_not_found(instance: str, detail: str = "Event not found") -> EventsResponse:
    return problem_response(
        ErrorResponse(
            status=404,
            title="Not Found",
            detail=detail,
            instance=instance,
            code="NOT_FOUND",
        )
    )


def format_storage_error(instance: str, detail: str) -> EventsResponse:
    """500 response carrying the backend error text in ``detail``."""
    return problem_response(
        ErrorResponse(
            status=500,
            title="Internal Server Error",
            detail=detail,
            instance=instance,
            code="STORAGE_ERROR",
        )
    )


def format_method_not_allowed(instance: str, method: str) -> EventsResponse:
    return problem_response(
        ErrorResponse(
            type=ABOUT_BLANK,
            status=405,
            title="Method Not Allowed",
            detail=f"method {method} is not supported",
            instance=instance,
            code="METHOD_NOT_ALLOWED",
        )
    )


def format_event(event: Event, status_code: int = 200) -> EventsResponse:
    return EventsResponse(status_code=status_code, body=render_json(event.to_dict()))


def format_event_list(events: Iterable[Event]) -> EventsResponse:
    return EventsResponse(
        status_code=200, body=render_json([event.to_dict() for event in events])
    )


def format_no_content() -> EventsResponse:
    return EventsResponse(status_code=204, body="", content_type=None)


def format_health() -> EventsResponse:
    return EventsResponse(status_code=200, body="OK", content_type=TEXT_CONTENT_TYPE)
