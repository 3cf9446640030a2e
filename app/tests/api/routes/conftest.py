"""Fixtures for HTTP route tests.

Builds a FastAPI app wired like ``server.server`` but with an in-memory
repository, a fixed clock and deterministic ids, and without running the
startup lifespan.
"""

from datetime import timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.router import api_router
from infrastructure.configuration import Settings
from infrastructure.observability import LoggingInstrumentation
from infrastructure.persistence import InMemoryEventRepository
from infrastructure.services import get_settings
from modules.events.handlers import EventsHandler
from server.middleware import RequestLoggingMiddleware
from server.server import register_exception_handlers


@pytest.fixture
def make_events_handler(clock):
    """Factory fixture for handlers with their own repository and id sequence."""

    def _factory(repository=None, instrumentation=None):
        ids = count(1)
        return EventsHandler(
            repository
            if repository is not None
            else InMemoryEventRepository(ttl=timedelta(minutes=10), clock=clock),
            instrumentation=instrumentation or LoggingInstrumentation(),
            clock=clock,
            id_factory=lambda: f"id-{next(ids)}",
        )

    return _factory


@pytest.fixture
def make_app():
    def _factory(events_handler, settings=None):
        app = FastAPI()
        register_exception_handlers(app)
        app.add_middleware(RequestLoggingMiddleware)
        app.include_router(api_router)
        app.state.events_handler = events_handler
        app.dependency_overrides[get_settings] = lambda: settings or Settings(
            GIT_SHA="abc123"
        )
        return app

    return _factory


@pytest.fixture
def events_handler(make_events_handler):
    return make_events_handler()


@pytest.fixture
def client(make_app, events_handler):
    return TestClient(make_app(events_handler))
