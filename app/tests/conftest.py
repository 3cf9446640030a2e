from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from botocore.exceptions import ClientError

from infrastructure.logging import configure_logging
from infrastructure.operations import OperationContext
from infrastructure.services.providers import get_instrumentation, get_settings
from modules.events.models import Event

# Logging output is suppressed for the whole test session
configure_logging()

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class MutableClock:
    """Clock returning a settable instant; ``advance`` moves it forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def clear_provider_caches():
    """Settings and instrumentation providers are process-wide; reset them per test."""
    get_settings.cache_clear()
    get_instrumentation.cache_clear()
    yield
    get_settings.cache_clear()
    get_instrumentation.cache_clear()


@pytest.fixture
def ctx():
    return OperationContext.with_timeout(5)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def make_event():
    """Factory fixture building valid events around FIXED_NOW."""

    def _factory(**overrides) -> Event:
        values = {
            "date": FIXED_NOW,
            "status_code": 200,
            "status_message": "OK",
        }
        values.update(overrides)
        return Event(**values)

    return _factory


# AWS API fixtures


def make_client_error(code: str, message: str = "boom", operation="Op", **extra):
    """Build a botocore ClientError carrying ``code``."""
    response: Dict[str, Any] = {"Error": {"Code": code, "Message": message}}
    response.update(extra)
    return ClientError(response, operation_name=operation)


class FakePaginator:
    """Fake boto3 paginator that yields provided pages.

    A page that is an exception instance is raised when reached.
    """

    def __init__(self, client: "FakeClient", method: str, pages):
        self._client = client
        self._method = method
        self._pages = pages

    def paginate(self, **kwargs):
        self._client.calls.append((self._method, kwargs))
        for page in self._pages:
            if isinstance(page, Exception):
                raise page
            yield page


class FakeClient:
    """Configurable fake boto3 client for unit tests.

    Supports:
    - Paginated responses via `get_paginator()`
    - API method responses via attribute lookup; a response may be a value,
      an exception to raise, a callable receiving the call kwargs, or a list
      consumed one element per call
    - Recording every call in ``calls`` as ``(method, kwargs)``
    """

    def __init__(
        self,
        api_responses: Optional[Dict[str, Any]] = None,
        paginated_pages: Optional[Dict[str, List[Any]]] = None,
    ):
        self._api_responses = dict(api_responses or {})
        self._paginated_pages = dict(paginated_pages or {})
        self.calls: List[tuple] = []

    def get_paginator(self, method: str):
        if method not in self._paginated_pages:
            raise AttributeError(f"No paginator available for {method}")
        return FakePaginator(self, method, self._paginated_pages[method])

    def calls_to(self, method: str) -> List[Dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in self._api_responses:
            raise AttributeError(name)

        def _call(*_args, **kwargs):
            self.calls.append((name, kwargs))
            resp = self._api_responses[name]
            if isinstance(resp, list):
                resp = resp.pop(0) if len(resp) > 1 else resp[0]
            if isinstance(resp, Exception):
                raise resp
            if callable(resp):
                return resp(**kwargs)
            return resp

        return _call


@pytest.fixture
def make_fake_client():
    """Factory fixture for creating configurable fake boto3 clients.

    Usage:
        def test_something(make_fake_client):
            client = make_fake_client(api_responses={"get_item": {...}})
    """

    def _factory(api_responses=None, paginated_pages=None) -> FakeClient:
        return FakeClient(api_responses=api_responses, paginated_pages=paginated_pages)

    return _factory


@pytest.fixture
def client_error():
    """Factory fixture exposing ``make_client_error`` to tests."""
    return make_client_error
