"""Optional instrumentation collaborator.

Storage backends and the events handler receive an ``Instrumentation``
instance at construction time and report units of work, errors and
counters through it. ``NoopInstrumentation`` is the default; the
``LoggingInstrumentation`` variant writes structlog debug lines and keeps
in-process counters, which tests read back.
"""

import threading
import time
from collections import Counter
from contextlib import contextmanager
from typing import Any, Iterator, Protocol, runtime_checkable

from infrastructure.logging import get_module_logger

logger = get_module_logger()


@runtime_checkable
class Instrumentation(Protocol):
    """Start/end units of work, record errors and increment counters."""

    def span(self, name: str, **attributes: Any) -> Any:
        """Return a context manager wrapping one unit of work."""
        ...

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None:
        ...

    def increment(self, counter: str, value: int = 1, **attributes: Any) -> None:
        ...


class NoopInstrumentation:
    """Instrumentation that records nothing."""

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Iterator[None]:
        yield

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None:
        return None

    def increment(self, counter: str, value: int = 1, **attributes: Any) -> None:
        return None


class LoggingInstrumentation:
    """Instrumentation backed by structured logs and in-process counters.

    Counters are keyed by the counter name plus its sorted attributes, so
    ``increment("events.requests.total", method="GET", status=200)`` and the
    same call with ``status=404`` are tracked separately.
    """

    def __init__(self):
        self._counters: Counter = Counter()
        self._lock = threading.Lock()

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        except BaseException as exc:
            self.record_error(name, exc, **attributes)
            raise
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 3)
            logger.debug("span_finished", span=name, duration_ms=duration_ms, **attributes)

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None:
        logger.debug(
            "span_error",
            span=name,
            error=str(error),
            error_type=type(error).__name__,
            **attributes,
        )
        self.increment("errors.total", span=name)

    def increment(self, counter: str, value: int = 1, **attributes: Any) -> None:
        key = (counter, tuple(sorted(attributes.items())))
        with self._lock:
            self._counters[key] += value

    def count(self, counter: str, **attributes: Any) -> int:
        """Current value of ``counter`` for exactly these attributes."""
        key = (counter, tuple(sorted(attributes.items())))
        with self._lock:
            return self._counters[key]

    def total(self, counter: str) -> int:
        """Sum of ``counter`` across all attribute combinations."""
        with self._lock:
            return sum(v for (name, _), v in self._counters.items() if name == counter)
