"""Infrastructure observability module - instrumentation collaborators.

Exports:
    Instrumentation: Protocol for spans, error recording and counters
    NoopInstrumentation: Default collaborator that records nothing
    LoggingInstrumentation: structlog-backed collaborator with in-process counters
"""

from infrastructure.observability.instrumentation import (
    Instrumentation,
    LoggingInstrumentation,
    NoopInstrumentation,
)

__all__ = [
    "Instrumentation",
    "LoggingInstrumentation",
    "NoopInstrumentation",
]
