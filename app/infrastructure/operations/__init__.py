"""Operation result types, status enums and the operation context.

Standardized result types for calls against external services, and the
cancellation/deadline token every storage operation receives.
"""

from infrastructure.operations.context import (
    OperationCancelledError,
    OperationContext,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationCancelledError",
    "OperationContext",
    "OperationResult",
    "OperationStatus",
]
