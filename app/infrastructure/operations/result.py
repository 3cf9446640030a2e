"""Operation result dataclass.

Uniform result type returned by the AWS client layer. The executor never
raises; callers inspect ``is_success`` and convert failures into their own
domain errors.
"""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Uniform result returned from operations.

    Attributes:
        status: OperationStatus -- high-level outcome
        message: str -- human-friendly message for logs/troubleshooting
        data: Optional[Any] -- optional payload (raw response, list of items)
        error_code: Optional[str] -- machine error code (e.g. ResourceInUseException)
        retry_after: Optional[int] -- seconds until retry when throttled
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        """True if status is SUCCESS."""
        return self.status == OperationStatus.SUCCESS

    @property
    def is_cancelled(self) -> bool:
        """True if the caller's context stopped the operation."""
        return self.status == OperationStatus.CANCELLED

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        """Create a SUCCESS OperationResult with optional data."""
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        """Create an error OperationResult.

        Args:
            status: OperationStatus indicating error type
            message: Human-friendly error message
            error_code: Optional machine error code
            retry_after: Optional seconds until retry (for throttling)
            data: Optional payload to include with the error

        Returns:
            OperationResult with specified error status
        """
        return cls(
            status=status,
            message=message,
            error_code=error_code,
            retry_after=retry_after,
            data=data,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Create a transient (retryable) error result.

        Use for throttling (ProvisionedThroughputExceededException,
        ThrottlingException) and temporary service unavailability.
        """
        return cls.error(
            OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after
        )

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        """Create a permanent (non-retryable) error result."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)

    @classmethod
    def cancelled(cls, message: str, error_code: str = "CANCELLED") -> "OperationResult":
        """Create a result for an operation stopped by its context."""
        return cls.error(OperationStatus.CANCELLED, message, error_code)
