"""Operation status enumeration.

Status codes used to classify the outcome of calls made against external
services (DynamoDB today) so callers can decide between retrying, treating
the outcome as absence, or surfacing a storage failure.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, throttling)
        PERMANENT_ERROR: Non-retryable error (validation, schema, conflict)
        UNAUTHORIZED: Credentials rejected or permission denied
        NOT_FOUND: Table or resource does not exist
        CANCELLED: Caller cancelled the operation or its deadline passed
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
