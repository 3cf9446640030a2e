"""Event entity and its validation rule.

An ``Event`` is one audit-log record: a status code and message observed
at a point in time, with free-form string metadata. Records carry an
``expiration`` (epoch seconds) assigned by the repository on first save;
once that moment passes the record is invisible to every read.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import AwareDatetime, Field, StrictInt, StrictStr, field_validator

from infrastructure.models import InfrastructureModel

# Zero value for timestamps coming from clients that serialize "unset" dates
# instead of omitting them.
ZERO_DATE = datetime(1, 1, 1, tzinfo=timezone.utc)


class EventValidationError(ValueError):
    """Raised by ``validate_event`` when a record breaks the validation rule."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidDate(EventValidationError):
    def __init__(self):
        super().__init__("invalid date")


class InvalidStatusCode(EventValidationError):
    def __init__(self):
        super().__init__("invalid status code")


class Event(InfrastructureModel):
    """Audit-log record.

    Attributes:
        id: Unique identifier, assigned by the service on creation
        date: When the event happened; required for a valid record
        status_code: Observed status code, non-negative
        status_message: Free text accompanying the status code
        expiration: Epoch seconds after which the record is gone, 0 if unset
        metadata: Optional string-to-string mapping
    """

    id: Optional[StrictStr] = None
    date: Optional[AwareDatetime] = None
    status_code: StrictInt = 0
    status_message: StrictStr = ""
    expiration: StrictInt = 0
    metadata: Optional[dict[StrictStr, StrictStr]] = Field(default=None)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store dates in UTC so every backend returns the same instant."""
        if v is None:
            return v
        try:
            return v.astimezone(timezone.utc)
        except OverflowError as e:
            raise ValueError("date is out of range once converted to UTC") from e

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is past an assigned expiration."""
        return self.expiration != 0 and self.expiration < now.timestamp()

    def to_dict(self) -> dict:
        """JSON-ready wire representation.

        ``id`` and ``metadata`` are omitted when unset.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _is_zero_date(value: Optional[datetime]) -> bool:
    if value is None:
        return True
    return value == ZERO_DATE


def validate_event(event: Event) -> None:
    """Check the validation rule for a decoded event.

    Only ``date`` and ``status_code`` are checked; ``status_message`` and
    ``metadata`` are accepted as-is, including empty.

    Raises:
        InvalidDate: If the date is missing or the zero timestamp.
        InvalidStatusCode: If the status code is negative.
    """
    if _is_zero_date(event.date):
        raise InvalidDate()
    if event.status_code < 0:
        raise InvalidStatusCode()
