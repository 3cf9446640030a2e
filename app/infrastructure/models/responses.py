"""Problem-details error response model.

Every error path of both transports renders this shape, so clients see one
error format whichever entry point served them.
"""

from typing import Optional

from pydantic import Field

from infrastructure.models.base import InfrastructureModel

ABOUT_BLANK = "about:blank"


class ErrorResponse(InfrastructureModel):
    """Problem-details error body.

    Attributes:
        type: URI identifying the problem type, ``about:blank`` when generic
        status: HTTP status code of the response
        title: Short human-readable category (e.g. "Not Found")
        detail: Human-readable explanation of this occurrence
        instance: Request path the problem occurred on
        code: Optional machine-readable error code

    Example:
        >>> problem = ErrorResponse(
        ...     status=404,
        ...     title="Not Found",
        ...     detail="Event not found",
        ...     instance="/events/abc",
        ...     code="NOT_FOUND",
        ... )
        >>> problem.to_dict()["title"]
        'Not Found'
    """

    type: str = Field(default=ABOUT_BLANK, description="Problem type URI")
    status: int = Field(..., ge=100, le=599, description="HTTP status code")
    title: str = Field(..., description="Short problem category")
    detail: str = Field(default="", description="Explanation of the problem")
    instance: str = Field(default="", description="Request path")
    code: Optional[str] = Field(default=None, description="Machine error code")

    def to_dict(self) -> dict:
        """Wire representation, omitting ``code`` when unset."""
        return self.model_dump(by_alias=True, exclude_none=True)
