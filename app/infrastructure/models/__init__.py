"""Infrastructure models.

Exports:
    ErrorResponse: Problem-details error body shared by both transports
    InfrastructureModel: Base model configuration for wire-facing models
    ABOUT_BLANK: Default problem type URI
"""

from infrastructure.models.base import InfrastructureModel
from infrastructure.models.responses import ABOUT_BLANK, ErrorResponse

__all__ = [
    "ABOUT_BLANK",
    "ErrorResponse",
    "InfrastructureModel",
]
