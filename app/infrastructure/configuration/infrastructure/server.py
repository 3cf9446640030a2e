"""Server infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """Server and request runtime configuration.

    Environment Variables:
        API_HOST: Interface the HTTP server binds to (default: 0.0.0.0)
        API_PORT: Port the HTTP server listens on (default: 8080)
        SHUTDOWN_GRACE_SECONDS: Time in-flight requests get to finish on shutdown
        REQUEST_TIMEOUT_SECONDS: Deadline handed to every storage operation

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        port = settings.server.API_PORT
        grace = settings.server.SHUTDOWN_GRACE_SECONDS
        ```
    """

    API_HOST: str = Field(default="0.0.0.0", alias="API_HOST")
    API_PORT: int = Field(default=8080, ge=1, le=65535, alias="API_PORT")
    SHUTDOWN_GRACE_SECONDS: int = Field(default=30, ge=0, alias="SHUTDOWN_GRACE_SECONDS")
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, alias="REQUEST_TIMEOUT_SECONDS"
    )
