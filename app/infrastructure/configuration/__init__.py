"""Infrastructure configuration module - public API.

Centralized configuration for the events API using Pydantic BaseSettings
with domain-based organization. Settings are never read at import time;
obtain them through ``infrastructure.services.get_settings`` and pass them
down explicitly.

Exports:
    Settings: Main settings class (aggregator)
    AwsSettings: AWS integration settings
    EventsStorageSettings: Event repository settings
    ServerSettings: HTTP server settings

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    backend = settings.storage.BACKEND
    aws_region = settings.aws.AWS_REGION
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.integrations import AwsSettings
from infrastructure.configuration.features import EventsStorageSettings
from infrastructure.configuration.infrastructure import ServerSettings

__all__ = ["Settings", "AwsSettings", "EventsStorageSettings", "ServerSettings"]
