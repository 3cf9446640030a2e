"""Infrastructure modules for the events API.

Centralized infrastructure components:
- configuration: Settings management (Settings and its domain groups)
- logging: Structured logging (configure_logging, get_module_logger)
- observability: Instrumentation collaborators
- operations: Operation results and the cancellation/deadline context
- clients: AWS clients (DynamoDB)
- persistence: Event repositories
- models: Problem-details error model
- services: Dependency injection services (SettingsDep, get_settings)
"""

# Configuration
from infrastructure.configuration import Settings

# Logging
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations import (
    OperationContext,
    OperationResult,
    OperationStatus,
)

# Dependency Injection Services
from infrastructure.services import SettingsDep, get_settings

__all__ = [
    # Configuration
    "Settings",
    # Logging
    "get_module_logger",
    # Operations
    "OperationContext",
    "OperationResult",
    "OperationStatus",
    # Dependency Injection Services
    "SettingsDep",
    "get_settings",
]
