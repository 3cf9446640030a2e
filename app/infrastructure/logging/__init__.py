"""Structured logging infrastructure.

Centralized logging configuration and utilities for the events API using
structlog.

Public API:
    - configure_logging(): Initialize logging for the process
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request-scoped logging
    - clear_request_context(): Clear all request context

Example:
    from infrastructure.logging import configure_logging, get_module_logger

    configure_logging(settings=settings)

    logger = get_module_logger()
    logger.info("repository_created", backend="memory")
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)
from infrastructure.logging.context import (
    bind_request_context,
    clear_request_context,
)
from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
    add_environment_info,
    SENSITIVE_PATTERNS,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_module_logger",
    # Context
    "bind_request_context",
    "clear_request_context",
    # Formatters
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
    "add_environment_info",
    "SENSITIVE_PATTERNS",
]
