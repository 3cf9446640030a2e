"""Structlog configuration and logger setup.

Configures structlog for the events API with call-site context, proper
exception formatting and environment-aware rendering (JSON in production,
console otherwise).

Usage:
    from infrastructure.logging import configure_logging, get_module_logger

    # Configure logging at process startup
    configure_logging(settings=settings)

    # Get a logger for your module
    logger = get_module_logger()
    logger.info("event_saved", event_id="abc")
"""

import inspect
import logging
import sys
from typing import TYPE_CHECKING, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.logging.formatters import (
    add_app_info,
    add_environment_info,
    mask_sensitive_data,
    truncate_large_values,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

APP_NAME = "events-api"


def _is_test_environment() -> bool:
    """Detect if running in a test environment.

    Returns:
        True if pytest is in sys.modules, False otherwise
    """
    return "pytest" in sys.modules


def configure_logging(
    settings: Optional["Settings"] = None,
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structured logging.

    Configures structlog with:
    - Context variable merging for correlation IDs and request metadata
    - File/line/function context
    - Exception formatting with stack traces
    - Test environment detection for log suppression

    Args:
        settings: Settings supplying LOG_LEVEL and is_production. Loaded from
            the environment when omitted.
        log_level: Optional override for the log level.
        is_production: Optional override for production mode (JSON output).

    Returns:
        Configured logger instance
    """
    # Suppress all logging during tests
    if _is_test_environment():
        logging.root.setLevel(logging.CRITICAL + 1)

        # Minimal processors keep structlog calls valid; nothing is emitted
        # because the root logger level is above CRITICAL.
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=logging.CRITICAL + 1,
            force=True,
        )
        return structlog.stdlib.get_logger()

    if settings is None:
        from infrastructure.configuration import Settings

        settings = Settings()

    prod_mode = is_production if is_production is not None else settings.is_production

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_app_info(APP_NAME, settings.GIT_SHA),
        add_environment_info(settings.PREFIX or "production"),
        mask_sensitive_data(),
        truncate_large_values(),
    ]

    if not prod_mode:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    effective_log_level = log_level or settings.LOG_LEVEL
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, effective_log_level.upper(), logging.INFO),
        force=True,
    )

    return structlog.stdlib.get_logger()


# Lazy proxies resolve the configuration on first use, after startup configures it
logger: BoundLogger = structlog.stdlib.get_logger()


def get_module_logger() -> BoundLogger:
    """Get a logger for the calling module with full path context.

    Example:
        # In infrastructure/persistence/dynamodb.py
        logger = get_module_logger()
        # context: {"component": "dynamodb", "module_path": "infrastructure.persistence.dynamodb"}
    """
    current_frame = inspect.currentframe()
    if current_frame is None:
        return logger

    frame = current_frame.f_back
    if frame is None:
        return logger

    module = inspect.getmodule(frame)
    if module:
        module_name = module.__name__
        parts = module_name.split(".")
        return structlog.stdlib.get_logger(
            component=parts[-1], module_path=module_name
        )

    return structlog.stdlib.get_logger(component="unknown")
