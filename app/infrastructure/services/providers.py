"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.observability import Instrumentation, LoggingInstrumentation


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process.

    Wiring code should use this directly:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Route code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/version")
        def get_version(settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_instrumentation() -> Instrumentation:
    """
    Get application-scoped instrumentation collaborator.

    Returns:
        Instrumentation: Logging-backed instrumentation shared by the
        repository and the events handler.
    """
    return LoggingInstrumentation()
