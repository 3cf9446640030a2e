"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.events import EventsStorageSettings

__all__ = [
    "EventsStorageSettings",
]
