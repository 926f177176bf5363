"""
Event Bus Factory
=================

Chooses the event bus implementation from configuration and caches it.

Usage:
    # In settings.py
    INFRASTRUCTURE = {"EVENT_BUS_BACKEND": "redis"}  # or 'memory' for testing

    # In your code
    event_bus = get_event_bus()
"""

import logging
import threading
from typing import Literal, Optional

from django.conf import settings

from .event_bus_interface import EventBus
from .memory_event_bus import InMemoryEventBus
from .redis_event_bus import RedisEventBus


logger = logging.getLogger(__name__)

EventBusBackend = Literal["redis", "memory"]

_event_bus_instance: Optional[EventBus] = None
_lock = threading.Lock()


def create_event_bus(backend: EventBusBackend | None = None) -> EventBus:
    """
    Create an event bus instance.

    Raises:
        ValueError: If backend type is invalid
    """
    backend_type = backend or getattr(settings, "INFRASTRUCTURE", {}).get("EVENT_BUS_BACKEND", "redis")

    logger.info(f"Creating event bus backend: {backend_type}")

    if backend_type == "redis":
        return RedisEventBus()
    elif backend_type == "memory":
        return InMemoryEventBus()
    else:
        raise ValueError(f"Invalid event bus backend: {backend_type}. Must be 'redis' or 'memory'")


def get_event_bus() -> EventBus:
    """Get singleton event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        with _lock:
            if _event_bus_instance is None:
                _event_bus_instance = create_event_bus()
    return _event_bus_instance


def reset_event_bus() -> None:
    """Drop the cached instance so the next call re-reads settings."""
    global _event_bus_instance
    with _lock:
        _event_bus_instance = None
