"""
Event Bus Interface
===================

Abstract interface for publishing domain events to out-of-core collaborators
(notifications, payments, analytics). Publishing is fire-and-forget: an
implementation logs delivery failures and never raises them into the caller.
"""

from abc import ABC, abstractmethod
from typing import Callable


class EventBus(ABC):
    """Abstract base class for event bus implementations."""

    @abstractmethod
    def publish(self, event_type: str, payload: dict) -> None:
        """
        Publish an event.

        Args:
            event_type: Dotted event name, e.g. ``order.placed``
            payload: JSON-serializable event body
        """

    @abstractmethod
    def subscribe(self, event_type: str, handler: Callable[[dict], None]) -> None:
        """
        Register a handler for an event type.

        Handlers receive the envelope ``{"event_type", "occurred_at", "payload"}``.
        """
