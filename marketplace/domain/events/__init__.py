from .base import DomainEvent
from .order_events import OrderPlacedEvent, OrderStatusChangedEvent
from .rating_events import RatingCreatedEvent


__all__ = [
    "DomainEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
    "RatingCreatedEvent",
]
