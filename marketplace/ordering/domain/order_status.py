"""
Order status vocabulary and the single transition table.

Every status change in the system is validated against ``TRANSITIONS``;
nothing else decides which moves are legal.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    READY = "ready", "Ready"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for delivery"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class DeliveryMethod(models.TextChoices):
    PICKUP = "pickup", "Pickup"
    DELIVERY = "delivery", "Delivery"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


TRANSITIONS = {
    OrderStatus.PENDING.value: frozenset({OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.CONFIRMED.value: frozenset({OrderStatus.READY.value, OrderStatus.CANCELLED.value}),
    OrderStatus.READY.value: frozenset({OrderStatus.OUT_FOR_DELIVERY.value, OrderStatus.CANCELLED.value}),
    OrderStatus.OUT_FOR_DELIVERY.value: frozenset({OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.DELIVERED.value: frozenset(),
    OrderStatus.CANCELLED.value: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def parse_status(value) -> OrderStatus:
    """Return the OrderStatus for ``value``; raises ValueError for unknown strings."""
    return OrderStatus(value)


def is_terminal(status) -> bool:
    return str(status) in TERMINAL_STATUSES


def can_transition(current, target) -> bool:
    return str(target) in TRANSITIONS.get(str(current), frozenset())
