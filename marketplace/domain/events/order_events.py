from dataclasses import dataclass
from decimal import Decimal

from .base import DomainEvent


@dataclass
class OrderPlacedEvent(DomainEvent):
    """Event: Order placed."""

    def __init__(self, order_id: str, buyer_id: str, business_id: str, total_amount: Decimal, item_count: int):
        super().__init__(
            event_type="order.placed",
            payload={
                "order_id": order_id,
                "buyer_id": buyer_id,
                "business_id": business_id,
                "total_amount": str(total_amount),
                "item_count": item_count,
            },
        )


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """Event: Order moved to a new status."""

    def __init__(
        self,
        order_id: str,
        buyer_id: str,
        business_id: str,
        from_status: str,
        to_status: str,
        actor_id: str | None,
        reason: str,
    ):
        super().__init__(
            event_type="order.status_changed",
            payload={
                "order_id": order_id,
                "buyer_id": buyer_id,
                "business_id": business_id,
                "from_status": from_status,
                "to_status": to_status,
                "actor_id": actor_id,
                "reason": reason,
            },
        )
