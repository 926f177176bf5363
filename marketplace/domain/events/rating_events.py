from dataclasses import dataclass

from .base import DomainEvent


@dataclass
class RatingCreatedEvent(DomainEvent):
    """Event: Rating created."""

    def __init__(self, rating_id: str, order_id: str, direction: str, rater_id: str, ratee_id: str, stars: int):
        super().__init__(
            event_type="rating.created",
            payload={
                "rating_id": rating_id,
                "order_id": order_id,
                "direction": direction,
                "rater_id": rater_id,
                "ratee_id": ratee_id,
                "stars": stars,
            },
        )
