from marketplace.catalog.domain.models import Business, Product
from marketplace.ordering.domain.models import Order, OrderItem, OrderStatusChange
from marketplace.ratings.domain.models import ConsumerTrustScore, Rating


__all__ = [
    "Business",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatusChange",
    "Rating",
    "ConsumerTrustScore",
]
