from .order import Order, OrderItem, OrderStatusChange


__all__ = [
    "Order",
    "OrderItem",
    "OrderStatusChange",
]
