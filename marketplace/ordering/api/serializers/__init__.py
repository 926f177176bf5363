from .order_serializers import (
    CheckoutResponseSerializer,
    CreateOrderRequestSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    UpdateOrderStatusRequestSerializer,
)


__all__ = [
    "CheckoutResponseSerializer",
    "CreateOrderRequestSerializer",
    "OrderDetailSerializer",
    "OrderSerializer",
    "UpdateOrderStatusRequestSerializer",
]
