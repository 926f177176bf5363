from .response_serializers import ErrorResponseSerializer, OrderListResponseSerializer


__all__ = [
    "ErrorResponseSerializer",
    "OrderListResponseSerializer",
]
