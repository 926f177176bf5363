"""
Response Serializers for Marketplace API Documentation

These serializers define the structure of API responses for OpenAPI schema generation.
They are NOT used for data validation, only for documentation in Swagger/ReDoc.
"""

from rest_framework import serializers

from marketplace.ordering.api.serializers.order_serializers import OrderSerializer

# ===== Common Response Serializers =====


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField(help_text="Stable error code, e.g. INSUFFICIENT_STOCK")
    message = serializers.CharField(help_text="Human-readable error message")
    details = serializers.JSONField(help_text="Structured error context", required=False)
    timestamp = serializers.DateTimeField(help_text="When the error was produced")


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error envelope"""

    error = ErrorDetailSerializer()


# ===== Order Response Serializers =====


class OrderListResponseSerializer(serializers.Serializer):
    """Paginated order list response"""

    count = serializers.IntegerField(help_text="Total number of orders")
    page = serializers.IntegerField(help_text="Current page number")
    page_size = serializers.IntegerField(help_text="Items per page")
    num_pages = serializers.IntegerField(help_text="Total number of pages")
    results = OrderSerializer(many=True)
