from rest_framework import serializers

from marketplace.ordering.domain.models.order import Order, OrderItem, OrderStatusChange
from marketplace.ordering.domain.order_status import DeliveryMethod


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(help_text="Product UUID")
    quantity = serializers.IntegerField(min_value=1, help_text="Units to buy")


class ContactSerializer(serializers.Serializer):
    delivery_address = serializers.CharField(max_length=500, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class CreateOrderRequestSerializer(serializers.Serializer):
    """Request body for checkout; duplicate product lines are merged by the server."""

    items = CartLineSerializer(many=True, allow_empty=True, help_text="Cart lines, any mix of vendors")
    delivery_method = serializers.ChoiceField(choices=DeliveryMethod.choices, default=DeliveryMethod.PICKUP)
    contact = ContactSerializer(required=False, default=dict)


class UpdateOrderStatusRequestSerializer(serializers.Serializer):
    # Plain string: unknown statuses are rejected by the state machine
    status = serializers.CharField(max_length=32, help_text="Target order status")
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product", "product_name", "quantity", "price_at_purchase", "line_total"]
        read_only_fields = fields


class OrderStatusChangeSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusChange
        fields = ["from_status", "to_status", "actor", "reason", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    business_name = serializers.CharField(source="business.name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer",
            "business",
            "business_name",
            "status",
            "payment_status",
            "delivery_method",
            "total_amount",
            "contact",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    status_history = OrderStatusChangeSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["status_history"]
        read_only_fields = fields


class VendorGroupFailureSerializer(serializers.Serializer):
    business_id = serializers.UUIDField()
    code = serializers.CharField()
    message = serializers.CharField()
    details = serializers.ListField(child=serializers.DictField())


class CheckoutResponseSerializer(serializers.Serializer):
    orders = OrderSerializer(many=True)
    failures = VendorGroupFailureSerializer(many=True)
    count = serializers.IntegerField(help_text="Number of orders created")
