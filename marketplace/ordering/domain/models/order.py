import uuid

from django.contrib.auth import get_user_model
from django.db import models

from marketplace.catalog.domain.models.business import Business
from marketplace.catalog.domain.models.catalog import Product
from marketplace.ordering.domain.order_status import DeliveryMethod, OrderStatus, PaymentStatus

User = get_user_model()


class Order(models.Model):
    """One vendor's share of a buyer's checkout."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    buyer = models.ForeignKey(User, on_delete=models.PROTECT, related_name="orders")
    # Fixed at creation
    business = models.ForeignKey(Business, on_delete=models.PROTECT, related_name="orders")

    # Order Details
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    delivery_method = models.CharField(max_length=20, choices=DeliveryMethod.choices, default=DeliveryMethod.PICKUP)

    # Pricing
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    # Delivery address, phone and buyer notes
    contact = models.JSONField(default=dict, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["buyer", "-created_at"], name="order_buyer_created_idx"),
            models.Index(fields=["business", "-created_at"], name="order_business_created_idx"),
            models.Index(fields=["status"], name="order_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(total_amount__gte=0), name="order_total_non_negative"),
        ]

    def __str__(self):
        return f"Order {str(self.id)[:8]} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="order_items")

    quantity = models.PositiveIntegerField()

    # Product snapshot at time of purchase
    product_name = models.CharField(max_length=255)
    price_at_purchase = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        app_label = "marketplace"
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="order_item_quantity_positive"),
        ]

    @property
    def line_total(self):
        return self.quantity * self.price_at_purchase

    def __str__(self):
        return f"{self.quantity}x {self.product_name} in order {str(self.order_id)[:8]}"


class OrderStatusChange(models.Model):
    """Append-only record of every applied status transition."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    from_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    to_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    actor = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="order_status_changes"
    )  # Null for system-driven changes
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        app_label = "marketplace"

    def __str__(self):
        return f"Order {str(self.order_id)[:8]}: {self.from_status} -> {self.to_status}"
