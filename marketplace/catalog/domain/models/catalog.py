import uuid

from django.core.validators import MinValueValidator
from django.db import models

from .business import Business


class Product(models.Model):
    # Basic Information
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)

    # Owning vendor
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name="products")

    # Pricing and Inventory
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    # Written only through InventoryLedger's conditional updates
    quantity = models.IntegerField(default=0, validators=[MinValueValidator(0)])

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["business"], name="product_business_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
            models.Index(fields=["quantity"], name="product_quantity_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name="product_quantity_non_negative"),
            models.CheckConstraint(condition=models.Q(price__gte=0), name="product_price_non_negative"),
        ]

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    def __str__(self):
        return self.name
