import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()


class Business(models.Model):
    """A vendor storefront owned by an SME account."""

    BUSINESS_TYPE_CHOICES = [
        ("shop", "Shop"),
        ("business", "Business"),
        ("service", "Service"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="businesses")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    business_type = models.CharField(max_length=20, choices=BUSINESS_TYPE_CHOICES, default="shop")
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)
    verified = models.BooleanField(default=False)

    # Reputation aggregate, rewritten in full by TrustScoreAggregator
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0.00"))
    total_ratings = models.PositiveIntegerField(default=0)
    criteria_breakdown = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        app_label = "marketplace"
        verbose_name_plural = "businesses"
        indexes = [
            models.Index(fields=["owner"], name="business_owner_idx"),
            models.Index(fields=["verified"], name="business_verified_idx"),
        ]

    def __str__(self):
        return self.name
