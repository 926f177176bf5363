import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.validators import MaxLengthValidator, MaxValueValidator, MinValueValidator
from django.db import models

from marketplace.catalog.domain.models.business import Business
from marketplace.ordering.domain.models.order import Order

User = get_user_model()

REVIEW_MAX_LENGTH = 2000


class RatingDirection(models.TextChoices):
    BUYER_TO_VENDOR = "buyer_to_vendor", "Buyer to vendor"
    VENDOR_TO_BUYER = "vendor_to_buyer", "Vendor to buyer"


# Sub-score keys each direction must provide, in display order
RATING_CRITERIA = {
    RatingDirection.BUYER_TO_VENDOR.value: ("product_quality", "service", "value"),
    RatingDirection.VENDOR_TO_BUYER.value: ("payment_timeliness", "communication", "compliance"),
}


class Rating(models.Model):
    """
    One party's rating of the other for a delivered order.

    At most one rating per (order, direction); rows are never edited or deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="ratings")
    rater = models.ForeignKey(User, on_delete=models.PROTECT, related_name="ratings_given")
    ratee = models.ForeignKey(User, on_delete=models.PROTECT, related_name="ratings_received")
    # Vendor of the order, for both directions
    business = models.ForeignKey(Business, on_delete=models.PROTECT, related_name="ratings")
    direction = models.CharField(max_length=20, choices=RatingDirection.choices)
    stars = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    review = models.TextField(blank=True, validators=[MaxLengthValidator(REVIEW_MAX_LENGTH)])
    criteria = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        constraints = [
            models.UniqueConstraint(fields=["order", "direction"], name="unique_rating_per_order_direction"),
            models.CheckConstraint(condition=models.Q(stars__gte=1, stars__lte=5), name="rating_stars_range"),
        ]
        indexes = [
            models.Index(fields=["business", "direction", "-created_at"], name="rating_business_dir_idx"),
            models.Index(fields=["ratee", "direction"], name="rating_ratee_dir_idx"),
        ]

    def __str__(self):
        return f"{self.stars}* {self.direction} rating for order {str(self.order_id)[:8]}"


class ConsumerTrustScore(models.Model):
    """Aggregate of every vendor_to_buyer rating a consumer has received."""

    consumer = models.OneToOneField(User, on_delete=models.CASCADE, related_name="trust_score", primary_key=True)
    overall_score = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0.00"))
    total_ratings = models.PositiveIntegerField(default=0)
    breakdown = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "marketplace"

    def __str__(self):
        return f"Trust score {self.overall_score} for {self.consumer_id}"
