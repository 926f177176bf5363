from rest_framework import serializers

from marketplace.catalog.domain.models.business import Business
from marketplace.ratings.domain.models.rating import REVIEW_MAX_LENGTH, ConsumerTrustScore, Rating, RatingDirection


class CreateRatingRequestSerializer(serializers.Serializer):
    order_id = serializers.UUIDField(help_text="Delivered order being rated")
    direction = serializers.ChoiceField(
        choices=RatingDirection.choices,
        required=False,
        help_text="Defaults to vendor_to_buyer for business accounts, buyer_to_vendor otherwise",
    )
    stars = serializers.IntegerField(help_text="Overall score, 1-5")
    review = serializers.CharField(max_length=REVIEW_MAX_LENGTH, required=False, allow_blank=True, default="")
    criteria = serializers.DictField(
        child=serializers.IntegerField(),
        help_text=(
            "buyer_to_vendor: product_quality, service, value; "
            "vendor_to_buyer: payment_timeliness, communication, compliance (each 1-5)"
        ),
    )


class RatingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Rating
        fields = [
            "id",
            "order",
            "rater",
            "ratee",
            "business",
            "direction",
            "stars",
            "review",
            "criteria",
            "created_at",
        ]
        read_only_fields = fields


class BusinessRatingSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Business
        fields = ["id", "name", "rating", "total_ratings", "criteria_breakdown"]
        read_only_fields = fields


class BusinessRatingsResponseSerializer(serializers.Serializer):
    business = BusinessRatingSummarySerializer()
    results = RatingSerializer(many=True)
    count = serializers.IntegerField()
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    num_pages = serializers.IntegerField()


class ConsumerTrustScoreSerializer(serializers.ModelSerializer):
    consumer_id = serializers.UUIDField(source="consumer.id", read_only=True)

    class Meta:
        model = ConsumerTrustScore
        fields = ["consumer_id", "overall_score", "total_ratings", "breakdown", "updated_at"]
        read_only_fields = fields
