from .rating_serializers import (
    BusinessRatingSummarySerializer,
    BusinessRatingsResponseSerializer,
    ConsumerTrustScoreSerializer,
    CreateRatingRequestSerializer,
    RatingSerializer,
)


__all__ = [
    "BusinessRatingSummarySerializer",
    "BusinessRatingsResponseSerializer",
    "ConsumerTrustScoreSerializer",
    "CreateRatingRequestSerializer",
    "RatingSerializer",
]
