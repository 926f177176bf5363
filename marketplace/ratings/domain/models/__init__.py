from .rating import RATING_CRITERIA, ConsumerTrustScore, Rating, RatingDirection


__all__ = [
    "RATING_CRITERIA",
    "ConsumerTrustScore",
    "Rating",
    "RatingDirection",
]
