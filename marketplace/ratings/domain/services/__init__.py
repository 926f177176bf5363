from .rating_service import RatingEngine
from .trust_score_service import TrustScoreAggregator


__all__ = [
    "RatingEngine",
    "TrustScoreAggregator",
]
