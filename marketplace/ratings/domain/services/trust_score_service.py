"""
TrustScoreAggregator - Reputation Aggregates

Vendor and consumer aggregates are always rebuilt from the full rating ledger,
never patched incrementally. The ratee's aggregate row is locked first so two
ratings committing for the same ratee recompute one after the other, and the
second one sees the first.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Tuple

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, transaction

from marketplace.catalog.domain.models.business import Business
from marketplace.infra.observability.metrics import trust_score_recompute_duration
from marketplace.ratings.domain.models.rating import RATING_CRITERIA, ConsumerTrustScore, Rating, RatingDirection
from marketplace.services.base import BaseService


def _quantum() -> Decimal:
    precision = getattr(settings, "MARKETPLACE", {}).get("RATING_PRECISION", 2)
    # Never finer than the stored aggregate columns
    precision = min(precision, Business._meta.get_field("rating").decimal_places)
    return Decimal(1).scaleb(-precision)


def _mean(total: int, count: int) -> Decimal:
    if count == 0:
        return Decimal("0").quantize(_quantum())
    return (Decimal(total) / Decimal(count)).quantize(_quantum(), rounding=ROUND_HALF_UP)


def summarize(rows: Iterable[Tuple[int, dict]], criteria_keys: Tuple[str, ...]) -> Dict:
    """
    Compute ``{"count", "average", "criteria"}`` from ``(stars, criteria)`` rows.

    Each criterion is averaged over the ratings that carry it.
    """
    count = 0
    stars_total = 0
    criteria_totals = {key: 0 for key in criteria_keys}
    criteria_counts = {key: 0 for key in criteria_keys}

    for stars, criteria in rows:
        count += 1
        stars_total += stars
        for key in criteria_keys:
            value = (criteria or {}).get(key)
            if value is not None:
                criteria_totals[key] += int(value)
                criteria_counts[key] += 1

    return {
        "count": count,
        "average": _mean(stars_total, count),
        "criteria": {key: str(_mean(criteria_totals[key], criteria_counts[key])) for key in criteria_keys},
    }


class TrustScoreAggregator(BaseService):
    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        super().__init__(using=using)

    def _ratings(self, direction: str):
        return Rating.objects.using(self.using).filter(direction=direction)

    @BaseService.log_performance
    def recompute_business(self, business_id) -> Business:
        """Rebuild a vendor's rating, total_ratings and criteria_breakdown from buyer_to_vendor ratings."""
        direction = RatingDirection.BUYER_TO_VENDOR.value
        with trust_score_recompute_duration.labels(target="business").time(), transaction.atomic(using=self.using):
            business = Business.objects.using(self.using).select_for_update().get(id=business_id)
            summary = summarize(
                self._ratings(direction).filter(business_id=business_id).values_list("stars", "criteria"),
                RATING_CRITERIA[direction],
            )

            business.rating = summary["average"]
            business.total_ratings = summary["count"]
            business.criteria_breakdown = summary["criteria"]
            business.save(
                using=self.using, update_fields=["rating", "total_ratings", "criteria_breakdown", "updated_at"]
            )

        self.logger.info(f"Business {business_id} rating -> {business.rating} over {business.total_ratings} ratings")
        return business

    @BaseService.log_performance
    def recompute_consumer(self, consumer_id) -> ConsumerTrustScore:
        """Rebuild a consumer's trust score from vendor_to_buyer ratings."""
        direction = RatingDirection.VENDOR_TO_BUYER.value
        with trust_score_recompute_duration.labels(target="consumer").time(), transaction.atomic(using=self.using):
            ConsumerTrustScore.objects.using(self.using).get_or_create(consumer_id=consumer_id)
            score = ConsumerTrustScore.objects.using(self.using).select_for_update().get(consumer_id=consumer_id)
            summary = summarize(
                self._ratings(direction).filter(ratee_id=consumer_id).values_list("stars", "criteria"),
                RATING_CRITERIA[direction],
            )

            score.overall_score = summary["average"]
            score.total_ratings = summary["count"]
            score.breakdown = summary["criteria"]
            score.save(using=self.using, update_fields=["overall_score", "total_ratings", "breakdown", "updated_at"])

        self.logger.info(f"Consumer {consumer_id} trust score -> {score.overall_score} over {score.total_ratings}")
        return score
