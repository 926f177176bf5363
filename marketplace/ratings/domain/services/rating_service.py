"""
RatingEngine - Bidirectional Ratings

Buyers rate the vendor and vendors rate the buyer, once each per delivered
order. The (order, direction) unique constraint is the serialization point for
concurrent submissions; the pre-check only makes the common case fail early.
"""

from typing import Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction

from authentication.permissions import user_has_role
from infrastructure.events import get_event_bus
from marketplace.catalog.domain.models.business import Business
from marketplace.domain.events.rating_events import RatingCreatedEvent
from marketplace.domain.exceptions import (
    BusinessNotFound,
    ConsumerNotFound,
    DuplicateRating,
    Forbidden,
    OrderNotDelivered,
    OrderNotFound,
    ValidationFailed,
)
from marketplace.infra.events.publisher import publish_after_commit
from marketplace.infra.observability.metrics import duplicate_ratings_total, ratings_created_total
from marketplace.ordering.domain.models.order import Order
from marketplace.ordering.domain.order_status import OrderStatus
from marketplace.ratings.domain.models.rating import (
    RATING_CRITERIA,
    REVIEW_MAX_LENGTH,
    ConsumerTrustScore,
    Rating,
    RatingDirection,
)
from marketplace.services.base import BaseService, paginate

from .trust_score_service import TrustScoreAggregator

User = get_user_model()


def _is_score(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def validate_rating_input(direction: str, stars, review: str, criteria) -> None:
    """
    Check stars, review length and that ``criteria`` holds exactly the declared keys.

    Raises:
        ValidationFailed: with per-field messages in ``details``
    """
    errors = {}
    if not _is_score(stars):
        errors["stars"] = "Stars must be an integer between 1 and 5"
    if review and len(review) > REVIEW_MAX_LENGTH:
        errors["review"] = f"Review must be at most {REVIEW_MAX_LENGTH} characters"

    expected = set(RATING_CRITERIA[direction])
    if not isinstance(criteria, dict):
        errors["criteria"] = f"Criteria must be an object with keys {sorted(expected)}"
    else:
        missing = expected - set(criteria)
        unexpected = set(criteria) - expected
        invalid = sorted(key for key in expected & set(criteria) if not _is_score(criteria[key]))
        if missing or unexpected or invalid:
            errors["criteria"] = {
                "missing": sorted(missing),
                "unexpected": sorted(unexpected),
                "invalid": invalid,
            }

    if errors:
        raise ValidationFailed("Invalid rating", details=errors)


class RatingEngine(BaseService):
    """
    Service for creating and reading ratings.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS, aggregator: TrustScoreAggregator = None, event_bus=None):
        super().__init__(using=using)
        self.aggregator = aggregator or TrustScoreAggregator(using=using)
        self.event_bus = event_bus or get_event_bus()

    def default_direction(self, rater) -> str:
        """Vendors rate buyers; everyone else rates the vendor."""
        if user_has_role(rater, User.ROLE_SME):
            return RatingDirection.VENDOR_TO_BUYER.value
        return RatingDirection.BUYER_TO_VENDOR.value

    @BaseService.log_performance
    def create_rating(
        self,
        order_id,
        rater,
        stars: int,
        criteria: Dict,
        direction: Optional[str] = None,
        review: str = "",
    ) -> Rating:
        """
        Record ``rater``'s rating for a delivered order and refresh the ratee's aggregate.

        Raises:
            OrderNotFound: no such order
            OrderNotDelivered: order status is not ``delivered``
            Forbidden: rater is not the party this direction expects
            ValidationFailed: bad direction, stars, review or criteria
            DuplicateRating: this order already has a rating in this direction
        """
        direction = direction or self.default_direction(rater)
        if direction not in RATING_CRITERIA:
            raise ValidationFailed(
                f"Unknown rating direction '{direction}'", details={"allowed": list(RatingDirection.values)}
            )

        try:
            order = Order.objects.using(self.using).select_related("business").get(id=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound(order_id)

        if order.status != OrderStatus.DELIVERED:
            raise OrderNotDelivered(details={"order_id": str(order.id), "current_status": order.status})

        if direction == RatingDirection.BUYER_TO_VENDOR:
            expected_rater_id, ratee_id = order.buyer_id, order.business.owner_id
        else:
            expected_rater_id, ratee_id = order.business.owner_id, order.buyer_id
        if rater.id != expected_rater_id:
            raise Forbidden(f"You cannot submit a {direction} rating for this order")

        review = review or ""
        validate_rating_input(direction, stars, review, criteria)

        if Rating.objects.using(self.using).filter(order=order, direction=direction).exists():
            duplicate_ratings_total.labels(direction=direction).inc()
            raise DuplicateRating(order.id, direction)

        with transaction.atomic(using=self.using):
            try:
                with transaction.atomic(using=self.using):
                    rating = Rating.objects.using(self.using).create(
                        order=order,
                        rater=rater,
                        ratee_id=ratee_id,
                        business=order.business,
                        direction=direction,
                        stars=stars,
                        review=review,
                        criteria={key: criteria[key] for key in RATING_CRITERIA[direction]},
                    )
            except IntegrityError:
                duplicate_ratings_total.labels(direction=direction).inc()
                raise DuplicateRating(order.id, direction)

            if direction == RatingDirection.BUYER_TO_VENDOR:
                self.aggregator.recompute_business(order.business_id)
            else:
                self.aggregator.recompute_consumer(ratee_id)

            publish_after_commit(
                self.event_bus,
                RatingCreatedEvent(
                    rating_id=str(rating.id),
                    order_id=str(order.id),
                    direction=direction,
                    rater_id=str(rater.id),
                    ratee_id=str(ratee_id),
                    stars=stars,
                ),
                using=self.using,
            )

        ratings_created_total.labels(direction=direction).inc()
        self.logger.info(f"Rating {rating.id} ({direction}, {stars} stars) created for order {order.id}")
        return rating

    @BaseService.log_performance
    def list_business_ratings(
        self,
        business_id,
        min_stars: Optional[int] = None,
        max_stars: Optional[int] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict:
        """
        List buyer_to_vendor ratings for a vendor, newest first, with its aggregate.

        Returns:
            ``{"business", "results", "count", "page", "page_size", "num_pages"}``
        """
        try:
            business = Business.objects.using(self.using).get(id=business_id)
        except (Business.DoesNotExist, DjangoValidationError):
            raise BusinessNotFound(business_id)

        errors = {}
        for name, value in (("min_stars", min_stars), ("max_stars", max_stars)):
            if value is not None and not _is_score(value):
                errors[name] = "Must be an integer between 1 and 5"
        if not errors and min_stars is not None and max_stars is not None and min_stars > max_stars:
            errors["min_stars"] = "Must not exceed max_stars"
        if errors:
            raise ValidationFailed("Invalid rating filters", details=errors)

        queryset = (
            Rating.objects.using(self.using)
            .filter(business=business, direction=RatingDirection.BUYER_TO_VENDOR)
            .select_related("rater")
            .order_by("-created_at", "-id")
        )
        if min_stars is not None:
            queryset = queryset.filter(stars__gte=min_stars)
        if max_stars is not None:
            queryset = queryset.filter(stars__lte=max_stars)

        result = paginate(queryset, page, page_size)
        result["business"] = business
        return result

    @BaseService.log_performance
    def get_consumer_trust_score(self, consumer_id) -> ConsumerTrustScore:
        """
        Return a consumer's trust score; an unsaved zero score if never rated.

        Raises:
            ConsumerNotFound: no such user
        """
        try:
            consumer = User.objects.using(self.using).get(id=consumer_id)
        except (User.DoesNotExist, DjangoValidationError):
            raise ConsumerNotFound(consumer_id)

        score = ConsumerTrustScore.objects.using(self.using).filter(consumer=consumer).first()
        return score or ConsumerTrustScore(consumer=consumer)
