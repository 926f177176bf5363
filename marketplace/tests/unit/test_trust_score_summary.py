from decimal import Decimal

import pytest
from django.test import override_settings

from marketplace.ratings.domain.models.rating import RATING_CRITERIA
from marketplace.ratings.domain.services.trust_score_service import summarize

BUYER_KEYS = RATING_CRITERIA["buyer_to_vendor"]


@pytest.mark.unit
class TestSummarize:
    def test_no_ratings(self):
        summary = summarize([], BUYER_KEYS)

        assert summary["count"] == 0
        assert summary["average"] == Decimal("0.00")
        assert summary["criteria"] == {"product_quality": "0.00", "service": "0.00", "value": "0.00"}

    def test_average_and_count(self):
        rows = [
            (5, {"product_quality": 5, "service": 4, "value": 3}),
            (3, {"product_quality": 3, "service": 4, "value": 5}),
        ]
        summary = summarize(rows, BUYER_KEYS)

        assert summary["count"] == 2
        assert summary["average"] == Decimal("4.00")
        assert summary["criteria"] == {"product_quality": "4.00", "service": "4.00", "value": "4.00"}

    def test_half_up_rounding(self):
        # 14 / 3 = 4.666..
        rows = [(5, {}), (5, {}), (4, {})]
        assert summarize(rows, BUYER_KEYS)["average"] == Decimal("4.67")

        # 4.125 rounds up at the half
        rows = [(5, {})] + [(4, {})] * 7
        assert summarize(rows, BUYER_KEYS)["average"] == Decimal("4.13")

    def test_criteria_averaged_over_ratings_that_carry_them(self):
        rows = [(4, {"product_quality": 2}), (4, {"product_quality": 4, "service": 5})]
        criteria = summarize(rows, BUYER_KEYS)["criteria"]

        assert criteria["product_quality"] == "3.00"
        assert criteria["service"] == "5.00"
        assert criteria["value"] == "0.00"

    @override_settings(MARKETPLACE={"RATING_PRECISION": 1})
    def test_precision_follows_settings(self):
        rows = [(5, {}), (5, {}), (4, {})]
        assert summarize(rows, BUYER_KEYS)["average"] == Decimal("4.7")

    @override_settings(MARKETPLACE={"RATING_PRECISION": 4})
    def test_precision_capped_at_stored_decimal_places(self):
        rows = [(5, {}), (5, {}), (4, {})]
        summary = summarize(rows, BUYER_KEYS)

        assert summary["average"] == Decimal("4.67")
        assert summary["average"].as_tuple().exponent == -2
