import pytest

from marketplace.domain.exceptions import ValidationFailed
from marketplace.ratings.domain.services.rating_service import validate_rating_input

BUYER_CRITERIA = {"product_quality": 5, "service": 4, "value": 3}
VENDOR_CRITERIA = {"payment_timeliness": 5, "communication": 5, "compliance": 4}


@pytest.mark.unit
class TestValidateRatingInput:
    def test_valid_buyer_rating(self):
        validate_rating_input("buyer_to_vendor", 5, "Great bread", BUYER_CRITERIA)

    def test_valid_vendor_rating(self):
        validate_rating_input("vendor_to_buyer", 1, "", VENDOR_CRITERIA)

    @pytest.mark.parametrize("stars", [0, 6, -1, "5", 4.5, True, None])
    def test_stars_out_of_range(self, stars):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("buyer_to_vendor", stars, "", BUYER_CRITERIA)
        assert "stars" in exc_info.value.details

    def test_review_too_long(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("buyer_to_vendor", 4, "x" * 2001, BUYER_CRITERIA)
        assert "review" in exc_info.value.details

    def test_review_at_limit(self):
        validate_rating_input("buyer_to_vendor", 4, "x" * 2000, BUYER_CRITERIA)

    def test_missing_criterion(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("buyer_to_vendor", 4, "", {"product_quality": 5, "service": 4})
        assert exc_info.value.details["criteria"]["missing"] == ["value"]

    def test_criteria_of_other_direction_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("buyer_to_vendor", 4, "", VENDOR_CRITERIA)
        criteria_errors = exc_info.value.details["criteria"]
        assert criteria_errors["missing"] == ["product_quality", "service", "value"]
        assert criteria_errors["unexpected"] == ["communication", "compliance", "payment_timeliness"]

    def test_criterion_value_out_of_range(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("vendor_to_buyer", 4, "", {**VENDOR_CRITERIA, "compliance": 9})
        assert exc_info.value.details["criteria"]["invalid"] == ["compliance"]

    def test_criteria_must_be_a_mapping(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("buyer_to_vendor", 4, "", [5, 4, 3])
        assert "criteria" in exc_info.value.details

    def test_errors_are_collected_together(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_rating_input("buyer_to_vendor", 7, "x" * 2001, {})
        assert set(exc_info.value.details) == {"stars", "review", "criteria"}
        assert exc_info.value.status_code == 400
