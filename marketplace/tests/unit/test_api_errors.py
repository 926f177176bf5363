import pytest
from django.db import OperationalError
from django.http import Http404
from rest_framework import exceptions

from marketplace.domain.exceptions import (
    DuplicateRating,
    InsufficientStock,
    InvalidTransition,
    OrderNotFound,
)
from utils.api_errors import error_body, marketplace_exception_handler


def _handle(exc):
    return marketplace_exception_handler(exc, {"view": None})


@pytest.mark.unit
class TestErrorEnvelope:
    def test_error_body_omits_empty_details(self):
        body = error_body("NOT_FOUND", "Missing")
        assert set(body["error"]) == {"code", "message", "timestamp"}

    def test_domain_error(self):
        response = _handle(InvalidTransition("pending", "delivered"))

        assert response.status_code == 400
        error = response.data["error"]
        assert error["code"] == "INVALID_TRANSITION"
        assert error["details"] == {"current_status": "pending", "requested_status": "delivered"}

    @pytest.mark.parametrize(
        "exc,status_code,code",
        [
            (OrderNotFound("abc"), 404, "ORDER_NOT_FOUND"),
            (InsufficientStock(product_id="p1", requested=3, available=1), 409, "INSUFFICIENT_STOCK"),
            (DuplicateRating("abc", "buyer_to_vendor"), 409, "DUPLICATE_RATING"),
        ],
    )
    def test_domain_error_status_codes(self, exc, status_code, code):
        response = _handle(exc)
        assert response.status_code == status_code
        assert response.data["error"]["code"] == code

    def test_drf_validation_error_keeps_field_details(self):
        response = _handle(exceptions.ValidationError({"stars": ["This field is required."]}))

        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"
        assert response.data["error"]["details"] == {"stars": ["This field is required."]}

    def test_not_authenticated(self):
        response = _handle(exceptions.NotAuthenticated())

        assert response.status_code == 401
        assert response.data["error"]["code"] == "AUTHENTICATION_ERROR"

    def test_permission_denied(self):
        response = _handle(exceptions.PermissionDenied("Only business accounts can access this resource."))

        assert response.status_code == 403
        assert response.data["error"]["code"] == "AUTHORIZATION_ERROR"
        assert response.data["error"]["message"] == "Only business accounts can access this resource."

    def test_http404(self):
        response = _handle(Http404())

        assert response.status_code == 404
        assert response.data["error"]["code"] == "NOT_FOUND"

    def test_database_error(self):
        response = _handle(OperationalError("database is locked"))

        assert response.status_code == 500
        assert response.data["error"]["code"] == "INTERNAL_ERROR"
        assert "database is locked" not in response.data["error"]["message"]

    def test_unexpected_exception(self):
        response = _handle(RuntimeError("secret internals"))

        assert response.status_code == 500
        assert response.data["error"]["message"] == "An unexpected error occurred"
