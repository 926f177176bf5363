import uuid
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.events import get_event_bus
from marketplace.models import Business, ConsumerTrustScore, Rating
from marketplace.ordering.domain.order_status import OrderStatus
from marketplace.tests.factories import AdminFactory, BusinessFactory, RatingFactory, UserFactory, make_order

BUYER_CRITERIA = {"product_quality": 5, "service": 4, "value": 4}
VENDOR_CRITERIA = {"payment_timeliness": 5, "communication": 4, "compliance": 3}


class CreateRatingViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("marketplace:rating-list")
        self.business = BusinessFactory()
        self.vendor = self.business.owner
        self.buyer = UserFactory()
        self.order = make_order(buyer=self.buyer, business=self.business, status=OrderStatus.DELIVERED)
        get_event_bus().clear()

    def _rate(self, user, **data):
        self.client.force_authenticate(user=user)
        body = {"order_id": str(self.order.id), "stars": 5, "criteria": BUYER_CRITERIA}
        body.update(data)
        return self.client.post(self.url, body, format="json")

    def test_buyer_rates_vendor(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self._rate(self.buyer, review="Fresh and friendly")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["direction"], "buyer_to_vendor")
        self.assertEqual(response.data["stars"], 5)

        business = Business.objects.get(id=self.business.id)
        self.assertEqual(business.rating, Decimal("5.00"))
        self.assertEqual(business.total_ratings, 1)
        self.assertEqual(len(get_event_bus().events_of_type("rating.created")), 1)

    def test_vendor_rates_buyer_with_default_direction(self):
        response = self._rate(self.vendor, stars=4, criteria=VENDOR_CRITERIA)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["direction"], "vendor_to_buyer")
        self.assertEqual(ConsumerTrustScore.objects.get(consumer=self.buyer).overall_score, Decimal("4.00"))

    def test_duplicate_rating(self):
        self._rate(self.buyer)

        response = self._rate(self.buyer, stars=1)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "DUPLICATE_RATING")
        self.assertEqual(Rating.objects.count(), 1)

    def test_order_not_delivered(self):
        self.order.status = OrderStatus.OUT_FOR_DELIVERY
        self.order.save(update_fields=["status"])

        response = self._rate(self.buyer)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "ORDER_NOT_DELIVERED")

    def test_wrong_rater(self):
        response = self._rate(UserFactory())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Rating.objects.exists())

    def test_unknown_order(self):
        response = self._rate(self.buyer, order_id=str(uuid.uuid4()))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "ORDER_NOT_FOUND")

    def test_missing_criteria_key(self):
        response = self._rate(self.buyer, criteria={"product_quality": 5, "service": 4})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["details"]["criteria"]["missing"], ["value"])

    def test_stars_out_of_range(self):
        response = self._rate(self.buyer, stars=6)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_requires_authentication(self):
        response = self.client.post(self.url, {"order_id": str(self.order.id)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class BusinessRatingsViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.business = BusinessFactory()
        self.url = reverse("marketplace:business-ratings", kwargs={"business_id": self.business.id})
        for stars in (2, 4, 5):
            order = make_order(business=self.business, status=OrderStatus.DELIVERED)
            RatingFactory(order=order, stars=stars)

    def test_public_listing(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 3)
        self.assertEqual(response.data["business"]["id"], str(self.business.id))

    def test_star_filter(self):
        response = self.client.get(self.url, {"min_stars": 4})

        self.assertEqual(response.data["count"], 2)
        self.assertTrue(all(r["stars"] >= 4 for r in response.data["results"]))

    def test_pagination(self):
        response = self.client.get(self.url, {"page": 2, "page_size": 2})

        self.assertEqual(response.data["page"], 2)
        self.assertEqual(response.data["num_pages"], 2)
        self.assertEqual(len(response.data["results"]), 1)

    def test_invalid_filter(self):
        response = self.client.get(self.url, {"min_stars": 9})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_business(self):
        response = self.client.get(reverse("marketplace:business-ratings", kwargs={"business_id": uuid.uuid4()}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "BUSINESS_NOT_FOUND")


class ConsumerTrustScoreViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.consumer = UserFactory()
        self.url = reverse("marketplace:consumer-trust-score", kwargs={"consumer_id": self.consumer.id})

    def test_vendor_can_view(self):
        self.client.force_authenticate(user=BusinessFactory().owner)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["consumer_id"], str(self.consumer.id))
        self.assertEqual(response.data["overall_score"], "0.00")
        self.assertEqual(response.data["total_ratings"], 0)

    def test_admin_can_view(self):
        self.client.force_authenticate(user=AdminFactory())

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_consumer_cannot_view(self):
        self.client.force_authenticate(user=UserFactory())

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["code"], "AUTHORIZATION_ERROR")

    def test_unknown_consumer(self):
        self.client.force_authenticate(user=AdminFactory())

        response = self.client.get(
            reverse("marketplace:consumer-trust-score", kwargs={"consumer_id": uuid.uuid4()})
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
