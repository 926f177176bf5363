from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from django.db import connection

from marketplace.catalog.domain.services import InventoryLedger
from marketplace.domain.exceptions import DuplicateRating, InsufficientStock, MarketplaceError
from marketplace.models import Business, Order, Product, Rating
from marketplace.ordering.domain.order_status import OrderStatus
from marketplace.ordering.domain.services import OrderOrchestrator, OrderStateMachine
from marketplace.ratings.domain.services import RatingEngine
from marketplace.tests.factories import BusinessFactory, ProductFactory, UserFactory, make_order

WORKERS = 8


def run_concurrently(fn, args_list):
    """Run ``fn`` once per args tuple on separate threads; return results or raised exceptions."""

    def call(args):
        try:
            return fn(*args)
        except MarketplaceError as e:
            return e
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        return list(pool.map(call, args_list))


@pytest.mark.concurrency
@pytest.mark.django_db(transaction=True)
class TestConcurrentStock:
    def test_reservations_never_oversell(self):
        product = ProductFactory(quantity=5)
        ledger = InventoryLedger()

        outcomes = run_concurrently(ledger.reserve, [(product.id, 1)] * 12)

        failures = [o for o in outcomes if isinstance(o, InsufficientStock)]
        assert len(outcomes) - len(failures) == 5
        assert len(failures) == 7
        assert Product.objects.get(id=product.id).quantity == 0

    def test_concurrent_checkouts_for_last_units(self):
        product = ProductFactory(quantity=3, price=Decimal("2.00"))
        buyers = [UserFactory() for _ in range(6)]
        orchestrator = OrderOrchestrator()
        cart = [{"product_id": str(product.id), "quantity": 1}]

        results = run_concurrently(orchestrator.create_orders, [(buyer, cart) for buyer in buyers])

        placed = sum(len(r.orders) for r in results)
        assert placed == 3
        assert Order.objects.count() == 3
        assert Product.objects.get(id=product.id).quantity == 0

    def test_racing_cancellations_release_once(self):
        business = BusinessFactory()
        order = make_order(business=business, lines=((Decimal("1.00"), 4),))
        item = order.items.get()
        stock_before = Product.objects.get(id=item.product_id).quantity
        machine = OrderStateMachine()

        outcomes = run_concurrently(
            machine.transition, [(order.id, business.owner, "cancelled")] * 4
        )

        assert sum(1 for o in outcomes if isinstance(o, Order)) == 1
        assert Product.objects.get(id=item.product_id).quantity == stock_before + 4
        assert Order.objects.get(id=order.id).status == OrderStatus.CANCELLED


@pytest.mark.concurrency
@pytest.mark.django_db(transaction=True)
class TestConcurrentRatings:
    def test_duplicate_submissions_store_one_rating(self):
        order = make_order(status=OrderStatus.DELIVERED)
        engine = RatingEngine()
        criteria = {"product_quality": 5, "service": 5, "value": 5}

        outcomes = run_concurrently(
            lambda stars: engine.create_rating(order.id, order.buyer, stars=stars, criteria=criteria),
            [(5,)] * 4,
        )

        assert sum(1 for o in outcomes if isinstance(o, Rating)) == 1
        assert all(isinstance(o, (Rating, DuplicateRating)) for o in outcomes)
        assert Rating.objects.filter(order=order).count() == 1
        assert Business.objects.get(id=order.business_id).total_ratings == 1

    def test_ratings_for_same_vendor_all_counted(self):
        business = BusinessFactory()
        orders = [make_order(business=business, status=OrderStatus.DELIVERED) for _ in range(5)]
        engine = RatingEngine()
        criteria = {"product_quality": 4, "service": 4, "value": 4}

        run_concurrently(
            lambda order, stars: engine.create_rating(order.id, order.buyer, stars=stars, criteria=criteria),
            [(order, stars) for order, stars in zip(orders, (5, 4, 4, 3, 5))],
        )

        business.refresh_from_db()
        assert business.total_ratings == 5
        assert business.rating == Decimal("4.20")
