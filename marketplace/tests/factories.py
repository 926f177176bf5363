import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from faker import Faker

from marketplace.models import Business, Order, OrderItem, Product, Rating
from marketplace.ordering.domain.order_status import DeliveryMethod, OrderStatus, PaymentStatus
from marketplace.ratings.domain.models.rating import RatingDirection

User = get_user_model()
fake = Faker()  # Instantiate Faker once


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    id = factory.LazyFunction(uuid.uuid4)
    username = factory.Sequence(lambda n: f"consumer_{n}")
    email = factory.Sequence(lambda n: f"consumer_{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True
    role = User.ROLE_CONSUMER


class VendorFactory(UserFactory):
    role = User.ROLE_SME
    username = factory.Sequence(lambda n: f"vendor_{n}")
    email = factory.Sequence(lambda n: f"vendor_{n}@example.com")


class AdminFactory(UserFactory):
    role = User.ROLE_ADMIN
    is_superuser = True
    is_staff = True
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")


class BusinessFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Business

    id = factory.LazyFunction(uuid.uuid4)
    owner = factory.SubFactory(VendorFactory)
    name = factory.Faker("company")
    description = factory.Faker("sentence", nb_words=12)
    business_type = "shop"
    contact_email = factory.Faker("company_email")


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    business = factory.SubFactory(BusinessFactory)
    name = factory.Sequence(lambda n: f"Product {n}")
    description = factory.Faker("paragraph", nb_sentences=3)
    category = factory.Iterator(["produce", "bakery", "crafts", "household"])
    price = factory.LazyFunction(lambda: Decimal(f"{fake.random_int(min=1, max=200)}.00"))
    quantity = 10


class OrderFactory(factory.django.DjangoModelFactory):
    """Order with no items; use ``make_order`` for a consistent order with lines."""

    class Meta:
        model = Order

    id = factory.LazyFunction(uuid.uuid4)
    buyer = factory.SubFactory(UserFactory)
    business = factory.SubFactory(BusinessFactory)
    status = OrderStatus.PENDING
    payment_status = PaymentStatus.PENDING
    delivery_method = DeliveryMethod.PICKUP
    total_amount = Decimal("0.00")
    contact = factory.LazyFunction(lambda: {"phone": fake.phone_number()})


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory, business=factory.SelfAttribute("..order.business"))
    quantity = 1
    product_name = factory.LazyAttribute(lambda o: o.product.name)
    price_at_purchase = factory.LazyAttribute(lambda o: o.product.price)


def make_order(buyer=None, business=None, lines=((Decimal("10.00"), 2),), status=OrderStatus.PENDING):
    """
    Create an order plus items whose total matches its lines.

    ``lines`` is a sequence of ``(price, quantity)``; one product per line is
    created under ``business``. Stock is not touched.
    """
    business = business or BusinessFactory()
    order = OrderFactory(buyer=buyer or UserFactory(), business=business, status=status)
    total = Decimal("0.00")
    for price, quantity in lines:
        product = ProductFactory(business=business, price=price)
        OrderItemFactory(order=order, product=product, quantity=quantity)
        total += price * quantity
    order.total_amount = total
    order.save(update_fields=["total_amount"])
    return order


class RatingFactory(factory.django.DjangoModelFactory):
    """buyer_to_vendor rating on a delivered order."""

    class Meta:
        model = Rating

    id = factory.LazyFunction(uuid.uuid4)
    order = factory.SubFactory(OrderFactory, status=OrderStatus.DELIVERED)
    direction = RatingDirection.BUYER_TO_VENDOR
    rater = factory.SelfAttribute("order.buyer")
    ratee = factory.SelfAttribute("order.business.owner")
    business = factory.SelfAttribute("order.business")
    stars = 4
    review = factory.Faker("sentence", nb_words=10)
    criteria = factory.LazyFunction(lambda: {"product_quality": 4, "service": 4, "value": 4})
