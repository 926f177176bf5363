"""
OrderOrchestrator - Multi-vendor Checkout

Splits a buyer's cart into one order per vendor. Each vendor group is placed in
its own transaction: the order, its item snapshots and the stock reservations
commit together or not at all. Groups are independent of each other, so a cart
can partially succeed; every dropped group is reported back and the buyer has
to re-initiate it.
"""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import Q

from authentication.permissions import is_admin, user_has_role
from infrastructure.events import get_event_bus
from marketplace.catalog.domain.models.catalog import Product
from marketplace.catalog.domain.services.inventory_service import InventoryLedger
from marketplace.domain.events.order_events import OrderPlacedEvent
from marketplace.domain.exceptions import (
    EmptyCart,
    Forbidden,
    InsufficientStock,
    MarketplaceError,
    OrderNotFound,
    ProductNotFound,
    StorageError,
    ValidationFailed,
)
from marketplace.infra.events.publisher import publish_after_commit
from marketplace.infra.observability.metrics import (
    checkout_duration,
    order_value,
    orders_placed_total,
    vendor_group_failures_total,
)
from marketplace.infra.observability.tracing import add_span_attributes, get_tracer
from marketplace.ordering.domain.models.order import Order, OrderItem
from marketplace.ordering.domain.order_status import DeliveryMethod, OrderStatus, PaymentStatus, parse_status
from marketplace.services.base import BaseService, paginate

tracer = get_tracer(__name__)


@dataclass
class VendorGroupFailure:
    """A vendor group that could not be placed."""

    business_id: str
    code: str
    message: str
    details: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"business_id": self.business_id, "code": self.code, "message": self.message, "details": self.details}


@dataclass
class CheckoutResult:
    orders: List[Order] = field(default_factory=list)
    failures: List[VendorGroupFailure] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return not self.orders and bool(self.failures)


def _parse_uuid(value, field_name: str) -> uuid.UUID:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationFailed(f"'{value}' is not a valid {field_name}", details={field_name: str(value)})


class OrderOrchestrator(BaseService):
    """
    Service for order creation and retrieval.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS, inventory: Optional[InventoryLedger] = None, event_bus=None):
        """
        Initialize OrderOrchestrator.

        Args:
            using: Database alias for every read, write and transaction
            inventory: Stock ledger bound to the same alias (injected)
            event_bus: Event bus for publishing domain events (injected)
        """
        super().__init__(using=using)
        self.inventory = inventory or InventoryLedger(using=using)
        self.event_bus = event_bus or get_event_bus()

    @BaseService.log_performance
    def create_orders(
        self,
        buyer,
        cart: List[Dict],
        delivery_method: str = DeliveryMethod.PICKUP,
        contact: Optional[Dict] = None,
    ) -> CheckoutResult:
        """
        Create one pending order per vendor represented in ``cart``.

        Args:
            buyer: The purchasing user
            cart: Lines of ``{"product_id": ..., "quantity": int}``
            delivery_method: ``pickup`` or ``delivery``
            contact: Delivery address, phone and notes copied onto every order

        Returns:
            CheckoutResult with the created orders and the dropped vendor groups

        Raises:
            EmptyCart: cart has no lines
            ValidationFailed: a line quantity is not a positive integer, or an
                unknown delivery method
            ProductNotFound: a cart line references a product that does not exist
        """
        with checkout_duration.time(), tracer.start_as_current_span("checkout") as span:
            add_span_attributes(span, buyer_id=buyer.id)

            lines = self._normalize_cart(cart)
            if delivery_method not in DeliveryMethod.values:
                raise ValidationFailed(
                    f"Unknown delivery method '{delivery_method}'",
                    details={"allowed": list(DeliveryMethod.values)},
                )
            contact = dict(contact or {})

            products = self._load_products(list(lines))

            # Group by owning vendor, keeping the order businesses first appear in the cart
            groups: Dict[uuid.UUID, List] = {}
            for product_id, quantity in lines.items():
                product = products[product_id]
                groups.setdefault(product.business_id, []).append((product, quantity))

            result = CheckoutResult()
            for business_id, group in groups.items():
                with tracer.start_as_current_span("checkout.vendor_group") as group_span:
                    add_span_attributes(group_span, business_id=business_id, lines=len(group))
                    try:
                        failure = self._precheck_stock(business_id, group)
                        if failure is None:
                            with transaction.atomic(using=self.using):
                                order = self._place_group(buyer, group, delivery_method, contact)
                    except InsufficientStock as e:
                        failure = self._failure_from_reservation(business_id, group, e)
                    except (MarketplaceError, DatabaseError) as e:
                        # Earlier vendors already committed; they must still be reported
                        if not result.orders:
                            raise
                        failure = self._failure_from_error(business_id, e)
                    else:
                        if failure is None:
                            result.orders.append(order)
                            continue

                    self.logger.warning(f"Vendor group {business_id} dropped for buyer {buyer.id}: {failure.message}")
                    vendor_group_failures_total.labels(code=failure.code).inc()
                    result.failures.append(failure)

            orders_placed_total.labels(status="success").inc(len(result.orders))
            if result.failures:
                orders_placed_total.labels(status="failure").inc(len(result.failures))

            add_span_attributes(span, orders=len(result.orders), failures=len(result.failures))
            self.logger.info(
                f"Checkout for buyer {buyer.id}: {len(result.orders)} orders created, "
                f"{len(result.failures)} vendor groups failed"
            )
            return result

    def _normalize_cart(self, cart) -> Dict[uuid.UUID, int]:
        """Validate cart lines and merge duplicates, keeping first-seen order."""
        if not cart:
            raise EmptyCart()

        lines: Dict[uuid.UUID, int] = {}
        for index, line in enumerate(cart):
            product_id = _parse_uuid(line.get("product_id"), "product_id")
            quantity = line.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationFailed(
                    "Quantity must be a positive integer",
                    details={"line": index, "product_id": str(product_id), "quantity": quantity},
                )
            lines[product_id] = lines.get(product_id, 0) + quantity
        return lines

    def _load_products(self, product_ids) -> Dict[uuid.UUID, Product]:
        products = Product.objects.using(self.using).select_related("business").in_bulk(product_ids)
        for product_id in product_ids:
            if product_id not in products:
                raise ProductNotFound(product_id)
        return products

    def _precheck_stock(self, business_id, group) -> Optional[VendorGroupFailure]:
        """Fast read-only availability check; the reservation re-validates under write."""
        short = []
        for product, quantity in group:
            available = self.inventory.get_available(product.id)
            if quantity > available:
                short.append(
                    {
                        "product_id": str(product.id),
                        "product_name": product.name,
                        "requested": quantity,
                        "available": available,
                    }
                )
        if not short:
            return None
        return VendorGroupFailure(
            business_id=str(business_id),
            code=InsufficientStock.default_code,
            message=f"Insufficient stock for {len(short)} product(s)",
            details=short,
        )

    def _failure_from_reservation(self, business_id, group, error: InsufficientStock) -> VendorGroupFailure:
        names = {product.id: product.name for product, _ in group}
        detail = dict(error.details or {})
        detail["product_name"] = names.get(_parse_uuid(error.product_id, "product_id"), "")
        return VendorGroupFailure(
            business_id=str(business_id),
            code=error.code,
            message=error.message,
            details=[detail],
        )

    def _failure_from_error(self, business_id, error) -> VendorGroupFailure:
        if not isinstance(error, MarketplaceError):
            error = StorageError()
        return VendorGroupFailure(
            business_id=str(business_id),
            code=error.code,
            message=error.message,
            details=[error.details] if error.details else [],
        )

    def _place_group(self, buyer, group, delivery_method: str, contact: Dict) -> Order:
        """Persist one vendor's order and reserve its stock. Caller owns the transaction."""
        business = group[0][0].business
        total = sum((product.price * quantity for product, quantity in group), Decimal("0.00"))

        order = Order.objects.using(self.using).create(
            buyer=buyer,
            business=business,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            delivery_method=delivery_method,
            total_amount=total,
            contact=contact,
        )
        OrderItem.objects.using(self.using).bulk_create(
            [
                OrderItem(
                    order=order,
                    product=product,
                    product_name=product.name,  # Snapshot name
                    price_at_purchase=product.price,  # Snapshot price
                    quantity=quantity,
                )
                for product, quantity in group
            ]
        )

        for product, quantity in group:
            self.inventory.reserve(product.id, quantity)

        publish_after_commit(
            self.event_bus,
            OrderPlacedEvent(
                order_id=str(order.id),
                buyer_id=str(buyer.id),
                business_id=str(business.id),
                total_amount=order.total_amount,
                item_count=len(group),
            ),
            using=self.using,
        )
        order_value.observe(float(order.total_amount))

        self.logger.info(f"Created order {order.id} for buyer {buyer.id}: {len(group)} items, total {total}")
        return order

    @BaseService.log_performance
    def get_order(self, order_id, user) -> Order:
        """
        Get order details for its buyer, the owning vendor or an admin.

        Raises:
            OrderNotFound: no such order
            Forbidden: caller is not a party to the order
        """
        try:
            order = (
                Order.objects.using(self.using)
                .select_related("buyer", "business__owner")
                .prefetch_related("items", "status_history")
                .get(id=order_id)
            )
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound(order_id)

        if not (order.buyer_id == user.id or order.business.owner_id == user.id or is_admin(user)):
            raise Forbidden("You are not a party to this order")

        return order

    @BaseService.log_performance
    def list_orders(self, user, status: Optional[str] = None, page: int = 1, page_size: Optional[int] = None) -> Dict:
        """
        List the caller's orders, newest first.

        Consumers see orders they placed. SMEs see orders received by the
        businesses they own plus any they placed themselves. Admins see every order.

        Returns:
            ``{"results", "count", "page", "page_size", "num_pages"}``
        """
        queryset = Order.objects.using(self.using).select_related("buyer", "business").prefetch_related("items")
        if not is_admin(user):
            if user_has_role(user, user.ROLE_SME):
                queryset = queryset.filter(Q(business__owner=user) | Q(buyer=user))
            else:
                queryset = queryset.filter(buyer=user)

        if status:
            try:
                queryset = queryset.filter(status=parse_status(status))
            except ValueError:
                raise ValidationFailed(
                    f"Unknown order status '{status}'", details={"allowed": list(OrderStatus.values)}
                )

        queryset = queryset.order_by("-created_at", "-id")

        result = paginate(queryset, page, page_size)
        self.logger.info(f"Listed orders for user {user.id}: {result['count']} total, page {result['page']}")
        return result
