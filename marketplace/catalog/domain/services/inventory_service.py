"""
InventoryLedger - Stock Management

Owns every write to ``Product.quantity``. A reservation is a single
conditional decrement, so two buyers racing for the last units can never both
succeed: the database applies the ``quantity >= requested`` predicate and the
row update atomically, and the loser sees zero rows affected.

There are no holds and no expiry; reserving stock *is* decrementing it.
"""

from django.db.models import F

from marketplace.catalog.domain.models.catalog import Product
from marketplace.domain.exceptions import InsufficientStock, ProductNotFound, ValidationFailed
from marketplace.infra.observability.metrics import stock_released_units_total, stock_reservation_failures
from marketplace.services.base import BaseService


def _validate_quantity(quantity) -> int:
    # bool is an int subclass; True must not reserve one unit
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationFailed("Quantity must be a positive integer", details={"quantity": quantity})
    return quantity


class InventoryLedger(BaseService):
    """
    Stock reservation and release against the product table.

    Both writes are expressed as ``F()`` updates so they never read-modify-write
    in Python. Callers that need the reservation to roll back with other work
    (order creation) run it inside their own ``transaction.atomic`` block on the
    same database alias.
    """

    def _products(self):
        return Product.objects.using(self.using)

    @BaseService.log_performance
    def reserve(self, product_id, quantity: int) -> None:
        """
        Decrement stock by ``quantity`` if, and only if, enough is available.

        Raises:
            ValidationFailed: quantity is not a positive integer
            ProductNotFound: no product with this id
            InsufficientStock: fewer than ``quantity`` units available
        """
        quantity = _validate_quantity(quantity)

        updated = (
            self._products()
            .filter(id=product_id, quantity__gte=quantity)
            .update(quantity=F("quantity") - quantity)
        )
        if updated == 1:
            self.logger.info(f"Stock reserved: product={product_id}, quantity={quantity}")
            return

        stock_reservation_failures.inc()
        available = self._products().filter(id=product_id).values_list("quantity", flat=True).first()
        if available is None:
            raise ProductNotFound(product_id)
        raise InsufficientStock(product_id=product_id, requested=quantity, available=available)

    @BaseService.log_performance
    def release(self, product_id, quantity: int) -> None:
        """
        Return ``quantity`` units to stock (order cancellation).

        Raises:
            ValidationFailed: quantity is not a positive integer
            ProductNotFound: no product with this id
        """
        quantity = _validate_quantity(quantity)

        updated = self._products().filter(id=product_id).update(quantity=F("quantity") + quantity)
        if updated == 0:
            raise ProductNotFound(product_id)

        stock_released_units_total.inc(quantity)
        self.logger.info(f"Stock released: product={product_id}, quantity={quantity}")

    def get_available(self, product_id) -> int:
        """Current stock level; used only for fast, non-authoritative pre-checks."""
        available = self._products().filter(id=product_id).values_list("quantity", flat=True).first()
        if available is None:
            raise ProductNotFound(product_id)
        return available

