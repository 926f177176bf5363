"""
OrderStateMachine - Order Status Transitions

The only writer of ``Order.status`` after creation. Each transition runs in a
single transaction:

1. load the order and re-check the actor's relationship to it,
2. validate the move against the transition table,
3. compare-and-swap the status (``WHERE status = <current>``),
4. release stock when the target is ``cancelled``,
5. append an ``OrderStatusChange`` row.

A compare-and-swap that matches zero rows means another request moved the
order first; the loser gets ``OrderAlreadyFinalized`` or ``InvalidTransition``
depending on where the winner left it.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone

from authentication.permissions import is_admin
from infrastructure.events import get_event_bus
from marketplace.catalog.domain.services.inventory_service import InventoryLedger
from marketplace.domain.events.order_events import OrderStatusChangedEvent
from marketplace.domain.exceptions import (
    Forbidden,
    InvalidTransition,
    OrderAlreadyFinalized,
    OrderNotFound,
    ValidationFailed,
)
from marketplace.infra.events.publisher import publish_after_commit
from marketplace.infra.observability.metrics import order_status_transitions_total, order_transition_rejections_total
from marketplace.infra.observability.tracing import add_span_attributes, get_tracer
from marketplace.ordering.domain.models.order import Order, OrderStatusChange
from marketplace.ordering.domain.order_status import (
    OrderStatus,
    PaymentStatus,
    can_transition,
    is_terminal,
    parse_status,
)
from marketplace.services.base import BaseService

tracer = get_tracer(__name__)


class OrderStateMachine(BaseService):
    def __init__(self, using: str = DEFAULT_DB_ALIAS, inventory: InventoryLedger = None, event_bus=None):
        super().__init__(using=using)
        self.inventory = inventory or InventoryLedger(using=using)
        self.event_bus = event_bus or get_event_bus()

    def _orders(self):
        return Order.objects.using(self.using)

    @BaseService.log_performance
    def transition(self, order_id, actor, new_status: str, reason: str = "") -> Order:
        """
        Move an order to ``new_status``.

        Args:
            order_id: Order UUID
            actor: Requesting user; ``None`` for system-initiated changes
            new_status: Target status string
            reason: Free text stored in the status history

        Returns:
            The updated Order with items and history loaded

        Raises:
            ValidationFailed: unknown target status
            OrderNotFound: no such order
            Forbidden: actor may not apply this transition to this order
            OrderAlreadyFinalized: order is delivered or cancelled
            InvalidTransition: target not reachable from the current status
        """
        try:
            target = parse_status(new_status)
        except ValueError:
            raise ValidationFailed(
                f"Unknown order status '{new_status}'", details={"allowed": list(OrderStatus.values)}
            )

        with tracer.start_as_current_span("order.transition") as span:
            add_span_attributes(span, order_id=order_id, to_status=target.value)
            try:
                with transaction.atomic(using=self.using):
                    order = self._apply(order_id, actor, target, reason or "")
            except (OrderAlreadyFinalized, InvalidTransition, Forbidden) as e:
                order_transition_rejections_total.labels(code=e.code).inc()
                raise

        return self._reload(order.id)

    def _apply(self, order_id, actor, target: OrderStatus, reason: str) -> Order:
        try:
            order = self._orders().select_related("business").get(id=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound(order_id)

        current = order.status
        role = self._actor_role(order, actor)

        if is_terminal(current):
            raise OrderAlreadyFinalized(order.id, current)
        if not can_transition(current, target):
            raise InvalidTransition(current, target.value)
        if role == "buyer" and not (target == OrderStatus.CANCELLED and current == OrderStatus.PENDING):
            raise Forbidden("Buyers may only cancel orders that are still pending")

        updated = self._orders().filter(id=order.id, status=current).update(status=target, updated_at=timezone.now())
        if updated == 0:
            latest = self._orders().filter(id=order.id).values_list("status", flat=True).first()
            self.logger.warning(f"Order {order.id} changed concurrently: expected {current}, found {latest}")
            if is_terminal(latest):
                raise OrderAlreadyFinalized(order.id, latest)
            raise InvalidTransition(latest, target.value)

        if target == OrderStatus.CANCELLED:
            for item in order.items.using(self.using).all():
                self.inventory.release(item.product_id, item.quantity)

        OrderStatusChange.objects.using(self.using).create(
            order=order,
            from_status=current,
            to_status=target,
            actor=actor,
            reason=reason,
        )

        publish_after_commit(
            self.event_bus,
            OrderStatusChangedEvent(
                order_id=str(order.id),
                buyer_id=str(order.buyer_id),
                business_id=str(order.business_id),
                from_status=current,
                to_status=target.value,
                actor_id=str(actor.id) if actor is not None else None,
                reason=reason,
            ),
            using=self.using,
        )
        order_status_transitions_total.labels(from_status=current, to_status=target.value).inc()

        self.logger.info(f"Order {order.id} transitioned {current} -> {target.value} by {self._actor_label(actor)}")
        return order

    def _actor_role(self, order: Order, actor) -> str:
        """Return ``system``, ``vendor`` or ``buyer``; raise Forbidden for anyone else."""
        if actor is None or is_admin(actor):
            return "system"
        if order.business.owner_id == actor.id:
            return "vendor"
        if order.buyer_id == actor.id:
            return "buyer"
        raise Forbidden("You do not have permission to update this order")

    @staticmethod
    def _actor_label(actor) -> str:
        return "system" if actor is None else f"user {actor.id}"

    def _reload(self, order_id) -> Order:
        return (
            self._orders()
            .select_related("buyer", "business")
            .prefetch_related("items", "status_history")
            .get(id=order_id)
        )

    @BaseService.log_performance
    def record_payment_result(self, order_id, succeeded: bool) -> Order:
        """
        Record the payment collaborator's outcome on ``payment_status``.

        Payment status is independent of the status machine; a result for an
        order that is already cancelled is still recorded.
        """
        payment_status = PaymentStatus.COMPLETED if succeeded else PaymentStatus.FAILED
        try:
            updated = self._orders().filter(id=order_id).update(
                payment_status=payment_status, updated_at=timezone.now()
            )
        except DjangoValidationError:
            updated = 0
        if updated == 0:
            raise OrderNotFound(order_id)

        self.logger.info(f"Order {order_id} payment_status -> {payment_status}")
        return self._orders().get(id=order_id)
