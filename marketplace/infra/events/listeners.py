import logging

from django.conf import settings

from infrastructure.events import RedisEventBus, get_event_bus
from marketplace.domain.exceptions import MarketplaceError


logger = logging.getLogger(__name__)


def handle_order_placed(event_data):
    """Handle order.placed event: notify the vendor of a new order."""
    payload = event_data.get("payload", {})
    logger.info(
        f"[Marketplace Listener] Order placed: {payload.get('order_id')} "
        f"for business {payload.get('business_id')}, total {payload.get('total_amount')}"
    )


def handle_order_status_changed(event_data):
    """Handle order.status_changed event: notify the buyer."""
    payload = event_data.get("payload", {})
    logger.info(
        f"[Marketplace Listener] Order {payload.get('order_id')} moved "
        f"{payload.get('from_status')} -> {payload.get('to_status')}; notifying buyer {payload.get('buyer_id')}"
    )


def handle_rating_created(event_data):
    """Handle rating.created event: notify the ratee."""
    payload = event_data.get("payload", {})
    logger.info(
        f"[Marketplace Listener] {payload.get('direction')} rating {payload.get('rating_id')} "
        f"for order {payload.get('order_id')}; notifying {payload.get('ratee_id')}"
    )


def _record_payment(event_data, succeeded: bool):
    from infrastructure.container import container

    payload = event_data.get("payload", {})
    order_id = payload.get("order_id")
    if not order_id:
        logger.error(f"Payment event without order_id: {event_data.get('event_type')}")
        return

    try:
        container.order_state_machine().record_payment_result(order_id, succeeded=succeeded)
    except MarketplaceError as e:
        logger.error(f"Failed to record payment result for order {order_id}: {e.message}")
        return

    logger.info(f"Recorded payment {'success' if succeeded else 'failure'} for order {order_id}")


def handle_payment_succeeded(event_data):
    """Handle payment.succeeded event."""
    _record_payment(event_data, succeeded=True)


def handle_payment_failed(event_data):
    """Handle payment.failed event."""
    _record_payment(event_data, succeeded=False)


def register_marketplace_listeners(event_bus=None):
    """Register all marketplace event listeners."""
    event_bus = event_bus or get_event_bus()
    event_bus.subscribe("order.placed", handle_order_placed)
    event_bus.subscribe("order.status_changed", handle_order_status_changed)
    event_bus.subscribe("rating.created", handle_rating_created)
    event_bus.subscribe("payment.succeeded", handle_payment_succeeded)
    event_bus.subscribe("payment.failed", handle_payment_failed)
    logger.info("Marketplace event listeners registered")

    if getattr(settings, "INFRASTRUCTURE", {}).get("EVENT_BUS_LISTEN") and isinstance(event_bus, RedisEventBus):
        event_bus.start_listening()
