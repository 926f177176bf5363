import logging

from django.db import transaction

from marketplace.domain.events.base import DomainEvent


logger = logging.getLogger(__name__)


def publish_after_commit(event_bus, event: DomainEvent, using: str) -> None:
    """
    Hand ``event`` to the bus once the surrounding transaction commits.

    Nothing is published for a rolled-back transaction. Outside a transaction
    the event goes out immediately.
    """

    def _publish():
        try:
            event_bus.publish(event.event_type, event.payload)
        except Exception as e:
            logger.error(f"Failed to publish {event.event_type}: {e}", exc_info=True)

    transaction.on_commit(_publish, using=using)
