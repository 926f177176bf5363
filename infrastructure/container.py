"""
Dependency Injection Container
================================

Simple service locator for the marketplace services and the infrastructure
they depend on. Every service is built once, lazily, with the configured
database alias and the shared event bus.

Usage:
    from infrastructure.container import container

    orders = container.order_orchestrator()
    result = orders.create_orders(buyer, cart, delivery_method="pickup")
"""

import logging
import threading
from typing import Optional

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS

from .events import EventBus, get_event_bus

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for domain services and infrastructure dependencies.

    Implements lazy initialization and caching of service instances.
    Thread-safe singleton pattern.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False
    _lock = threading.RLock()

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._event_bus: Optional[EventBus] = None

            # Domain Services
            self._inventory_ledger = None
            self._order_orchestrator = None
            self._order_state_machine = None
            self._trust_score_aggregator = None
            self._rating_engine = None

            self._initialized = True
            logger.info("Service container initialized")

    @property
    def using(self) -> str:
        """Database alias every service is constructed with."""
        return getattr(settings, "MARKETPLACE", {}).get("DATABASE_ALIAS", DEFAULT_DB_ALIAS)

    def event_bus(self) -> EventBus:
        """Get the event bus (Redis in production, in-memory in tests)."""
        if self._event_bus is None:
            self._event_bus = get_event_bus()
            logger.debug(f"Using event bus: {type(self._event_bus).__name__}")
        return self._event_bus

    def inventory_ledger(self):
        """Get InventoryLedger instance."""
        with self._lock:
            if self._inventory_ledger is None:
                from marketplace.catalog.domain.services import InventoryLedger

                self._inventory_ledger = InventoryLedger(using=self.using)
                logger.debug("Created InventoryLedger")
        return self._inventory_ledger

    def order_orchestrator(self):
        """Get OrderOrchestrator instance."""
        with self._lock:
            if self._order_orchestrator is None:
                from marketplace.ordering.domain.services import OrderOrchestrator

                self._order_orchestrator = OrderOrchestrator(
                    using=self.using, inventory=self.inventory_ledger(), event_bus=self.event_bus()
                )
                logger.debug("Created OrderOrchestrator")
        return self._order_orchestrator

    def order_state_machine(self):
        """Get OrderStateMachine instance."""
        with self._lock:
            if self._order_state_machine is None:
                from marketplace.ordering.domain.services import OrderStateMachine

                self._order_state_machine = OrderStateMachine(
                    using=self.using, inventory=self.inventory_ledger(), event_bus=self.event_bus()
                )
                logger.debug("Created OrderStateMachine")
        return self._order_state_machine

    def trust_score_aggregator(self):
        """Get TrustScoreAggregator instance."""
        with self._lock:
            if self._trust_score_aggregator is None:
                from marketplace.ratings.domain.services import TrustScoreAggregator

                self._trust_score_aggregator = TrustScoreAggregator(using=self.using)
                logger.debug("Created TrustScoreAggregator")
        return self._trust_score_aggregator

    def rating_engine(self):
        """Get RatingEngine instance."""
        with self._lock:
            if self._rating_engine is None:
                from marketplace.ratings.domain.services import RatingEngine

                self._rating_engine = RatingEngine(
                    using=self.using, aggregator=self.trust_score_aggregator(), event_bus=self.event_bus()
                )
                logger.debug("Created RatingEngine")
        return self._rating_engine

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        with self._lock:
            self._event_bus = None
            self._inventory_ledger = None
            self._order_orchestrator = None
            self._order_state_machine = None
            self._trust_score_aggregator = None
            self._rating_engine = None
        logger.info("Service container reset")


# Global singleton instance
container = ServiceContainer()

