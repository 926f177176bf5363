"""
Marketplace Service Layer

Shared plumbing for the domain services. Each bounded context keeps its own
services next to its models:

- marketplace.catalog.domain.services: InventoryLedger
- marketplace.ordering.domain.services: OrderOrchestrator, OrderStateMachine
- marketplace.ratings.domain.services: RatingEngine, TrustScoreAggregator

Usage:
    from infrastructure.container import container

    result = container.order_orchestrator().create_orders(buyer, cart)
"""

from .base import BaseService, paginate

__all__ = [
    "BaseService",
    "paginate",
]
