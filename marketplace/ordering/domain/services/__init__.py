from .order_service import CheckoutResult, OrderOrchestrator, VendorGroupFailure
from .state_machine import OrderStateMachine


__all__ = [
    "CheckoutResult",
    "OrderOrchestrator",
    "OrderStateMachine",
    "VendorGroupFailure",
]
