from .inventory_service import InventoryLedger


__all__ = [
    "InventoryLedger",
]
