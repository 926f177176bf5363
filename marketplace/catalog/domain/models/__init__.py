from .business import Business
from .catalog import Product


__all__ = [
    "Business",
    "Product",
]
