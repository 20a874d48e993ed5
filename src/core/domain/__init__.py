"""
Domain models and value objects.

Contains the PriceLevel value object binding a tick to its sqrt price.
"""

from src.core.domain.price_level import PriceLevel

__all__ = [
    "PriceLevel",
]
