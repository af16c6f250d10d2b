"""
Módulo de base de datos.

Provee el store JSON y los repositorios de wishlist y comparación.
"""

from brickmatrix.database.store import get_store, JsonStore
from brickmatrix.database.repositories import (
    ComparisonRepository,
    WishlistRepository,
)

__all__ = [
    "get_store",
    "JsonStore",
    "ComparisonRepository",
    "WishlistRepository",
]
