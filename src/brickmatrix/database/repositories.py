"""
Repositorios de wishlist y comparación.

Cada repositorio maneja una colección del store JSON.
"""

import time
from collections import Counter
from datetime import datetime
from typing import Optional

import structlog

from brickmatrix.config import get_settings
from brickmatrix.database.store import JsonStore, get_store
from brickmatrix.models import ComparisonItem, WishlistItem

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    COLLECTION = ""

    def __init__(self, store: Optional[JsonStore] = None):
        self._store = store or get_store()

    @property
    def store(self) -> JsonStore:
        return self._store


class WishlistRepository(BaseRepository):
    """Propiedades guardadas por el usuario."""

    COLLECTION = "wishlist"

    def get_all(self) -> list[WishlistItem]:
        return [WishlistItem.model_validate(item) for item in self.store.read(self.COLLECTION)]

    def _save(self, items: list[WishlistItem]) -> None:
        self.store.write(self.COLLECTION, [item.model_dump() for item in items])

    def contains(self, property_id: str) -> bool:
        return any(item.property_id == property_id for item in self.get_all())

    def add(
        self,
        property_id: str,
        title: str,
        price: int,
        location: str,
        image: Optional[str] = None,
    ) -> bool:
        """
        Agrega una propiedad a la wishlist.

        Returns:
            False si la propiedad ya estaba guardada
        """
        items = self.get_all()
        if any(item.property_id == property_id for item in items):
            return False

        items.append(
            WishlistItem(
                id=f"wishlist_{int(time.time() * 1000)}",
                property_id=property_id,
                title=title,
                price=price,
                location=location,
                image=image or "/placeholder.svg",
            )
        )
        self._save(items)
        logger.info("Propiedad agregada a la wishlist", property_id=property_id)
        return True

    def remove(self, property_id: str) -> bool:
        items = self.get_all()
        self._save([item for item in items if item.property_id != property_id])
        return True

    def update(self, property_id: str, **updates) -> bool:
        """Actualiza campos de un item; False si no está en la wishlist."""
        items = self.get_all()
        for i, item in enumerate(items):
            if item.property_id == property_id:
                items[i] = WishlistItem.model_validate({**item.model_dump(), **updates})
                self._save(items)
                return True
        return False

    def clear(self) -> None:
        self.store.delete(self.COLLECTION)

    def stats(self) -> dict:
        """Resumen de la wishlist: precios, localidades más guardadas y actividad reciente."""
        items = self.get_all()
        if not items:
            return {
                "total_items": 0,
                "average_price": 0,
                "price_range": {"min": 0, "max": 0},
                "top_locations": [],
                "recent_activity": [],
            }

        prices = [item.price for item in items]
        top_locations = Counter(item.location for item in items).most_common(5)
        recent = sorted(
            items, key=lambda item: datetime.fromisoformat(item.added_date), reverse=True
        )[:5]
        return {
            "total_items": len(items),
            "average_price": round(sum(prices) / len(prices)),
            "price_range": {"min": min(prices), "max": max(prices)},
            "top_locations": [
                {"location": location, "count": count} for location, count in top_locations
            ],
            "recent_activity": recent,
        }


class ComparisonRepository(BaseRepository):
    """Propiedades seleccionadas para comparar lado a lado."""

    COLLECTION = "comparison"

    def __init__(self, store: Optional[JsonStore] = None, max_items: Optional[int] = None):
        super().__init__(store)
        self.max_items = max_items or get_settings().max_comparison_items

    def get_all(self) -> list[ComparisonItem]:
        return [ComparisonItem.model_validate(item) for item in self.store.read(self.COLLECTION)]

    def contains(self, property_id: str) -> bool:
        return any(item.property_id == property_id for item in self.get_all())

    def count(self) -> int:
        return len(self.get_all())

    def add(
        self,
        property_id: str,
        title: str,
        price: int,
        area: int,
        location: str,
        builder: str,
    ) -> tuple[bool, str]:
        """
        Agrega una propiedad a la comparación.

        Returns:
            (éxito, mensaje)
        """
        items = self.get_all()
        if any(item.property_id == property_id for item in items):
            return False, "Property already in comparison"
        if len(items) >= self.max_items:
            return False, f"Maximum {self.max_items} properties can be compared"

        items.append(
            ComparisonItem(
                property_id=property_id,
                title=title,
                price=price,
                area=area,
                location=location,
                builder=builder,
            )
        )
        self.store.write(self.COLLECTION, [item.model_dump() for item in items])
        logger.info("Propiedad agregada a la comparación", property_id=property_id)
        return True, "Added to comparison"

    def remove(self, property_id: str) -> bool:
        items = [item for item in self.get_all() if item.property_id != property_id]
        self.store.write(self.COLLECTION, [item.model_dump() for item in items])
        return True

    def clear(self) -> None:
        self.store.delete(self.COLLECTION)
