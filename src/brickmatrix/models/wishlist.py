"""
Modelos de wishlist y comparación de propiedades.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class WishlistItem(BaseModel):
    """Propiedad guardada por el usuario."""

    id: str = Field(..., description="wishlist_<timestamp>")
    property_id: str
    title: str
    price: int
    location: str
    image: str = "/placeholder.svg"
    added_date: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    priority: Literal["High", "Medium", "Low"] = "Medium"


class ComparisonItem(BaseModel):
    """Propiedad agregada a la comparación lado a lado."""

    property_id: str
    title: str
    price: int
    area: int
    location: str
    builder: str
    added_date: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
