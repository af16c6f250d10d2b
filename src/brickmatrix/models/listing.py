"""
Listings crudos de los portales.

- PropertyListing: registro de la ingesta en tiempo real (Housing.com,
  99acres, MagicBricks, NoBroker).
- MarketplaceListing: registro del feed unificado (housing, squareyards,
  nobroker), que conserva los duplicados marcados.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """Coordenadas geográficas."""

    lat: float = 0.0
    lng: float = 0.0


class PropertyListing(BaseModel):
    """
    Listing normalizado de la ingesta.

    El id sigue el formato ``<fuente>_<ciudad>_<timestamp>_<indice>``;
    no hay garantía de unicidad más allá de la deduplicación por
    builder + proyecto + localidad + BHK.
    """

    id: str = Field(..., description="ID fuente_ciudad_timestamp_indice")
    source: str = Field(..., description="Portal origen")
    builder_name: str = Field(..., description="Nombre del builder")
    project_name: str = Field(..., description="Nombre del proyecto")

    # Precio
    price: int = Field(..., ge=0, description="Precio total en INR")
    price_per_sqft: int = Field(..., ge=0, description="Precio por sqft en INR")

    # Superficie
    carpet_area: int = Field(..., ge=0, description="Carpet area en sqft")
    total_area: Optional[int] = Field(None, description="Superficie total en sqft")

    # Ubicación
    latitude: float
    longitude: float
    locality: str
    city: str
    state: str

    bhk_config: str = Field(..., description="1BHK, 2BHK, ...")
    possession_date: str = Field(..., description="'Ready' o 'Mon YYYY'")
    rera_id: Optional[str] = Field(None, description="Registro RERA")
    verified_listing: bool = False
    builder_reputation_score: int = Field(0, ge=0, le=100)
    project_link: str = ""
    platform_rating: Optional[float] = Field(None, description="Rating 0-5 del portal")

    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    last_updated: str = Field(
        default_factory=lambda: datetime.utcnow().isoformat(),
    )
    listing_age_days: int = Field(0, ge=0)

    @property
    def dedup_key(self) -> str:
        """Clave compuesta de deduplicación."""
        return f"{self.builder_name}_{self.project_name}_{self.locality}_{self.bhk_config}"


class MarketplaceListing(BaseModel):
    """Listing del feed unificado de marketplaces."""

    listing_id: str
    project_name: str
    builder: str
    city: str
    locality: str
    price: int = Field(..., ge=0)
    bhk: str
    possession_date: str
    amenities: list[str] = Field(default_factory=list)
    project_status: str
    source: str = Field(..., description="housing, squareyards o nobroker")
    area: Optional[int] = None
    price_per_sqft: Optional[int] = None
    coordinates: Optional[Coordinates] = None
    images: list[str] = Field(default_factory=list)
    rera_id: Optional[str] = None

    # Deduplicación
    is_duplicate: bool = False
    duplicate_reason: Optional[str] = None

    @property
    def dedup_key(self) -> str:
        """Clave de deduplicación (proyecto, localidad y builder en minúsculas)."""
        return "|".join(
            [self.project_name.lower(), self.locality.lower(), self.builder.lower()]
        )


class MarketplaceQuery(BaseModel):
    """Parámetros de consulta del feed de marketplaces."""

    city: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    property_type: Optional[str] = None
    possession_date: Optional[str] = None
    builder_name: Optional[str] = None
    bhk: Optional[str] = None
    amenities: Optional[list[str]] = None
    project_status: Optional[str] = None

    def cache_key(self) -> str:
        return "unified_listings_" + self.model_dump_json()
