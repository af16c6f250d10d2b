"""
Modelo de propiedades diversificadas.

Propiedades generadas por localidad y micro mercado, con tipo de builder,
segmento de precio y tipo de publicación, para armar resultados variados.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from brickmatrix.models.listing import Coordinates

BuilderType = Literal["National", "Regional", "Local", "Boutique"]
Segment = Literal["Affordable", "Mid-Range", "Premium", "Ultra-Premium"]
ListingType = Literal["Owner", "Broker", "Builder", "Platform"]
DiverseStatus = Literal["Ready", "Under Construction", "New Launch", "Resale"]


class BuilderCredibility(BaseModel):
    score: float = Field(..., ge=0, le=10)
    badge: Literal["Excellent", "Good", "Average", "New"]
    completed_projects: int
    on_time_delivery: int


class ReraStatus(BaseModel):
    approved: bool
    registration_number: str = ""
    valid_till: Optional[str] = None


class PricePoint(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    price: int


class ListingMetadata(BaseModel):
    view_count: int
    popularity_tag: Optional[Literal["Trending", "Hot", "Most Viewed"]] = None
    verified_tag: bool
    last_updated: str


class DiverseProperty(BaseModel):
    id: str
    title: str
    city: str
    locality: str
    micro_market: str
    price: int
    price_per_sqft: int
    area: int
    bhk: str
    builder_name: str
    builder_type: BuilderType
    builder_credibility: BuilderCredibility
    listing_type: ListingType
    property_age: int = Field(..., ge=0, description="Antigüedad en años")
    status: DiverseStatus
    segment: Segment
    rera_status: ReraStatus
    price_history: list[PricePoint] = Field(default_factory=list)
    metadata: ListingMetadata
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    possession_date: Optional[str] = None
    coordinates: Coordinates
