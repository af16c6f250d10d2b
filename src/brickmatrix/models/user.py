"""
Intención del usuario y filtros de búsqueda.

Define lo que el comprador pide al sistema: presupuesto, localidades,
configuraciones, builders, y los filtros "smart" del panel de búsqueda.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

SortKey = Literal["price", "area", "possession_date", "smart_score"]


class BudgetRange(BaseModel):
    """Rango de presupuesto en INR."""

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max


class UserIntent(BaseModel):
    """
    Intención de compra del usuario.
    Pondera el score de alineación, no excluye listings.
    """

    budget: BudgetRange = Field(
        default_factory=lambda: BudgetRange(min=5_000_000, max=50_000_000),
        description="Presupuesto total (default 50 L - 5 Cr)",
    )
    preferred_localities: list[str] = Field(default_factory=list)
    bhk_preference: list[str] = Field(default_factory=lambda: ["2BHK", "3BHK"])
    builder_preference: list[str] = Field(default_factory=list)
    possession_timeline: str = Field("Any", description="Ready, 2025, Any...")
    investment_horizon: Literal["short", "medium", "long"] = "medium"
    risk_tolerance: Literal["low", "medium", "high"] = "medium"


class PriceFinanceFilter(BaseModel):
    price_range: Optional[BudgetRange] = None


class LocationProximityFilter(BaseModel):
    city: Optional[str] = None


class PropertySpecsFilter(BaseModel):
    bhk_range: list[str] = Field(default_factory=list)
    rera_approved: bool = False


class BuilderProjectFilter(BaseModel):
    builder_search: Optional[str] = None
    verified_only: bool = False


class SmartFilters(BaseModel):
    """
    Filtros excluyentes del panel de búsqueda.
    Si un listing no cumple alguno, se descarta.
    """

    price_finance: PriceFinanceFilter = Field(default_factory=PriceFinanceFilter)
    location_proximity: LocationProximityFilter = Field(
        default_factory=LocationProximityFilter
    )
    property_specs: PropertySpecsFilter = Field(default_factory=PropertySpecsFilter)
    builder_project: BuilderProjectFilter = Field(default_factory=BuilderProjectFilter)


class BrickMatrixFilters(BaseModel):
    """Parámetros del motor BrickMatrix™."""

    budget: BudgetRange
    city: Optional[str] = None
    bhk: Optional[list[str]] = None
    property_type: Optional[str] = None
    preferences: dict[str, bool] = Field(
        default_factory=dict, description="Amenities deseadas (clave -> requerida)"
    )
    builder_rating_min: Optional[float] = None

    def cache_key(self) -> str:
        return "recommendations_" + self.model_dump_json()


class UnifiedFilters(BaseModel):
    """Filtros del servicio de recomendaciones unificado."""

    city: Optional[str] = None
    budget: Optional[BudgetRange] = None
    bhk: Optional[list[str]] = None
    property_type: Optional[str] = None
    builder_name: Optional[str] = None
    possession_date: Optional[str] = None
    amenities: Optional[list[str]] = None
    project_status: Optional[str] = None
    locality: Optional[str] = None
    sort_by: SortKey = "smart_score"
    include_api_data: bool = True
    include_local_data: bool = True

    def cache_key(self) -> str:
        return "unified_recommendations_" + self.model_dump_json()
