"""
Resultados de recomendación.

- EnhancedRecommendation: salida del motor inteligente (scores por factor,
  grado de inversión, tendencia, % de match con el usuario).
- UnifiedProperty: registro común del servicio unificado, venga del feed
  de marketplaces ("api") o de los motores locales ("local").
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from brickmatrix.models.listing import Coordinates

InvestmentGrade = Literal["A+", "A", "B+", "B", "C"]
TrendingStatus = Literal["Hot", "Trending", "Stable", "Cooling"]
PriceComparison = Literal["Below Market", "Market Rate", "Above Market"]


class RecommendationScore(BaseModel):
    """Scores de 0 a 10 por factor y el score global ponderado."""

    overall: float = Field(..., ge=0, le=10)
    builder_credibility: float = Field(..., ge=0, le=10)
    location_trend: float = Field(..., ge=0, le=10)
    price_value: float = Field(..., ge=0, le=10)
    user_alignment: float = Field(..., ge=0, le=10)
    project_popularity: float = Field(..., ge=0, le=10)


class BuilderTrackRecord(BaseModel):
    on_time_delivery: int = Field(..., ge=0, le=100)
    quality_rating: float
    customer_satisfaction: int = Field(..., ge=0, le=100)


class EnhancedRecommendation(BaseModel):
    """Recomendación del motor inteligente."""

    id: str
    title: str
    builder_name: str
    project_name: str
    city: str
    locality: str
    price: int
    price_per_sqft: int
    carpet_area: int
    bhk_config: str
    possession_date: str
    rera_id: Optional[str] = None
    verified_listing: bool
    source: str
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    coordinates: Coordinates

    recommendation_score: RecommendationScore
    recommendation_reason: str
    investment_grade: InvestmentGrade
    trending_status: TrendingStatus

    user_match_percentage: int = Field(..., ge=0, le=100)
    price_comparison: PriceComparison

    builder_track_record: BuilderTrackRecord


class UnifiedRecommendation(BaseModel):
    action: str = Field(..., description="strong_buy, buy, consider, wait, hold")
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str


class UnifiedProperty(BaseModel):
    """Propiedad del servicio unificado."""

    id: str
    title: str
    city: str
    locality: str
    price: int = Field(..., ge=0)
    price_per_sqft: int = 0
    area: int = 0
    bhk: str
    builder_name: str
    status: str
    possession_date: str
    amenities: list[str] = Field(default_factory=list)
    source: Literal["api", "local"]
    api_source: Optional[str] = Field(None, description="housing, squareyards, nobroker")
    brick_matrix_score: Optional[float] = None
    recommendation: Optional[UnifiedRecommendation] = None
    images: list[str] = Field(default_factory=list)
    coordinates: Optional[Coordinates] = None
    is_duplicate: bool = False
    duplicate_reason: Optional[str] = None


class UnifiedMetadata(BaseModel):
    total_count: int
    api_count: int
    local_count: int
    sources_used: list[str] = Field(default_factory=list)
    processing_time_ms: int
    cache_hit: bool


class UnifiedResult(BaseModel):
    properties: list[UnifiedProperty] = Field(default_factory=list)
    metadata: UnifiedMetadata
