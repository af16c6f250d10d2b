"""
Modelo BrickMatrix™

Propiedad sintética con inteligencia de ubicación, perfil del builder,
detalles del proyecto, precios/ofertas y el bloque de scoring que
completa el motor BrickMatrix.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from brickmatrix.models.listing import Coordinates
from brickmatrix.models.user import BudgetRange

ProjectStatus = Literal["ready", "under_construction", "new_launch", "planning"]
PriceTrend = Literal["rising", "stable", "falling"]
RecommendationAction = Literal["strong_buy", "buy", "hold", "sell"]


class CompetingProject(BaseModel):
    project_name: str
    distance_km: float
    price_per_sqft: int
    builder: str


class MetroConnectivity(BaseModel):
    nearest_station: str
    distance_km: float
    lines: list[str] = Field(default_factory=list)


class LocationIntelligence(BaseModel):
    """Contexto de ubicación del proyecto."""

    city: str
    tier: int = Field(..., ge=1, le=3)
    locality: str
    coordinates: Coordinates
    connectivity_score: float = Field(..., ge=0, le=10)
    nearby_schemes_density: int = Field(..., ge=0)
    competing_projects: list[CompetingProject] = Field(default_factory=list)
    hotspot_status: bool = False
    metro_connectivity: MetroConnectivity
    infrastructure_score: float = Field(..., ge=0, le=10)


class BuilderProfile(BaseModel):
    """Credenciales y reputación del builder."""

    builder_name: str
    rera_registered: bool = True
    rera_id: str
    delivery_score: float = Field(..., ge=0, le=10)
    avg_rating: float = Field(..., ge=0)
    builder_rank: int = Field(..., ge=1, le=10, description="1 = mejor builder")
    projects_active: int = Field(..., ge=0)
    multi_platform_presence: dict[str, bool] = Field(default_factory=dict)
    market_sentiment_score: float = Field(..., ge=0, le=10)
    financial_stability: str
    on_time_delivery_percentage: int = Field(..., ge=0, le=100)


class ProjectDetails(BaseModel):
    project_name: str
    status: ProjectStatus
    property_type: str = "apartment"
    bhk_configurations: list[str] = Field(default_factory=list)
    launch_year: int
    possession_date: str
    total_units: int
    green_certified: bool = False
    amenities_score: float = Field(..., ge=0, le=10)
    floor_count: int


class PriceRange(BaseModel):
    min: int
    max: int

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


class CashbackOffer(BaseModel):
    offer_name: str
    cashback_amount: int
    valid_till: str


class LoanOffer(BaseModel):
    bank: str
    interest_rate: float
    processing_fee_waived: Optional[bool] = None


class PaymentPlan(BaseModel):
    plan_name: str
    description: str


class ActiveOffers(BaseModel):
    cashback_offers: list[CashbackOffer] = Field(default_factory=list)
    loan_offers: list[LoanOffer] = Field(default_factory=list)
    payment_plans: list[PaymentPlan] = Field(default_factory=list)


class PricingOffers(BaseModel):
    """Precios por configuración y ofertas vigentes."""

    price_per_sqft: int
    total_price_range: dict[str, PriceRange] = Field(default_factory=dict)
    gst_included: bool = False
    platform_specific_pricing: dict[str, int] = Field(default_factory=dict)
    active_offers: ActiveOffers = Field(default_factory=ActiveOffers)
    price_trend_direction: PriceTrend = "stable"
    price_appreciation_3yr: float = 0.0


class RiskAssessment(BaseModel):
    overall_risk: Literal["low", "medium", "high"]
    market_risk: float
    builder_risk: float
    location_risk: float


class AIRecommendation(BaseModel):
    action: RecommendationAction
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str


class BrickMatrixScoring(BaseModel):
    """
    Bloque de scoring. ``brickmatrix_score``, ``badges`` y
    ``ai_recommendation`` los completa el motor; el resto viene
    del generador.
    """

    brickmatrix_score: float = Field(0.0, ge=0, le=10)
    affordability_index: float
    livability_score: float
    investment_potential: float
    demand_index: float
    area_price_volatility: float
    roi_projection_5yr: float
    rental_yield: float
    badges: list[str] = Field(default_factory=list)
    risk_assessment: RiskAssessment
    ai_recommendation: AIRecommendation


class PreviousInteractions(BaseModel):
    viewed_properties: int = 0
    shortlisted_count: int = 0
    contacted_builders: int = 0


class UserPersonalization(BaseModel):
    user_budget: BudgetRange
    preferred_localities: list[str] = Field(default_factory=list)
    previous_interactions: PreviousInteractions = Field(
        default_factory=PreviousInteractions
    )
    intent_score: float = 0.0


class BrickMatrixProperty(BaseModel):
    """Propiedad completa del motor BrickMatrix™."""

    id: str = Field(..., description="ID fuente_timestamp_indice")
    source: str = Field(..., description="Portal que generó la propiedad")
    location_intelligence: LocationIntelligence
    builder_profile: BuilderProfile
    project_details: ProjectDetails
    pricing_offers: PricingOffers
    buyer_preferences: dict[str, bool] = Field(
        default_factory=dict, description="Amenities/atributos presentes"
    )
    brickmatrix_scoring: BrickMatrixScoring
    user_personalization: UserPersonalization
