"""
Motor BrickMatrix™.

Implementa:
- Fan-out a MagicBricks y 99acres (generadores con latencia simulada)
- Scoring ponderado: ubicación, builder, proyecto, precio y preferencias
- Recomendación de acción (strong_buy / buy / hold) y badges
- Cache por filtros con TTL
"""

import asyncio
import random
import string
import time
from datetime import date, timedelta
from typing import Optional

import structlog

from brickmatrix.cache import TTLCache
from brickmatrix.config import Settings, get_settings
from brickmatrix.data import catalog
from brickmatrix.ingestion.base import BaseListingSource
from brickmatrix.models import BrickMatrixFilters, BrickMatrixProperty
from brickmatrix.models.brickmatrix import (
    ActiveOffers,
    AIRecommendation,
    BrickMatrixScoring,
    BuilderProfile,
    CashbackOffer,
    CompetingProject,
    LoanOffer,
    LocationIntelligence,
    MetroConnectivity,
    PaymentPlan,
    PriceRange,
    PricingOffers,
    ProjectDetails,
    RiskAssessment,
    UserPersonalization,
)
from brickmatrix.models.listing import Coordinates

logger = structlog.get_logger()

MATRIX_CITIES = ["Mumbai", "Delhi", "Bengaluru", "Pune", "Hyderabad"]
MATRIX_TIER1_CITIES = ["Mumbai", "Delhi", "Bengaluru"]
MATRIX_BUILDERS = [
    "Lodha Group",
    "DLF Limited",
    "Godrej Properties",
    "Prestige Group",
    "Brigade Group",
    "Sobha Limited",
]
MATRIX_PROJECT_SUFFIXES = ["Eternis", "Grandeur", "Platinum", "Elite", "Signature"]
MATRIX_LOCALITIES = {
    "Mumbai": ["Bandra West", "Powai", "Lower Parel", "Worli", "Andheri West"],
    "Delhi": ["Gurgaon", "Dwarka", "Rohini", "Saket", "Vasant Kunj"],
    "Bengaluru": ["Whitefield", "Electronic City", "Koramangala", "HSR Layout", "Indiranagar"],
    "Pune": ["Baner", "Wakad", "Hinjewadi", "Kharadi", "Viman Nagar"],
    "Hyderabad": ["HITEC City", "Gachibowli", "Kondapur", "Madhapur", "Banjara Hills"],
}

# Atributos que puede pedir el comprador
BUYER_PREFERENCE_KEYS = [
    "swimming_pool",
    "gym",
    "clubhouse",
    "power_backup",
    "gated_community",
    "wifi_ready",
    "pet_friendly",
    "rooftop_access",
    "vaastu_compliant",
    "smart_home_features",
    "dedicated_parking",
    "near_metro",
    "security_24x7",
]

TOTAL_PRICE_RANGES = {
    "2BHK": (12_000_000, 18_000_000),
    "3BHK": (18_000_000, 28_000_000),
    "4BHK": (28_000_000, 45_000_000),
}

# (score mínimo, acción, piso de confianza, razonamiento)
RECOMMENDATION_BANDS = [
    (
        8.5,
        "strong_buy",
        85,
        "Exceptional property with outstanding location, builder credibility, "
        "and investment potential",
    ),
    (
        7.5,
        "buy",
        75,
        "Strong investment opportunity with good fundamentals and growth potential",
    ),
    (
        6.0,
        "hold",
        65,
        "Decent option but consider waiting for better opportunities or price corrections",
    ),
    (
        0.0,
        "hold",
        50,
        "Below average metrics suggest waiting for market improvements or alternative options",
    ),
]

MAX_BADGES = 4


class RecommendationError(Exception):
    """No se pudieron obtener recomendaciones del motor."""


class BrickMatrixSource(BaseListingSource[BrickMatrixProperty]):
    """Generador de propiedades BrickMatrix™ para un portal."""

    LISTING_COUNT = 0

    def __init__(
        self,
        filters: BrickMatrixFilters,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(settings=settings, rng=rng)
        self.filters = filters

    def generate(self, city: str, limit: int) -> list[BrickMatrixProperty]:
        timestamp = int(time.time() * 1000)
        prefix = self.SOURCE_NAME.lower()
        return [
            self._generate_property(f"{prefix}_{timestamp}_{i}", city)
            for i in range(min(self.LISTING_COUNT, limit))
        ]

    def _round(self, low: float, span: float) -> float:
        return round(self.rng.random() * span + low, 1)

    def _generate_property(self, property_id: str, city: str) -> BrickMatrixProperty:
        rng = self.rng
        city = catalog.canonical_city(city) or rng.choice(MATRIX_CITIES)
        builder = rng.choice(MATRIX_BUILDERS)
        builder_prefix = builder.split(" ")[0]
        base_lat, base_lng = catalog.CITY_COORDINATES.get(city, catalog.DEFAULT_COORDINATES)

        location = LocationIntelligence(
            city=city,
            tier=1 if city in MATRIX_TIER1_CITIES else 2,
            locality=rng.choice(MATRIX_LOCALITIES.get(city, catalog.FALLBACK_LOCALITIES)),
            coordinates=Coordinates(
                lat=base_lat + rng.random() * 0.1,
                lng=base_lng + rng.random() * 0.1,
            ),
            connectivity_score=self._round(7, 3),
            nearby_schemes_density=rng.randrange(20) + 5,
            competing_projects=[
                CompetingProject(
                    project_name=f"{builder_prefix} Heights",
                    distance_km=self._round(0, 3),
                    price_per_sqft=rng.randrange(5000) + 15000,
                    builder=builder,
                )
            ],
            hotspot_status=rng.random() > 0.6,
            metro_connectivity=MetroConnectivity(
                nearest_station="Central Station",
                distance_km=self._round(0, 2),
                lines=["Line 1", "Line 2"],
            ),
            infrastructure_score=self._round(8, 2),
        )

        builder_profile = BuilderProfile(
            builder_name=builder,
            rera_registered=True,
            rera_id="RERA" + "".join(
                rng.choice(string.ascii_uppercase + string.digits) for _ in range(9)
            ),
            delivery_score=self._round(7, 3),
            avg_rating=self._round(3.5, 2),
            builder_rank=rng.randint(1, 10),
            projects_active=rng.randrange(20) + 5,
            multi_platform_presence={
                "magicbricks": True,
                "acres99": rng.random() > 0.3,
                "housing": rng.random() > 0.4,
                "nobroker": rng.random() > 0.5,
            },
            market_sentiment_score=self._round(7, 3),
            financial_stability=rng.choice(["AAA", "AA+", "AA"]),
            on_time_delivery_percentage=rng.randrange(20) + 80,
        )

        possession = date.today() + timedelta(days=int(rng.random() * 365 * 3))
        project = ProjectDetails(
            project_name=f"{builder_prefix} {rng.choice(MATRIX_PROJECT_SUFFIXES)}",
            status=rng.choice(["ready", "under_construction", "new_launch"]),
            property_type=self.filters.property_type or "apartment",
            bhk_configurations=["2BHK", "3BHK", "4BHK"],
            launch_year=2020 + rng.randrange(4),
            possession_date=possession.isoformat(),
            total_units=rng.randrange(500) + 100,
            green_certified=rng.random() > 0.6,
            amenities_score=self._round(8, 2),
            floor_count=rng.randrange(30) + 10,
        )

        pricing = PricingOffers(
            price_per_sqft=rng.randrange(10000) + 15000,
            total_price_range={
                bhk: PriceRange(min=low, max=high)
                for bhk, (low, high) in TOTAL_PRICE_RANGES.items()
            },
            gst_included=False,
            platform_specific_pricing={self.SOURCE_NAME: rng.randrange(10000) + 15000},
            active_offers=ActiveOffers(
                cashback_offers=[
                    CashbackOffer(
                        offer_name="Early Bird Special",
                        cashback_amount=200000,
                        valid_till="2024-12-31",
                    )
                ],
                loan_offers=[
                    LoanOffer(bank="HDFC Bank", interest_rate=8.75, processing_fee_waived=True)
                ],
                payment_plans=[
                    PaymentPlan(
                        plan_name="80:20 Plan",
                        description="80% on possession, 20% during construction",
                    )
                ],
            ),
            price_trend_direction=rng.choice(["rising", "stable", "falling"]),
            price_appreciation_3yr=self._round(5, 20),
        )

        scoring = BrickMatrixScoring(
            affordability_index=self._round(6, 4),
            livability_score=self._round(8, 2),
            investment_potential=self._round(7, 3),
            demand_index=self._round(7, 3),
            area_price_volatility=self._round(2, 5),
            roi_projection_5yr=self._round(10, 15),
            rental_yield=self._round(2, 3),
            risk_assessment=RiskAssessment(
                overall_risk=rng.choice(["low", "medium"]),
                market_risk=self._round(1, 3),
                builder_risk=self._round(1, 2),
                location_risk=self._round(1, 2),
            ),
            ai_recommendation=AIRecommendation(
                action="buy", confidence=80, reasoning="Generated by BrickMatrix™ AI"
            ),
        )

        return BrickMatrixProperty(
            id=property_id,
            source=self.SOURCE_NAME,
            location_intelligence=location,
            builder_profile=builder_profile,
            project_details=project,
            pricing_offers=pricing,
            buyer_preferences={key: rng.random() > 0.4 for key in BUYER_PREFERENCE_KEYS},
            brickmatrix_scoring=scoring,
            user_personalization=UserPersonalization(
                user_budget=self.filters.budget,
                intent_score=self._round(6, 4),
            ),
        )


class MagicBricksMatrixSource(BrickMatrixSource):
    SOURCE_NAME = "MagicBricks"
    BASE_URL = catalog.SOURCE_BASE_URLS["MagicBricks.com"]
    LATENCY_RANGE = (0.8, 0.8)
    LISTING_COUNT = 15


class NinetyNineAcresMatrixSource(BrickMatrixSource):
    SOURCE_NAME = "99acres"
    BASE_URL = catalog.SOURCE_BASE_URLS["99acres.com"]
    LATENCY_RANGE = (0.9, 0.9)
    LISTING_COUNT = 12


MATRIX_SOURCES = [MagicBricksMatrixSource, NinetyNineAcresMatrixSource]


def calculate_location_score(location: LocationIntelligence) -> float:
    return min(
        10,
        location.connectivity_score * 0.4
        + location.infrastructure_score * 0.3
        + (2 if location.hotspot_status else 0)
        + min(2, location.nearby_schemes_density / 5),
    )


def calculate_builder_score(builder: BuilderProfile) -> float:
    return min(
        10,
        builder.delivery_score * 0.3
        + builder.avg_rating * 2 * 0.3
        + (11 - builder.builder_rank) * 0.1 * 0.2
        + builder.market_sentiment_score * 0.2,
    )


def calculate_project_score(project: ProjectDetails) -> float:
    score = project.amenities_score
    if project.green_certified:
        score += 1
    if project.status == "ready":
        score += 0.5
    return min(10, score)


def calculate_pricing_score(pricing: PricingOffers, filters: BrickMatrixFilters) -> float:
    """
    Alineación del precio de 3BHK (o 2BHK) con el centro del presupuesto.

    Sin rango de precio o con presupuesto nulo devuelve 5.
    """
    price_range = pricing.total_price_range.get("3BHK") or pricing.total_price_range.get("2BHK")
    if not price_range:
        return 5

    budget_mid = filters.budget.midpoint
    if budget_mid <= 0:
        return 5

    alignment = max(0, 10 - abs(price_range.midpoint - budget_mid) / budget_mid * 10)
    trend_bonus = 1 if pricing.price_trend_direction == "rising" else 0
    return min(10, alignment + trend_bonus)


def calculate_preferences_score(
    property_prefs: dict[str, bool], user_prefs: dict[str, bool]
) -> float:
    wanted = [key for key, value in user_prefs.items() if value]
    if not wanted:
        return 8

    matched = [key for key in wanted if property_prefs.get(key)]
    return min(10, len(matched) / len(wanted) * 10)


class BrickMatrixEngine:
    """
    Motor de recomendaciones BrickMatrix™.

    Flujo:
    1. Buscar en cache por filtros serializados
    2. Consultar MagicBricks y 99acres en paralelo
    3. Calcular score, recomendación y badges de cada propiedad
    4. Ordenar por score y cachear 15 minutos
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        source_classes: Optional[list[type[BrickMatrixSource]]] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.source_classes = source_classes or MATRIX_SOURCES
        self._cache = TTLCache(self.settings.cache_ttl_seconds)

    async def fetch_recommendations(
        self, filters: BrickMatrixFilters
    ) -> list[BrickMatrixProperty]:
        """
        Obtiene propiedades puntuadas y ordenadas por score BrickMatrix™.

        Raises:
            RecommendationError: Si fallan todas las fuentes o el scoring
        """
        logger.info("Buscando recomendaciones BrickMatrix", city=filters.city)

        cache_key = filters.cache_key()
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("Devolviendo recomendaciones cacheadas", total=len(cached))
            return cached

        try:
            properties = await self._fetch_all_sources(filters)
            scored = self.apply_scoring(properties, filters)
        except RecommendationError:
            raise
        except Exception as e:
            logger.error("Error en el motor BrickMatrix", error=str(e))
            raise RecommendationError(
                "No se pudieron obtener recomendaciones BrickMatrix"
            ) from e

        self._cache.set(cache_key, scored)
        logger.info("Recomendaciones BrickMatrix procesadas", total=len(scored))
        return scored

    async def _fetch_all_sources(
        self, filters: BrickMatrixFilters
    ) -> list[BrickMatrixProperty]:
        sources = [
            source_class(filters, settings=self.settings, rng=self.rng)
            for source_class in self.source_classes
        ]
        results = await asyncio.gather(
            *(source.fetch(filters.city or "", source.LISTING_COUNT) for source in sources),
            return_exceptions=True,
        )

        properties: list[BrickMatrixProperty] = []
        failed = 0
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.warning(
                    "Fuente BrickMatrix fallida",
                    source=source.SOURCE_NAME,
                    error=str(result),
                )
                continue
            properties.extend(result)

        if sources and failed == len(sources):
            raise RecommendationError("No se pudieron obtener recomendaciones BrickMatrix")
        return properties

    def apply_scoring(
        self, properties: list[BrickMatrixProperty], filters: BrickMatrixFilters
    ) -> list[BrickMatrixProperty]:
        """Puntúa cada propiedad y las ordena por score descendente."""
        scored = []
        for prop in properties:
            location = calculate_location_score(prop.location_intelligence)
            builder = calculate_builder_score(prop.builder_profile)
            project = calculate_project_score(prop.project_details)
            pricing = calculate_pricing_score(prop.pricing_offers, filters)
            preferences = calculate_preferences_score(
                prop.buyer_preferences, filters.preferences
            )

            score = round(
                location * 0.25
                + builder * 0.25
                + project * 0.20
                + pricing * 0.15
                + preferences * 0.15,
                1,
            )

            scoring = prop.brickmatrix_scoring.model_copy(
                update={
                    "brickmatrix_score": score,
                    "badges": self.generate_badges(prop, score),
                    "ai_recommendation": self.generate_ai_recommendation(score),
                }
            )
            scored.append(prop.model_copy(update={"brickmatrix_scoring": scoring}))

        return sorted(
            scored,
            key=lambda p: p.brickmatrix_scoring.brickmatrix_score,
            reverse=True,
        )

    def generate_ai_recommendation(self, score: float) -> AIRecommendation:
        for threshold, action, confidence_floor, reasoning in RECOMMENDATION_BANDS:
            if score >= threshold:
                return AIRecommendation(
                    action=action,
                    confidence=confidence_floor + self.rng.randrange(15),
                    reasoning=reasoning,
                )
        raise ValueError(f"Score fuera de rango: {score}")

    @staticmethod
    def generate_badges(prop: BrickMatrixProperty, score: float) -> list[str]:
        badges = []
        if score >= 9.0:
            badges.append("BrickMatrix™ Top Choice")
        if score >= 8.5:
            badges.append("Premium Selection")
        if prop.location_intelligence.hotspot_status:
            badges.append("Hotspot Location")
        if prop.builder_profile.builder_rank <= 3:
            badges.append("Elite Builder")
        if prop.project_details.status == "new_launch":
            badges.append("New Launch")
        if prop.project_details.green_certified:
            badges.append("Green Certified")
        if prop.pricing_offers.price_trend_direction == "rising":
            badges.append("Trending Up")
        if prop.brickmatrix_scoring.investment_potential >= 8.5:
            badges.append("High ROI")
        return badges[:MAX_BADGES]

    def clear_cache(self):
        self._cache.clear()

    def get_cache_stats(self) -> dict:
        return self._cache.stats()
