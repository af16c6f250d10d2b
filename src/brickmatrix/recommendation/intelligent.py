"""
Motor de recomendaciones inteligente.

Implementa:
- Ingesta multi-portal como fuente de listings
- Smart filters excluyentes (precio, ciudad, BHK, builder, RERA, verificados)
- Scores por factor: credibilidad del builder, tendencia de la localidad,
  valor del precio, alineación con el usuario y popularidad
- Ranking y capa final de títulos y razones
"""

import random
from dataclasses import dataclass
from typing import Optional

import structlog

from brickmatrix.config import Settings, get_settings
from brickmatrix.data import catalog
from brickmatrix.ingestion.base import simulate_latency
from brickmatrix.ingestion.pipeline import RealEstateDataIngestion
from brickmatrix.models import (
    BuilderTrackRecord,
    EnhancedRecommendation,
    PropertyListing,
    RecommendationScore,
    SmartFilters,
    UserIntent,
)
from brickmatrix.models.listing import Coordinates

logger = structlog.get_logger()

INGESTION_LIMIT_PER_SOURCE = 100

# Latencias simuladas del análisis (segundos)
BUILDER_ANALYSIS_DELAY = 0.1
LOCATION_ANALYSIS_DELAY = 0.05


@dataclass
class BuilderIntelligence:
    """Datos cacheados de un builder en una ciudad."""

    score: float
    on_time_delivery: int
    quality_rating: float
    customer_satisfaction: int


def apply_smart_filters(
    listings: list[PropertyListing], filters: SmartFilters
) -> list[PropertyListing]:
    """Descarta los listings que no cumplen algún filtro activo."""
    filtered = list(listings)

    price_range = filters.price_finance.price_range
    if price_range:
        filtered = [l for l in filtered if price_range.contains(l.price)]

    city = filters.location_proximity.city
    if city:
        city = catalog.canonical_city(city)
        filtered = [l for l in filtered if l.city == city]

    bhk_range = filters.property_specs.bhk_range
    if bhk_range:
        filtered = [l for l in filtered if l.bhk_config in bhk_range]

    builder_search = filters.builder_project.builder_search
    if builder_search:
        term = builder_search.lower()
        filtered = [l for l in filtered if term in l.builder_name.lower()]

    if filters.property_specs.rera_approved:
        filtered = [l for l in filtered if l.rera_id]

    if filters.builder_project.verified_only:
        filtered = [l for l in filtered if l.verified_listing]

    return filtered


def calculate_price_value_score(listing: PropertyListing, city: str) -> float:
    deviation = _market_deviation(listing, city)
    if deviation < -0.15:
        return 9.5
    if deviation < -0.05:
        return 8.5
    if deviation < 0.05:
        return 7.5
    if deviation < 0.15:
        return 6.0
    return 4.0


def calculate_price_comparison(listing: PropertyListing, city: str) -> str:
    deviation = _market_deviation(listing, city)
    if deviation < -0.05:
        return "Below Market"
    if deviation > 0.05:
        return "Above Market"
    return "Market Rate"


def _market_deviation(listing: PropertyListing, city: str) -> float:
    average = catalog.get_market_average_price(city, listing.bhk_config)
    return (listing.price_per_sqft - average) / average


def calculate_user_alignment_score(listing: PropertyListing, intent: UserIntent) -> float:
    score = 5.0

    if intent.budget.contains(listing.price):
        score += 2.0
    elif listing.price < intent.budget.min:
        # Por debajo del presupuesto también suma
        score += 1.0

    if listing.locality in intent.preferred_localities:
        score += 1.5
    if listing.bhk_config in intent.bhk_preference:
        score += 1.0
    if listing.builder_name in intent.builder_preference:
        score += 0.5

    return min(10, score)


def calculate_project_popularity_score(listing: PropertyListing) -> float:
    score = 6.0
    if listing.platform_rating and listing.platform_rating > 4.0:
        score += 1.5
    if listing.verified_listing:
        score += 1.0
    if listing.listing_age_days < 7:
        score += 0.5
    if listing.rera_id:
        score += 1.0
    return min(10, score)


def calculate_investment_grade(score: float) -> str:
    if score >= 9.0:
        return "A+"
    if score >= 8.0:
        return "A"
    if score >= 7.0:
        return "B+"
    if score >= 6.0:
        return "B"
    return "C"


def calculate_trending_status(location_score: float, popularity_score: float) -> str:
    combined = (location_score + popularity_score) / 2
    if combined >= 8.5:
        return "Hot"
    if combined >= 7.5:
        return "Trending"
    if combined >= 6.0:
        return "Stable"
    return "Cooling"


def generate_recommendation_reason(score: RecommendationScore) -> str:
    reasons = []
    if score.builder_credibility >= 8.5:
        reasons.append("Excellent builder track record")
    if score.location_trend >= 8.0:
        reasons.append("High-growth locality")
    if score.price_value >= 8.0:
        reasons.append("Great value for money")
    if score.user_alignment >= 8.0:
        reasons.append("Perfect match for your preferences")
    return " • ".join(reasons) or "Good overall fundamentals"


def generate_intelligent_title(rec: EnhancedRecommendation) -> str:
    prefix = ""
    if rec.investment_grade == "A+" and rec.trending_status == "Hot":
        prefix = "🔥 Premium "
    elif rec.investment_grade == "A" and rec.trending_status == "Trending":
        prefix = "⭐ Elite "
    elif rec.verified_listing:
        prefix = "✅ Verified "
    return f"{prefix}{rec.bhk_config} in {rec.locality}"


def default_user_intent() -> UserIntent:
    """Intención por defecto: 50 L - 5 Cr, 2 o 3 BHK."""
    return UserIntent()


class IntelligentRecommendationEngine:
    """
    Motor de recomendaciones sobre la ingesta en tiempo real.

    Flujo:
    1. Ingerir listings de todos los portales
    2. Aplicar smart filters
    3. Calcular scores por factor y score global
    4. Ordenar por score global y alineación con el usuario
    5. Generar títulos y razones finales
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        ingestion: Optional[RealEstateDataIngestion] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.ingestion = ingestion or RealEstateDataIngestion(
            settings=self.settings, rng=self.rng
        )
        self._builder_intelligence: dict[str, BuilderIntelligence] = {}
        self._market_trends: dict[str, float] = {}

    async def generate_recommendations(
        self,
        city: str,
        user_intent: Optional[UserIntent] = None,
        smart_filters: Optional[SmartFilters] = None,
    ) -> list[EnhancedRecommendation]:
        """
        Genera recomendaciones rankeadas para una ciudad.

        Args:
            city: Ciudad a consultar
            user_intent: Intención del usuario (default: 50 L - 5 Cr, 2/3 BHK)
            smart_filters: Filtros excluyentes

        Returns:
            Hasta ``intelligent_max_results`` recomendaciones
        """
        city = catalog.canonical_city(city)
        user_intent = user_intent or default_user_intent()
        smart_filters = smart_filters or SmartFilters()

        logger.info("Generando recomendaciones inteligentes", city=city)

        raw_listings = await self.ingestion.ingest_from_all_sources(
            city, INGESTION_LIMIT_PER_SOURCE
        )
        filtered = apply_smart_filters(raw_listings, smart_filters)

        scored = []
        for listing in filtered:
            scored.append(await self._score_listing(listing, user_intent, city))

        ranked = self.rank_by_user_intent(scored)
        final = [self._apply_final_intelligence(rec) for rec in ranked]

        logger.info(
            "Recomendaciones inteligentes generadas",
            city=city,
            ingested=len(raw_listings),
            filtered=len(filtered),
            total=len(final),
        )
        return final[: self.settings.intelligent_max_results]

    async def _score_listing(
        self, listing: PropertyListing, intent: UserIntent, city: str
    ) -> EnhancedRecommendation:
        builder = await self._builder_intelligence_for(listing.builder_name, city)
        location_trend = await self.calculate_location_trend_score(listing.locality, city)
        price_value = calculate_price_value_score(listing, city)
        user_alignment = calculate_user_alignment_score(listing, intent)
        popularity = calculate_project_popularity_score(listing)

        overall = round(
            builder.score * 0.25
            + location_trend * 0.25
            + price_value * 0.20
            + user_alignment * 0.20
            + popularity * 0.10,
            1,
        )
        score = RecommendationScore(
            overall=overall,
            builder_credibility=builder.score,
            location_trend=location_trend,
            price_value=price_value,
            user_alignment=user_alignment,
            project_popularity=popularity,
        )

        return EnhancedRecommendation(
            id=listing.id,
            title=f"{listing.bhk_config} in {listing.locality}",
            builder_name=listing.builder_name,
            project_name=listing.project_name,
            city=listing.city,
            locality=listing.locality,
            price=listing.price,
            price_per_sqft=listing.price_per_sqft,
            carpet_area=listing.carpet_area,
            bhk_config=listing.bhk_config,
            possession_date=listing.possession_date,
            rera_id=listing.rera_id,
            verified_listing=listing.verified_listing,
            source=listing.source,
            images=listing.images,
            amenities=listing.amenities,
            coordinates=Coordinates(lat=listing.latitude, lng=listing.longitude),
            recommendation_score=score,
            recommendation_reason=generate_recommendation_reason(score),
            investment_grade=calculate_investment_grade(overall),
            trending_status=calculate_trending_status(location_trend, popularity),
            user_match_percentage=round(user_alignment * 10),
            price_comparison=calculate_price_comparison(listing, city),
            builder_track_record=BuilderTrackRecord(
                on_time_delivery=builder.on_time_delivery,
                quality_rating=builder.quality_rating,
                customer_satisfaction=builder.customer_satisfaction,
            ),
        )

    async def calculate_builder_credibility_score(self, builder_name: str, city: str) -> float:
        builder = await self._builder_intelligence_for(builder_name, city)
        return builder.score

    async def _builder_intelligence_for(
        self, builder_name: str, city: str
    ) -> BuilderIntelligence:
        key = f"{builder_name}_{city}"
        cached = self._builder_intelligence.get(key)
        if cached:
            return cached

        await simulate_latency(BUILDER_ANALYSIS_DELAY, self.settings)

        is_local = builder_name in catalog.get_builders(city)
        score = (8.5 if is_local else 6.5) + self.rng.random() * 1.5
        builder = BuilderIntelligence(
            score=min(10, score),
            on_time_delivery=self.rng.randrange(30) + 70,
            quality_rating=round(self.rng.random() * 2 + 3.5, 1),
            customer_satisfaction=self.rng.randrange(25) + 75,
        )
        self._builder_intelligence[key] = builder
        return builder

    async def calculate_location_trend_score(self, locality: str, city: str) -> float:
        key = f"{locality}_{city}"
        cached = self._market_trends.get(key)
        if cached:
            return cached

        await simulate_latency(LOCATION_ANALYSIS_DELAY, self.settings)

        is_premium = locality in catalog.PREMIUM_TREND_LOCALITIES.get(city, [])
        score = min(10, (8.5 if is_premium else 7.0) + self.rng.random() * 1.5)
        self._market_trends[key] = score
        return score

    @staticmethod
    def rank_by_user_intent(
        recommendations: list[EnhancedRecommendation],
    ) -> list[EnhancedRecommendation]:
        """Score global descendente; desempata la alineación con el usuario."""
        return sorted(
            recommendations,
            key=lambda rec: (
                rec.recommendation_score.overall,
                rec.recommendation_score.user_alignment,
            ),
            reverse=True,
        )

    @staticmethod
    def _apply_final_intelligence(rec: EnhancedRecommendation) -> EnhancedRecommendation:
        reason = (
            f"{rec.recommendation_reason} • {rec.investment_grade} investment grade"
            f" • {rec.user_match_percentage}% user match"
        )
        return rec.model_copy(
            update={
                "title": generate_intelligent_title(rec),
                "recommendation_reason": reason,
            }
        )

    async def get_top_picks(
        self,
        city: str,
        user_intent: Optional[UserIntent] = None,
        smart_filters: Optional[SmartFilters] = None,
    ) -> list[EnhancedRecommendation]:
        recommendations = await self.generate_recommendations(city, user_intent, smart_filters)
        return [r for r in recommendations if r.recommendation_score.overall >= 8.0][:10]

    async def get_verified_builder_listings(
        self, city: str, smart_filters: Optional[SmartFilters] = None
    ) -> list[EnhancedRecommendation]:
        recommendations = await self.generate_recommendations(
            city, default_user_intent(), smart_filters
        )
        return [
            r for r in recommendations
            if r.verified_listing and r.recommendation_score.builder_credibility >= 8.0
        ][:15]

    async def get_trending_in_city(
        self, city: str, smart_filters: Optional[SmartFilters] = None
    ) -> list[EnhancedRecommendation]:
        recommendations = await self.generate_recommendations(
            city, default_user_intent(), smart_filters
        )
        return [r for r in recommendations if r.trending_status in ("Hot", "Trending")][:12]

    def clear_cache(self):
        self._builder_intelligence.clear()
        self._market_trends.clear()
