"""
Servicio de recomendaciones unificado.

Combina el feed de marketplaces ("api") con los motores locales
("local"), aplica filtros comunes, ordena y puntúa todo con el mismo
score BrickMatrix simplificado.
"""

import random
import time
from datetime import date, datetime
from typing import Optional

import structlog

from brickmatrix.cache import TTLCache
from brickmatrix.config import Settings, get_settings
from brickmatrix.data import catalog
from brickmatrix.ingestion.marketplace import MarketplaceFeed
from brickmatrix.models import (
    BrickMatrixFilters,
    BrickMatrixProperty,
    BudgetRange,
    DiverseProperty,
    MarketplaceListing,
    MarketplaceQuery,
    SmartFilters,
    UnifiedFilters,
    UnifiedMetadata,
    UnifiedProperty,
    UnifiedRecommendation,
    UnifiedResult,
)
from brickmatrix.models.user import LocationProximityFilter
from brickmatrix.recommendation.brickmatrix import BrickMatrixEngine
from brickmatrix.recommendation.diversity import DiversePropertyService

logger = structlog.get_logger()

# Defaults del motor local
LOCAL_DEFAULT_BUDGET = BudgetRange(min=1_000_000, max=100_000_000)
LOCAL_DEFAULT_CITY = "Mumbai"
LOCAL_BUILDER_RATING_MIN = 3
LOCAL_DEFAULT_AREA = 1200


class FeedUnavailable(Exception):
    """Ninguna fuente del feed respondió."""


def filters_to_query(filters: UnifiedFilters) -> MarketplaceQuery:
    return MarketplaceQuery(
        city=filters.city,
        min_price=filters.budget.min if filters.budget else None,
        max_price=filters.budget.max if filters.budget else None,
        property_type=filters.property_type,
        builder_name=filters.builder_name,
        bhk=filters.bhk[0] if filters.bhk else None,
        amenities=filters.amenities,
        project_status=filters.project_status,
        possession_date=filters.possession_date,
    )


def from_marketplace(listing: MarketplaceListing) -> UnifiedProperty:
    return UnifiedProperty(
        id=listing.listing_id,
        title=listing.project_name,
        city=listing.city,
        locality=listing.locality,
        price=listing.price,
        price_per_sqft=listing.price_per_sqft or 0,
        area=listing.area or 0,
        bhk=listing.bhk,
        builder_name=listing.builder,
        status=listing.project_status,
        possession_date=listing.possession_date,
        amenities=listing.amenities,
        source="api",
        api_source=listing.source,
        images=listing.images,
        coordinates=listing.coordinates,
        is_duplicate=listing.is_duplicate,
        duplicate_reason=listing.duplicate_reason,
    )


def from_brickmatrix(prop: BrickMatrixProperty) -> UnifiedProperty:
    three_bhk = prop.pricing_offers.total_price_range.get("3BHK")
    ai = prop.brickmatrix_scoring.ai_recommendation
    return UnifiedProperty(
        id=prop.id,
        title=prop.project_details.project_name,
        city=prop.location_intelligence.city,
        locality=prop.location_intelligence.locality,
        price=three_bhk.min if three_bhk else 0,
        price_per_sqft=prop.pricing_offers.price_per_sqft,
        area=LOCAL_DEFAULT_AREA,
        bhk=(prop.project_details.bhk_configurations or ["3BHK"])[0],
        builder_name=prop.builder_profile.builder_name,
        status=prop.project_details.status,
        possession_date=prop.project_details.possession_date,
        amenities=[key for key, present in prop.buyer_preferences.items() if present],
        source="local",
        brick_matrix_score=prop.brickmatrix_scoring.brickmatrix_score,
        recommendation=UnifiedRecommendation(
            action=ai.action, confidence=ai.confidence, reasoning=ai.reasoning
        ),
        coordinates=prop.location_intelligence.coordinates,
    )


def from_diverse(prop: DiverseProperty) -> UnifiedProperty:
    return UnifiedProperty(
        id=prop.id,
        title=prop.title,
        city=prop.city,
        locality=prop.locality,
        price=prop.price,
        price_per_sqft=prop.price_per_sqft,
        area=prop.area,
        bhk=prop.bhk,
        builder_name=prop.builder_name,
        status=prop.status,
        possession_date=prop.possession_date or "TBD",
        amenities=prop.amenities,
        source="local",
        images=prop.images,
        coordinates=prop.coordinates,
    )


def apply_unified_filters(
    properties: list[UnifiedProperty], filters: UnifiedFilters
) -> list[UnifiedProperty]:
    def matches(prop: UnifiedProperty) -> bool:
        if filters.city and _city_key(prop.city) != _city_key(filters.city):
            return False
        if filters.budget and not filters.budget.contains(prop.price):
            return False
        if filters.bhk and prop.bhk not in filters.bhk:
            return False
        if filters.builder_name and filters.builder_name.lower() not in prop.builder_name.lower():
            return False
        if filters.locality and filters.locality.lower() not in prop.locality.lower():
            return False
        if filters.project_status and prop.status.lower() != filters.project_status.lower():
            return False
        return True

    return [prop for prop in properties if matches(prop)]


def _city_key(city: str) -> str:
    return catalog.canonical_city(city).lower()


def possession_sort_key(value: str) -> tuple[int, date]:
    """
    Clave de orden para fechas de posesión.

    "Ready" va primero; luego fechas "Mon YYYY" o ISO; lo que no se puede
    interpretar va al final.
    """
    text = (value or "").strip()
    if text.lower().startswith("ready"):
        return (0, date.min)
    for fmt in ("%Y-%m-%d", "%b %Y", "%B %Y", "%Y-%m"):
        try:
            return (1, datetime.strptime(text, fmt).date())
        except ValueError:
            continue
    return (2, date.max)


def apply_sorting(properties: list[UnifiedProperty], sort_by: str) -> list[UnifiedProperty]:
    if sort_by == "price":
        return sorted(properties, key=lambda p: p.price)
    if sort_by == "area":
        return sorted(properties, key=lambda p: p.area, reverse=True)
    if sort_by == "possession_date":
        return sorted(properties, key=lambda p: possession_sort_key(p.possession_date))
    # smart_score: score desc, api antes que local, precio asc
    return sorted(
        properties,
        key=lambda p: (-(p.brick_matrix_score or 0), p.source != "api", p.price),
    )


def calculate_location_score(prop: UnifiedProperty) -> float:
    score = 6.0
    if catalog.canonical_city(prop.city) in catalog.UNIFIED_TIER1_CITIES:
        score += 2.0
    if any(locality in prop.locality for locality in catalog.UNIFIED_PREMIUM_LOCALITIES):
        score += 1.0
    return min(10, score)


def calculate_builder_score(prop: UnifiedProperty) -> float:
    score = 6.0
    if any(builder in prop.builder_name for builder in catalog.PREMIUM_BUILDERS):
        score += 2.5
    return min(10, score)


def calculate_price_score(prop: UnifiedProperty) -> float:
    if 0 < prop.price_per_sqft < 15000:
        return 8.0
    if 0 < prop.price_per_sqft < 25000:
        return 6.0
    return 4.0


def calculate_amenity_score(prop: UnifiedProperty) -> float:
    return min(10, len(prop.amenities))


def generate_recommendation(score: float) -> UnifiedRecommendation:
    if score >= 8.5:
        return UnifiedRecommendation(
            action="strong_buy",
            confidence=90,
            reasoning="Excellent unified analysis with outstanding metrics",
        )
    if score >= 7.0:
        return UnifiedRecommendation(
            action="buy",
            confidence=75,
            reasoning="Good unified recommendation with solid fundamentals",
        )
    if score >= 6.0:
        return UnifiedRecommendation(
            action="consider",
            confidence=60,
            reasoning="Average unified metrics, consider other options",
        )
    return UnifiedRecommendation(
        action="wait",
        confidence=40,
        reasoning="Below average unified score, wait for better opportunities",
    )


def apply_unified_scoring(properties: list[UnifiedProperty]) -> list[UnifiedProperty]:
    """Puntúa los registros que no traen score (o lo traen en 0)."""
    scored = []
    for prop in properties:
        if prop.brick_matrix_score:
            scored.append(prop)
            continue

        score = round(
            calculate_location_score(prop) * 0.3
            + calculate_builder_score(prop) * 0.3
            + calculate_price_score(prop) * 0.2
            + calculate_amenity_score(prop) * 0.2,
            1,
        )
        scored.append(
            prop.model_copy(
                update={
                    "brick_matrix_score": score,
                    "recommendation": generate_recommendation(score),
                }
            )
        )
    return scored


class UnifiedRecommendationService:
    """
    Punto de entrada de recomendaciones combinadas.

    Flujo:
    1. Buscar en cache por filtros
    2. Feed de marketplaces (con fallback si no responde)
    3. Motor BrickMatrix, o el servicio de diversidad si falla
    4. Filtrar, puntuar, ordenar y cachear
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        feed: Optional[MarketplaceFeed] = None,
        brickmatrix: Optional[BrickMatrixEngine] = None,
        diversity: Optional[DiversePropertyService] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.feed = feed or MarketplaceFeed(settings=self.settings, rng=self.rng)
        self.brickmatrix = brickmatrix or BrickMatrixEngine(settings=self.settings, rng=self.rng)
        self.diversity = diversity or DiversePropertyService(settings=self.settings, rng=self.rng)
        self._cache = TTLCache(self.settings.cache_ttl_seconds)

    async def get_unified_recommendations(
        self, filters: Optional[UnifiedFilters] = None
    ) -> UnifiedResult:
        filters = filters or UnifiedFilters()
        start = time.monotonic()

        cache_key = filters.cache_key()
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("Devolviendo recomendaciones unificadas cacheadas", total=len(cached))
            return UnifiedResult(
                properties=cached,
                metadata=UnifiedMetadata(
                    total_count=len(cached),
                    api_count=sum(1 for p in cached if p.source == "api"),
                    local_count=sum(1 for p in cached if p.source == "local"),
                    sources_used=["cache"],
                    processing_time_ms=_elapsed_ms(start),
                    cache_hit=True,
                ),
            )

        properties: list[UnifiedProperty] = []
        sources_used: list[str] = []
        api_count = 0
        local_count = 0

        if filters.include_api_data:
            api_properties, api_sources = await self._fetch_api_properties(filters)
            properties.extend(api_properties)
            sources_used.extend(api_sources)
            api_count = len(api_properties)

        if filters.include_local_data:
            local_properties = await self._fetch_local_properties(filters)
            properties.extend(local_properties)
            sources_used.append("local")
            local_count = len(local_properties)

        filtered = apply_unified_filters(properties, filters)
        scored = apply_unified_scoring(filtered)
        ordered = apply_sorting(scored, filters.sort_by)

        self._cache.set(cache_key, ordered)

        metadata = UnifiedMetadata(
            total_count=len(ordered),
            api_count=api_count,
            local_count=local_count,
            sources_used=sources_used,
            processing_time_ms=_elapsed_ms(start),
            cache_hit=False,
        )
        logger.info(
            "Recomendaciones unificadas completadas",
            total=metadata.total_count,
            api=api_count,
            local=local_count,
            ms=metadata.processing_time_ms,
        )
        return UnifiedResult(properties=ordered, metadata=metadata)

    async def _fetch_api_properties(
        self, filters: UnifiedFilters
    ) -> tuple[list[UnifiedProperty], list[str]]:
        query = filters_to_query(filters)
        try:
            listings, metadata = await self.feed.fetch_unified_listings(query)
            if not metadata.sources_used:
                raise FeedUnavailable("Ninguna fuente del feed respondió")
        except Exception as e:
            logger.warning("Feed de marketplaces fallido, usando fallback", error=str(e))
            listings = await self.feed.get_fallback_listings(query)
            return [from_marketplace(listing) for listing in listings], ["fallback"]

        logger.info(
            "Feed de marketplaces obtenido",
            count=len(listings),
            sources=metadata.sources_used,
        )
        return [from_marketplace(listing) for listing in listings], list(metadata.sources_used)

    async def _fetch_local_properties(self, filters: UnifiedFilters) -> list[UnifiedProperty]:
        matrix_filters = BrickMatrixFilters(
            budget=filters.budget or LOCAL_DEFAULT_BUDGET,
            city=filters.city or LOCAL_DEFAULT_CITY,
            bhk=filters.bhk,
            property_type=filters.property_type,
            builder_rating_min=LOCAL_BUILDER_RATING_MIN,
        )
        try:
            properties = await self.brickmatrix.fetch_recommendations(matrix_filters)
            return [from_brickmatrix(prop) for prop in properties]
        except Exception as e:
            logger.warning("Motor BrickMatrix fallido, usando diversidad", error=str(e))

        try:
            diverse = await self.diversity.fetch_diverse_properties(
                SmartFilters(location_proximity=LocationProximityFilter(city=filters.city))
            )
            return [from_diverse(prop) for prop in diverse]
        except Exception as e:
            logger.warning("Servicio de diversidad fallido", error=str(e))
            return []

    async def search_properties(
        self, query: str, filters: Optional[UnifiedFilters] = None
    ) -> list[UnifiedProperty]:
        """Busca texto en título, localidad o builder sobre ambas fuentes."""
        search_filters = (filters or UnifiedFilters()).model_copy(
            update={"include_api_data": True, "include_local_data": True}
        )
        result = await self.get_unified_recommendations(search_filters)

        term = query.lower()
        return [
            prop for prop in result.properties
            if term in prop.title.lower()
            or term in prop.locality.lower()
            or term in prop.builder_name.lower()
        ]

    async def get_property_by_id(self, property_id: str) -> Optional[UnifiedProperty]:
        for cached in self._cache.values():
            for prop in cached:
                if prop.id == property_id:
                    return prop

        result = await self.get_unified_recommendations(UnifiedFilters())
        return next((p for p in result.properties if p.id == property_id), None)

    def clear_cache(self):
        self._cache.clear()

    def get_cache_stats(self) -> dict:
        return self._cache.stats()


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
