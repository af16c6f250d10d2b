"""
Tests del servicio de recomendaciones unificado.
"""

import asyncio
from datetime import date

import pytest

from brickmatrix.config import Settings
from brickmatrix.ingestion import MarketplaceFeed
from brickmatrix.models import BudgetRange, UnifiedFilters, UnifiedProperty
from brickmatrix.recommendation import (
    BrickMatrixEngine,
    DiversePropertyService,
    RecommendationError,
    UnifiedRecommendationService,
)
from brickmatrix.recommendation.unified import (
    apply_sorting,
    apply_unified_filters,
    apply_unified_scoring,
    calculate_builder_score,
    calculate_location_score,
    calculate_price_score,
    filters_to_query,
    generate_recommendation,
    possession_sort_key,
)


def make_property(**overrides) -> UnifiedProperty:
    data = {
        "id": "housing_1_0",
        "title": "Godrej Heights",
        "city": "Mumbai",
        "locality": "Powai",
        "price": 20_000_000,
        "price_per_sqft": 18000,
        "area": 1100,
        "bhk": "2BHK",
        "builder_name": "Godrej Properties",
        "status": "Ready",
        "possession_date": "Ready",
        "source": "api",
    }
    data.update(overrides)
    return UnifiedProperty(**data)


class BrokenFeed(MarketplaceFeed):
    async def fetch_unified_listings(self, query=None):
        raise RuntimeError("feed caído")


class BrokenEngine(BrickMatrixEngine):
    async def fetch_recommendations(self, filters):
        raise RecommendationError("sin fuentes")


class BrokenDiversity(DiversePropertyService):
    async def fetch_diverse_properties(self, filters=None):
        raise RuntimeError("sin datos")


class TestFiltersAndQuery:
    def test_filters_to_query(self):
        filters = UnifiedFilters(
            city="Pune",
            budget=BudgetRange(min=1, max=2),
            bhk=["3BHK", "2BHK"],
            builder_name="Kolte",
        )
        query = filters_to_query(filters)
        assert (query.city, query.min_price, query.max_price) == ("Pune", 1, 2)
        assert query.bhk == "3BHK"
        assert query.builder_name == "Kolte"

    def test_apply_unified_filters(self):
        properties = [
            make_property(id="a"),
            make_property(id="b", city="Bengaluru", locality="Whitefield"),
            make_property(id="c", price=90_000_000),
            make_property(id="d", bhk="3BHK", status="under_construction"),
        ]

        by_city = UnifiedFilters(city="bangalore")
        by_budget = UnifiedFilters(budget=BudgetRange(min=0, max=50_000_000))
        by_status = UnifiedFilters(project_status="UNDER_CONSTRUCTION", bhk=["3BHK"])
        by_builder = UnifiedFilters(builder_name="godrej", locality="white")

        assert [p.id for p in apply_unified_filters(properties, by_city)] == ["b"]
        assert [p.id for p in apply_unified_filters(properties, by_budget)] == ["a", "b", "d"]
        assert [p.id for p in apply_unified_filters(properties, by_status)] == ["d"]
        assert [p.id for p in apply_unified_filters(properties, by_builder)] == ["b"]

    def test_city_filter_matches_aliases_on_both_sides(self):
        properties = [
            make_property(id="alias", city="Gurgaon"),
            make_property(id="canonical", city="Gurugram"),
            make_property(id="other", city="Delhi"),
        ]
        filtered = apply_unified_filters(properties, UnifiedFilters(city="GURGAON"))
        assert [p.id for p in filtered] == ["alias", "canonical"]


class TestSorting:
    def test_possession_sort_key(self):
        assert possession_sort_key("Ready to Move") == (0, date.min)
        assert possession_sort_key("Dec 2025") == (1, date(2025, 12, 1))
        assert possession_sort_key("2026-03-01") == (1, date(2026, 3, 1))
        assert possession_sort_key("TBD") == (2, date.max)

    def test_sort_by_possession(self):
        properties = [
            make_property(id="tbd", possession_date="TBD"),
            make_property(id="late", possession_date="2027-01-01"),
            make_property(id="ready", possession_date="Ready"),
            make_property(id="soon", possession_date="Jun 2026"),
        ]
        ordered = apply_sorting(properties, "possession_date")
        assert [p.id for p in ordered] == ["ready", "soon", "late", "tbd"]

    def test_sort_by_price_and_area(self):
        properties = [
            make_property(id="a", price=30, area=900),
            make_property(id="b", price=10, area=1500),
            make_property(id="c", price=20, area=1200),
        ]
        assert [p.id for p in apply_sorting(properties, "price")] == ["b", "c", "a"]
        assert [p.id for p in apply_sorting(properties, "area")] == ["b", "c", "a"]

    def test_sort_by_smart_score(self):
        properties = [
            make_property(id="local", source="local", brick_matrix_score=8.0, price=10),
            make_property(id="api", source="api", brick_matrix_score=8.0, price=50),
            make_property(id="top", source="local", brick_matrix_score=9.1),
            make_property(id="cheap", source="api", brick_matrix_score=8.0, price=5),
        ]
        ordered = apply_sorting(properties, "smart_score")
        assert [p.id for p in ordered] == ["top", "cheap", "api", "local"]


class TestUnifiedScoring:
    def test_factor_scores(self):
        prop = make_property(locality="Bandra West", builder_name="DLF Limited")
        assert calculate_location_score(prop) == 9.0
        assert calculate_builder_score(prop) == 8.5
        assert calculate_location_score(make_property(city="Kochi")) == 6.0
        assert calculate_builder_score(make_property(builder_name="Local Builder")) == 6.0

    @pytest.mark.parametrize(
        "price_per_sqft, expected",
        [(12000, 8.0), (20000, 6.0), (30000, 4.0), (0, 4.0)],
    )
    def test_price_score(self, price_per_sqft, expected):
        assert calculate_price_score(make_property(price_per_sqft=price_per_sqft)) == expected

    def test_recommendation_bands(self):
        assert generate_recommendation(8.5).action == "strong_buy"
        assert generate_recommendation(7.0).action == "buy"
        assert generate_recommendation(6.0).action == "consider"
        assert generate_recommendation(5.9).action == "wait"

    def test_unscored_properties_get_score(self):
        prop = make_property(
            locality="Bandra West",
            builder_name="DLF Limited",
            price_per_sqft=12000,
            amenities=[f"amenity {i}" for i in range(12)],
        )
        scored = apply_unified_scoring([prop])[0]
        assert scored.brick_matrix_score == pytest.approx(8.85, abs=0.06)
        assert scored.recommendation.action == "strong_buy"

    def test_existing_score_is_kept(self):
        prop = make_property(brick_matrix_score=7.3)
        assert apply_unified_scoring([prop])[0] is prop


class TestUnifiedRecommendationService:
    def setup_method(self):
        self.settings = Settings(simulated_latency_scale=0, random_seed=13)
        self.service = UnifiedRecommendationService(settings=self.settings)

    def test_combines_api_and_local(self):
        result = asyncio.run(self.service.get_unified_recommendations(UnifiedFilters(city="Mumbai")))
        metadata = result.metadata

        assert metadata.cache_hit is False
        assert metadata.sources_used == ["housing", "squareyards", "nobroker", "local"]
        assert metadata.api_count > 0
        assert metadata.local_count == 27
        assert metadata.total_count == len(result.properties)
        assert {p.source for p in result.properties} == {"api", "local"}

        scores = [p.brick_matrix_score for p in result.properties]
        assert all(score is not None for score in scores)
        assert scores == sorted(scores, reverse=True)

    def test_second_call_hits_cache(self):
        filters = UnifiedFilters(city="Pune")
        first = asyncio.run(self.service.get_unified_recommendations(filters))
        second = asyncio.run(self.service.get_unified_recommendations(filters))

        assert second.metadata.cache_hit is True
        assert second.metadata.sources_used == ["cache"]
        assert second.properties == first.properties
        assert self.service.get_cache_stats()["size"] == 1

    def test_feed_failure_uses_fallback(self):
        service = UnifiedRecommendationService(
            settings=self.settings,
            feed=BrokenFeed(settings=self.settings),
        )
        result = asyncio.run(
            service.get_unified_recommendations(UnifiedFilters(include_local_data=False))
        )

        assert result.metadata.sources_used == ["fallback"]
        assert result.metadata.api_count == 20
        assert len(result.properties) == 20
        assert all(p.id.startswith("fallback_") for p in result.properties)

    def test_feed_fallback_keeps_alias_city(self):
        service = UnifiedRecommendationService(
            settings=self.settings,
            feed=BrokenFeed(settings=self.settings),
        )
        result = asyncio.run(
            service.get_unified_recommendations(
                UnifiedFilters(city="Bangalore", include_local_data=False)
            )
        )

        assert result.metadata.api_count == 20
        assert len(result.properties) == 20
        assert all(p.city == "Bengaluru" for p in result.properties)

    def test_engine_failure_uses_diversity(self):
        service = UnifiedRecommendationService(
            settings=self.settings,
            brickmatrix=BrokenEngine(settings=self.settings),
        )
        result = asyncio.run(
            service.get_unified_recommendations(
                UnifiedFilters(city="Delhi", include_api_data=False)
            )
        )

        assert result.metadata.local_count > 0
        assert all(p.source == "local" for p in result.properties)
        assert all(p.id.startswith(("diverse_", "nearby_")) for p in result.properties)

    def test_all_local_sources_failing(self):
        service = UnifiedRecommendationService(
            settings=self.settings,
            brickmatrix=BrokenEngine(settings=self.settings),
            diversity=BrokenDiversity(settings=self.settings),
        )
        result = asyncio.run(
            service.get_unified_recommendations(UnifiedFilters(include_api_data=False))
        )

        assert result.properties == []
        assert result.metadata.sources_used == ["local"]
        assert result.metadata.local_count == 0

    def test_search_properties(self):
        result = asyncio.run(self.service.get_unified_recommendations(UnifiedFilters()))
        builder = result.properties[0].builder_name

        matches = asyncio.run(self.service.search_properties(builder.upper()))

        assert matches
        assert all(
            builder.lower() in (p.title + p.locality + p.builder_name).lower() for p in matches
        )

    def test_get_property_by_id(self):
        result = asyncio.run(self.service.get_unified_recommendations(UnifiedFilters(city="Mumbai")))
        wanted = result.properties[-1]

        assert asyncio.run(self.service.get_property_by_id(wanted.id)) == wanted
        assert asyncio.run(self.service.get_property_by_id("missing")) is None
