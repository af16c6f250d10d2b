"""
Tests del motor BrickMatrix™.
"""

import asyncio
import random

import pytest

from brickmatrix.config import Settings
from brickmatrix.models import BrickMatrixFilters, BudgetRange
from brickmatrix.recommendation import BrickMatrixEngine, RecommendationError
from brickmatrix.recommendation.brickmatrix import (
    MAX_BADGES,
    BrickMatrixSource,
    MagicBricksMatrixSource,
    calculate_builder_score,
    calculate_location_score,
    calculate_preferences_score,
    calculate_pricing_score,
    calculate_project_score,
)


class BrokenMatrixSource(BrickMatrixSource):
    SOURCE_NAME = "Broken"
    LISTING_COUNT = 5

    def generate(self, city, limit):
        raise RuntimeError("sin respuesta")


def make_filters(**overrides) -> BrickMatrixFilters:
    data = {"budget": BudgetRange(min=18_000_000, max=28_000_000), "city": "Mumbai"}
    data.update(overrides)
    return BrickMatrixFilters(**data)


class TestScoringFunctions:
    def setup_method(self):
        settings = Settings(simulated_latency_scale=0, random_seed=1)
        source = MagicBricksMatrixSource(make_filters(), settings=settings, rng=random.Random(1))
        self.prop = source.generate("Mumbai", 1)[0]

    def test_location_score_is_capped(self):
        location = self.prop.location_intelligence.model_copy(
            update={
                "connectivity_score": 10,
                "infrastructure_score": 10,
                "hotspot_status": True,
                "nearby_schemes_density": 20,
            }
        )
        assert calculate_location_score(location) == 10

    def test_location_score_weights(self):
        location = self.prop.location_intelligence.model_copy(
            update={
                "connectivity_score": 8,
                "infrastructure_score": 9,
                "hotspot_status": False,
                "nearby_schemes_density": 5,
            }
        )
        assert calculate_location_score(location) == pytest.approx(6.9)

    def test_builder_score(self):
        builder = self.prop.builder_profile.model_copy(
            update={
                "delivery_score": 10,
                "avg_rating": 5,
                "builder_rank": 1,
                "market_sentiment_score": 10,
            }
        )
        assert calculate_builder_score(builder) == pytest.approx(8.2)

    def test_project_score(self):
        best = self.prop.project_details.model_copy(
            update={"amenities_score": 9.8, "green_certified": True, "status": "ready"}
        )
        plain = self.prop.project_details.model_copy(
            update={"amenities_score": 8, "green_certified": False, "status": "new_launch"}
        )
        assert calculate_project_score(best) == 10
        assert calculate_project_score(plain) == 8

    def test_pricing_score_centered_budget(self):
        pricing = self.prop.pricing_offers.model_copy(update={"price_trend_direction": "stable"})
        assert calculate_pricing_score(pricing, make_filters()) == pytest.approx(10)

    def test_pricing_score_distant_budget(self):
        filters = make_filters(budget=BudgetRange(min=46_000_000, max=46_000_000))
        stable = self.prop.pricing_offers.model_copy(update={"price_trend_direction": "stable"})
        rising = self.prop.pricing_offers.model_copy(update={"price_trend_direction": "rising"})
        assert calculate_pricing_score(stable, filters) == pytest.approx(5)
        assert calculate_pricing_score(rising, filters) == pytest.approx(6)

    def test_pricing_score_neutral_cases(self):
        no_ranges = self.prop.pricing_offers.model_copy(update={"total_price_range": {}})
        zero_budget = make_filters(budget=BudgetRange(min=0, max=0))
        assert calculate_pricing_score(no_ranges, make_filters()) == 5
        assert calculate_pricing_score(self.prop.pricing_offers, zero_budget) == 5

    def test_preferences_score(self):
        assert calculate_preferences_score({"gym": True}, {}) == 8
        assert calculate_preferences_score({"gym": True}, {"gym": True, "spa": False}) == 10
        assert calculate_preferences_score({"gym": True}, {"gym": True, "spa": True}) == 5


class TestBadges:
    def setup_method(self):
        settings = Settings(simulated_latency_scale=0, random_seed=2)
        source = MagicBricksMatrixSource(make_filters(), settings=settings, rng=random.Random(2))
        self.prop = source.generate("Mumbai", 1)[0]

    def _with(self, hotspot, rank, status, green, trend, investment):
        return self.prop.model_copy(
            update={
                "location_intelligence": self.prop.location_intelligence.model_copy(
                    update={"hotspot_status": hotspot}
                ),
                "builder_profile": self.prop.builder_profile.model_copy(
                    update={"builder_rank": rank}
                ),
                "project_details": self.prop.project_details.model_copy(
                    update={"status": status, "green_certified": green}
                ),
                "pricing_offers": self.prop.pricing_offers.model_copy(
                    update={"price_trend_direction": trend}
                ),
                "brickmatrix_scoring": self.prop.brickmatrix_scoring.model_copy(
                    update={"investment_potential": investment}
                ),
            }
        )

    def test_badges_keep_priority_order(self):
        prop = self._with(True, 1, "new_launch", True, "rising", 9.5)
        badges = BrickMatrixEngine.generate_badges(prop, 9.5)
        assert badges == [
            "BrickMatrix™ Top Choice",
            "Premium Selection",
            "Hotspot Location",
            "Elite Builder",
        ]

    def test_no_badges(self):
        prop = self._with(False, 5, "ready", False, "stable", 7.0)
        assert BrickMatrixEngine.generate_badges(prop, 5.0) == []

    def test_lower_priority_badges(self):
        prop = self._with(False, 5, "new_launch", True, "rising", 9.0)
        assert BrickMatrixEngine.generate_badges(prop, 7.0) == [
            "New Launch",
            "Green Certified",
            "Trending Up",
            "High ROI",
        ]


class TestBrickMatrixEngine:
    def setup_method(self):
        self.settings = Settings(simulated_latency_scale=0, random_seed=9)
        self.engine = BrickMatrixEngine(settings=self.settings)

    def test_fetch_recommendations(self):
        properties = asyncio.run(self.engine.fetch_recommendations(make_filters(city="Bangalore")))

        assert len(properties) == 27
        assert {p.source for p in properties} == {"MagicBricks", "99acres"}
        assert all(p.location_intelligence.city == "Bengaluru" for p in properties)

        scores = [p.brickmatrix_scoring.brickmatrix_score for p in properties]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= score <= 10 for score in scores)

    def test_recommendation_matches_score(self):
        properties = asyncio.run(self.engine.fetch_recommendations(make_filters()))

        for prop in properties:
            scoring = prop.brickmatrix_scoring
            assert len(scoring.badges) <= MAX_BADGES
            if scoring.brickmatrix_score >= 8.5:
                assert scoring.ai_recommendation.action == "strong_buy"
            elif scoring.brickmatrix_score >= 7.5:
                assert scoring.ai_recommendation.action == "buy"
            else:
                assert scoring.ai_recommendation.action == "hold"

    def test_ai_recommendation_bands(self):
        strong = self.engine.generate_ai_recommendation(8.7)
        weak = self.engine.generate_ai_recommendation(3.0)

        assert strong.action == "strong_buy"
        assert 85 <= strong.confidence <= 99
        assert weak.action == "hold"
        assert 50 <= weak.confidence <= 64

    def test_results_are_cached(self):
        filters = make_filters()
        first = asyncio.run(self.engine.fetch_recommendations(filters))
        second = asyncio.run(self.engine.fetch_recommendations(filters))

        assert second is first
        assert self.engine.get_cache_stats()["size"] == 1
        self.engine.clear_cache()
        assert self.engine.get_cache_stats()["size"] == 0

    def test_partial_failure_keeps_other_source(self):
        engine = BrickMatrixEngine(
            settings=self.settings,
            source_classes=[MagicBricksMatrixSource, BrokenMatrixSource],
        )
        properties = asyncio.run(engine.fetch_recommendations(make_filters()))
        assert len(properties) == 15

    def test_all_sources_failing_raises(self):
        engine = BrickMatrixEngine(settings=self.settings, source_classes=[BrokenMatrixSource])
        with pytest.raises(RecommendationError):
            asyncio.run(engine.fetch_recommendations(make_filters()))
