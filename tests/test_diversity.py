"""
Tests del servicio de propiedades diversificadas.
"""

import asyncio
import random
from collections import Counter

from brickmatrix.config import Settings
from brickmatrix.models import SmartFilters
from brickmatrix.recommendation import DiversePropertyService, shuffle_and_diversify
from brickmatrix.recommendation.diversity import (
    CREDIBILITY_SCORE_RANGES,
    credibility_badge,
    popularity_tag,
)


def city_filters(city: str) -> SmartFilters:
    return SmartFilters.model_validate({"location_proximity": {"city": city}})


class TestBadgesAndTags:
    def test_credibility_badge(self):
        assert credibility_badge(9.2) == "Excellent"
        assert credibility_badge(8.0) == "Good"
        assert credibility_badge(7.5) == "Average"
        assert credibility_badge(6.9) == "New"

    def test_popularity_tag(self):
        assert popularity_tag(1600) == "Most Viewed"
        assert popularity_tag(1200) == "Hot"
        assert popularity_tag(700) == "Trending"
        assert popularity_tag(500) is None


class TestShuffleAndDiversify:
    def setup_method(self):
        settings = Settings(simulated_latency_scale=0, random_seed=4)
        self.service = DiversePropertyService(settings=settings)
        self.properties = (
            self.service.generate_fallback_properties("Atlantis")
            + self.service.generate_fallback_properties("Atlantis")
        )

    def test_caps_builders_and_segments(self):
        result = shuffle_and_diversify(self.properties, random.Random(1))

        assert len(result) <= 30
        assert max(Counter(p.builder_name for p in result).values()) <= 2
        assert max(Counter(p.segment for p in result).values()) <= 8

    def test_single_builder_is_capped(self):
        same_builder = [p.model_copy(update={"builder_name": "Solo"}) for p in self.properties]
        assert len(shuffle_and_diversify(same_builder, random.Random(1))) == 2

    def test_limit(self):
        assert len(shuffle_and_diversify(self.properties, random.Random(1), limit=5)) <= 5

    def test_empty_input(self):
        assert shuffle_and_diversify([], random.Random(1)) == []


class TestDiversePropertyService:
    def setup_method(self):
        self.settings = Settings(simulated_latency_scale=0, random_seed=8)
        self.service = DiversePropertyService(settings=self.settings)

    def test_default_city_is_mumbai(self):
        properties = asyncio.run(self.service.fetch_diverse_properties())
        assert properties
        assert all(p.city == "Mumbai" for p in properties)

    def test_mumbai_results_are_diverse(self):
        properties = asyncio.run(self.service.fetch_diverse_properties(city_filters("Mumbai")))
        localities = set(self.service.get_localities_for_city("Mumbai")) | {"Adjacent Area"}

        assert len(properties) <= self.settings.diverse_max_results
        assert {p.locality for p in properties} <= localities
        assert max(Counter(p.builder_name for p in properties).values()) <= 2
        assert max(Counter(p.segment for p in properties).values()) <= 8

    def test_ids_are_unique(self):
        properties = asyncio.run(self.service.fetch_diverse_properties(city_filters("Delhi")))
        ids = [p.id for p in properties]
        assert len(ids) == len(set(ids))
        assert all(i.startswith(("diverse_Delhi_", "nearby_Delhi_")) for i in ids)

    def test_alias_city(self):
        properties = asyncio.run(self.service.fetch_diverse_properties(city_filters("bangalore")))
        assert all(p.city == "Bengaluru" for p in properties)

    def test_unknown_city_gets_fallback(self):
        properties = asyncio.run(self.service.fetch_diverse_properties(city_filters("Atlantis")))
        assert len(properties) == 20
        assert all(p.id.startswith("fallback_Atlantis_") for p in properties)
        assert all(p.locality == "Central Area" for p in properties)

    def test_property_invariants(self):
        properties = asyncio.run(self.service.fetch_diverse_properties(city_filters("Mumbai")))

        for prop in properties:
            months = [point.month for point in prop.price_history]
            assert len(months) == 12
            assert months == sorted(months)

            low, high = CREDIBILITY_SCORE_RANGES[prop.builder_type]
            assert low <= prop.builder_credibility.score <= high
            assert prop.builder_credibility.badge == credibility_badge(prop.builder_credibility.score)

            if prop.status == "Under Construction":
                assert prop.possession_date.endswith("-01")
            else:
                assert prop.possession_date is None

            if not prop.rera_status.approved:
                assert prop.rera_status.registration_number == ""

            assert {"Security", "Parking", "Power Backup", "Lift"} <= set(prop.amenities)
            assert 2 <= len(prop.images) <= 4

    def test_geography_lookups(self):
        assert self.service.get_supported_cities() == ["Mumbai", "Delhi", "Bengaluru"]
        assert self.service.get_localities_for_city("Bangalore") == [
            "Whitefield",
            "Electronic City",
            "Koramangala",
        ]
        assert self.service.get_micro_markets_for_locality("Bangalore", "Koramangala")[0] == "5th Block"
        assert self.service.get_micro_markets_for_locality("Mumbai", "Atlantis") == []
        assert self.service.get_localities_for_city("Atlantis") == []
