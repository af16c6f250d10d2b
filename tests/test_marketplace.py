"""
Tests del feed unificado de marketplaces.
"""

import asyncio
import random

import pytest

from brickmatrix.config import Settings
from brickmatrix.ingestion import MarketplaceFeed, RateLimiter
from brickmatrix.ingestion.marketplace import (
    MarketplaceSource,
    SquareYardsMarketplaceSource,
    mark_duplicates,
    parse_amenities,
    parse_price,
    standardize_bhk,
    standardize_status,
)
from brickmatrix.models import MarketplaceListing, MarketplaceQuery


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_listing(**overrides) -> MarketplaceListing:
    data = {
        "listing_id": "housing_1_0",
        "project_name": "Godrej Heights",
        "builder": "Godrej Properties",
        "city": "Mumbai",
        "locality": "Powai",
        "price": 20_000_000,
        "bhk": "2BHK",
        "possession_date": "Ready",
        "project_status": "Ready",
        "source": "housing",
    }
    data.update(overrides)
    return MarketplaceListing(**data)


class TestParsers:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("₹1.2 Crore", 12_000_000),
            ("85 Lakh", 8_500_000),
            ("₹1,20,000", 120_000),
            (5000, 5000),
            (None, 0),
            ("precio a consultar", 0),
        ],
    )
    def test_parse_price(self, value, expected):
        assert parse_price(value) == pytest.approx(expected)

    def test_standardize_bhk(self):
        assert standardize_bhk("3 Bedrooms") == "3BHK"
        assert standardize_bhk("2BHK") == "2BHK"
        assert standardize_bhk("") == "Unknown"
        assert standardize_bhk(None) == "Unknown"
        assert standardize_bhk("Studio") == "Studio"

    def test_parse_amenities(self):
        assert parse_amenities("Gym, Pool ,") == ["Gym", "Pool"]
        assert parse_amenities(["Gym", 3, "Spa"]) == ["Gym", "Spa"]
        assert parse_amenities(None) == []

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Ready to Move", "Ready"),
            ("Completed", "Ready"),
            ("Under Construction", "Under Construction"),
            ("New Launch", "New Launch"),
            ("Upcoming", "Planning"),
            (None, "Unknown"),
            ("On Hold", "On Hold"),
        ],
    )
    def test_standardize_status(self, raw, expected):
        assert standardize_status(raw) == expected


class TestRateLimiter:
    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = RateLimiter(max_requests=2, clock=self.clock)

    def test_blocks_after_quota(self):
        assert self.limiter.check("housing") is True
        assert self.limiter.check("housing") is True
        assert self.limiter.check("housing") is False

    def test_window_resets(self):
        self.limiter.check("housing")
        self.limiter.check("housing")
        self.clock.now += 60
        assert self.limiter.check("housing") is True

    def test_sources_are_independent(self):
        self.limiter.check("housing")
        self.limiter.check("housing")
        assert self.limiter.check("nobroker") is True


class TestMarkDuplicates:
    def test_repeats_are_marked_and_sent_last(self):
        original = make_listing(listing_id="a", price=30_000_000)
        repeated = make_listing(listing_id="b", price=10_000_000, project_name="GODREJ HEIGHTS")
        other = make_listing(listing_id="c", price=25_000_000, locality="Worli")

        result = mark_duplicates([original, repeated, other])

        assert [item.listing_id for item in result] == ["c", "a", "b"]
        assert result[2].is_duplicate is True
        assert result[2].duplicate_reason == "Duplicate of project in Powai by Godrej Properties"
        assert not result[0].is_duplicate


class TestSquareYardsSource:
    def test_base_source_is_abstract(self):
        with pytest.raises(TypeError):
            MarketplaceSource(settings=Settings(simulated_latency_scale=0))

    def test_transform_parses_portal_format(self):
        settings = Settings(simulated_latency_scale=0, random_seed=3)
        source = SquareYardsMarketplaceSource(settings=settings, rng=random.Random(3))
        record = source.raw_record("Pune", 0)
        listing = source.transform(record)

        assert isinstance(record["total_price"], str)
        assert listing.listing_id.startswith("squareyards_")
        assert listing.city == "Pune"
        assert listing.bhk in {"1BHK", "2BHK", "3BHK", "4BHK"}
        assert len(listing.amenities) >= 3
        assert listing.coordinates is not None


class TestMarketplaceFeed:
    def setup_method(self):
        self.settings = Settings(simulated_latency_scale=0, random_seed=21)
        self.feed = MarketplaceFeed(settings=self.settings)

    def test_fetch_all_sources(self):
        listings, metadata = asyncio.run(
            self.feed.fetch_unified_listings(MarketplaceQuery(city="Pune"))
        )

        assert metadata.sources_used == ["housing", "squareyards", "nobroker"]
        assert metadata.api_responses == {"housing": True, "squareyards": True, "nobroker": True}
        assert metadata.cache_hit is False
        assert metadata.total_count == len(listings)
        assert 30 <= len(listings) <= 75
        assert all(listing.city == "Pune" for listing in listings)

    def test_duplicates_sorted_last(self):
        listings, _ = asyncio.run(self.feed.fetch_unified_listings(MarketplaceQuery(city="Mumbai")))
        flags = [listing.is_duplicate for listing in listings]
        assert flags == sorted(flags)

    def test_query_fields_are_honored(self):
        query = MarketplaceQuery(city="Delhi", bhk="3BHK", builder_name="DLF Limited")
        listings, _ = asyncio.run(self.feed.fetch_unified_listings(query))
        assert all(listing.bhk == "3BHK" for listing in listings)
        assert all(listing.builder == "DLF Limited" for listing in listings)

    def test_second_fetch_hits_cache(self):
        query = MarketplaceQuery(city="Pune")
        first, _ = asyncio.run(self.feed.fetch_unified_listings(query))
        second, metadata = asyncio.run(self.feed.fetch_unified_listings(query))

        assert metadata.cache_hit is True
        assert metadata.sources_used == ["cache"]
        assert second == first
        assert self.feed.get_cache_stats()["size"] == 1

    def test_rate_limited_sources_are_reported(self):
        feed = MarketplaceFeed(
            settings=self.settings,
            rate_limiter=RateLimiter(max_requests=1, clock=FakeClock()),
        )
        asyncio.run(feed.fetch_unified_listings(MarketplaceQuery(city="Pune")))
        feed.clear_cache()
        listings, metadata = asyncio.run(feed.fetch_unified_listings(MarketplaceQuery(city="Pune")))

        assert listings == []
        assert metadata.sources_used == []
        assert set(metadata.api_responses.values()) == {False}

    def test_fallback_listings_use_canonical_city(self):
        listings = asyncio.run(self.feed.get_fallback_listings(MarketplaceQuery(city="bangalore")))
        assert {listing.city for listing in listings} == {"Bengaluru"}

    def test_fallback_listings(self):
        listings = asyncio.run(self.feed.get_fallback_listings(MarketplaceQuery(city="Kochi")))
        assert len(listings) == 20
        assert all(listing.city == "Kochi" for listing in listings)
        assert all(listing.listing_id.startswith("fallback_") for listing in listings)
