"""
Tests del servicio de ciudades por tier.
"""

from brickmatrix.cities import TierCityService


class TestTierCityService:
    def setup_method(self):
        self.service = TierCityService()

    def test_city_lookup_is_case_insensitive(self):
        assert self.service.get_city_data("MUMBAI").name == "Mumbai"

    def test_city_lookup_resolves_alias(self):
        city = self.service.get_city_data("bangalore")
        assert city.name == "Bengaluru"
        assert city.tier == 1

    def test_unknown_city(self):
        assert self.service.get_city_data("Atlantis") is None

    def test_database_size(self):
        assert len(self.service.get_all_supported_cities()) == 12

    def test_cities_by_tier(self):
        names = {city.name for city in self.service.get_cities_by_tier(2)}
        assert names == {"Ahmedabad", "Lucknow", "Indore", "Surat"}

    def test_city_tier(self):
        assert self.service.get_city_tier("Delhi") == 1
        assert self.service.get_city_tier("Kochi") == 3
        assert self.service.get_city_tier("Atlantis") == 3

    def test_defaults_for_unknown_city(self):
        assert self.service.get_recommended_property_types("Atlantis") == [
            "Apartment",
            "Independent House",
        ]
        price_range = self.service.get_price_range("Atlantis")
        assert (price_range.min, price_range.max) == (3000, 6000)
        assert self.service.get_market_insights("Atlantis") == ["Emerging Market"]

    def test_price_range_for_known_city(self):
        price_range = self.service.get_price_range("Mumbai")
        assert (price_range.min, price_range.max) == (15000, 25000)

    def test_adapt_tier1(self):
        preferences = {"budget": 100}
        adapted = self.service.adapt_search_logic("Mumbai", preferences)

        assert adapted["budget"] == 100
        assert adapted["preferred_types"] == ["Apartment", "Studio", "Penthouse"]
        assert adapted["prioritize_location"] is True
        assert adapted["space_optimization"] is True
        assert "preferred_types" not in preferences

    def test_adapt_tier2(self):
        adapted = self.service.adapt_search_logic("Indore", {})
        assert adapted["consider_growth_potential"] is True
        assert adapted["infrastructure_focus"] is True

    def test_adapt_tier3(self):
        adapted = self.service.adapt_search_logic("Dehradun", {})
        assert adapted["preferred_types"] == ["Independent House", "Villa", "Plot", "Farm House"]
        assert adapted["land_investment_options"] is True
        assert adapted["peaceful_environment"] is True

    def test_adapt_unknown_city_returns_input(self):
        preferences = {"budget": 100}
        assert self.service.adapt_search_logic("Atlantis", preferences) is preferences

    def test_search_by_state(self):
        names = {city.name for city in self.service.search_cities("gujarat")}
        assert names == {"Ahmedabad", "Surat"}

    def test_search_by_name(self):
        names = [city.name for city in self.service.search_cities("chen")]
        assert names == ["Chennai"]
