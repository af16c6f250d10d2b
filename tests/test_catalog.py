"""
Tests de las tablas de referencia y la normalización de ciudades.
"""

from brickmatrix.data import canonical_city, get_builders, get_localities, get_market_average_price
from brickmatrix.data import catalog


class TestCanonicalCity:
    def test_resolves_aliases(self):
        assert canonical_city("Bangalore") == "Bengaluru"
        assert canonical_city("bengaluru") == "Bengaluru"
        assert canonical_city("  Gurgaon ") == "Gurugram"
        assert canonical_city("Bombay") == "Mumbai"

    def test_capitalizes_unknown_names(self):
        assert canonical_city("navi mumbai") == "Navi Mumbai"
        assert canonical_city("pune") == "Pune"

    def test_empty_input(self):
        assert canonical_city(None) == ""
        assert canonical_city("") == ""


class TestLookups:
    def test_localities_use_alias(self):
        assert get_localities("Bangalore")[0] == "Whitefield"

    def test_localities_fallback(self):
        assert get_localities("Atlantis") == ["Central Area"]

    def test_builders_unknown_city(self):
        assert get_builders("Atlantis") == []

    def test_market_average_price(self):
        assert get_market_average_price("Mumbai", "2BHK") == 18000
        assert get_market_average_price("bangalore", "3BHK") == 11000
        assert get_market_average_price("Atlantis", "2BHK") == 8000

    def test_tables_keyed_by_canonical_names(self):
        for table in (
            catalog.BUILDERS_BY_CITY,
            catalog.LOCALITIES_BY_CITY,
            catalog.CITY_COORDINATES,
            catalog.GEOGRAPHICAL_ZONES,
        ):
            for city in table:
                assert canonical_city(city) == city
