"""
Servicio de ciudades por tier.

Adapta la búsqueda al tipo de mercado: los tier 1 priorizan ubicación y
departamentos, los tier 3 casas y terrenos.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from brickmatrix.data.catalog import canonical_city

CityTier = Literal[1, 2, 3]


class PriceRangePerSqft(BaseModel):
    min: int
    max: int


class CityData(BaseModel):
    """Ficha de mercado de una ciudad."""

    name: str
    tier: CityTier
    state: str
    preferred_property_types: list[str] = Field(default_factory=list)
    average_price_range: PriceRangePerSqft
    market_characteristics: list[str] = Field(default_factory=list)


def _city(name, tier, state, types, price_min, price_max, characteristics) -> CityData:
    return CityData(
        name=name,
        tier=tier,
        state=state,
        preferred_property_types=types,
        average_price_range=PriceRangePerSqft(min=price_min, max=price_max),
        market_characteristics=characteristics,
    )


CITY_DATABASE = [
    # Tier 1
    _city("Mumbai", 1, "Maharashtra", ["Apartment", "Studio", "Penthouse"],
          15000, 25000, ["High Density", "Premium Market", "Space Constraint"]),
    _city("Bengaluru", 1, "Karnataka", ["Apartment", "Villa", "Gated Community"],
          8000, 15000, ["IT Hub", "Garden City", "Cosmopolitan"]),
    _city("Delhi", 1, "Delhi", ["Apartment", "Builder Floor", "Independent House"],
          12000, 20000, ["Capital City", "Government Hub", "Historical"]),
    _city("Chennai", 1, "Tamil Nadu", ["Apartment", "Villa", "Independent House"],
          6000, 12000, ["Industrial Hub", "Port City", "Cultural Center"]),
    # Tier 2
    _city("Ahmedabad", 2, "Gujarat", ["Apartment", "Row House", "Bungalow"],
          4000, 8000, ["Commercial Hub", "Textile Industry", "Growing IT"]),
    _city("Lucknow", 2, "Uttar Pradesh", ["Apartment", "Independent House", "Villa"],
          3000, 6000, ["Government Seat", "Cultural Heritage", "Emerging IT"]),
    _city("Indore", 2, "Madhya Pradesh", ["Apartment", "Independent House", "Duplex"],
          3500, 7000, ["Commercial Center", "Educational Hub", "Clean City"]),
    _city("Surat", 2, "Gujarat", ["Apartment", "Row House", "Commercial"],
          3000, 6000, ["Diamond Hub", "Textile Center", "Business Friendly"]),
    # Tier 3
    _city("Dehradun", 3, "Uttarakhand", ["Villa", "Independent House", "Plot", "Farm House"],
          2500, 5000, ["Hill Station", "Educational Hub", "Retirement Destination"]),
    _city("Nashik", 3, "Maharashtra", ["Apartment", "Independent House", "Plot", "Villa"],
          2800, 5500, ["Wine Capital", "Religious Tourism", "Industrial Growth"]),
    _city("Kochi", 3, "Kerala", ["Apartment", "Villa", "Waterfront", "Plot"],
          3200, 6500, ["Port City", "IT Growth", "Backwater Tourism"]),
    _city("Trichy", 3, "Tamil Nadu", ["Independent House", "Apartment", "Plot", "Villa"],
          2200, 4500, ["Educational Center", "Temple City", "Industrial Base"]),
]

# Claves que agrega adapt_search_logic según el tier
TIER_ADAPTATIONS = {
    1: {
        "preferred_types": ["Apartment", "Studio", "Penthouse"],
        "prioritize_location": True,
        "space_optimization": True,
    },
    2: {
        "preferred_types": ["Apartment", "Independent House", "Villa"],
        "consider_growth_potential": True,
        "infrastructure_focus": True,
    },
    3: {
        "preferred_types": ["Independent House", "Villa", "Plot", "Farm House"],
        "land_investment_options": True,
        "peaceful_environment": True,
    },
}


class TierCityService:
    """Consultas sobre la base de ciudades soportadas."""

    def __init__(self, cities: Optional[list[CityData]] = None):
        self.cities = cities if cities is not None else CITY_DATABASE

    def get_city_data(self, city_name: str) -> Optional[CityData]:
        """Busca una ciudad sin distinguir mayúsculas; acepta alias (Bangalore, Gurgaon)."""
        wanted = canonical_city(city_name).lower()
        for city in self.cities:
            if city.name.lower() == wanted:
                return city
        return None

    def get_cities_by_tier(self, tier: int) -> list[CityData]:
        return [city for city in self.cities if city.tier == tier]

    def get_city_tier(self, city_name: str) -> int:
        """Tier de la ciudad; las desconocidas se tratan como tier 3."""
        city = self.get_city_data(city_name)
        return city.tier if city else 3

    def get_recommended_property_types(self, city_name: str) -> list[str]:
        city = self.get_city_data(city_name)
        return list(city.preferred_property_types) if city else ["Apartment", "Independent House"]

    def get_price_range(self, city_name: str) -> PriceRangePerSqft:
        city = self.get_city_data(city_name)
        return city.average_price_range if city else PriceRangePerSqft(min=3000, max=6000)

    def get_market_insights(self, city_name: str) -> list[str]:
        city = self.get_city_data(city_name)
        return list(city.market_characteristics) if city else ["Emerging Market"]

    def adapt_search_logic(self, city_name: str, preferences: dict) -> dict:
        """
        Devuelve una copia de las preferencias con ajustes del tier.

        Si la ciudad no se conoce, devuelve las preferencias sin cambios.
        """
        city = self.get_city_data(city_name)
        if not city:
            return preferences

        adapted = dict(preferences)
        adaptation = TIER_ADAPTATIONS[city.tier]
        adapted.update({key: (list(value) if isinstance(value, list) else value)
                        for key, value in adaptation.items()})
        return adapted

    def get_all_supported_cities(self) -> list[CityData]:
        return list(self.cities)

    def search_cities(self, query: str) -> list[CityData]:
        term = query.lower()
        return [
            city for city in self.cities
            if term in city.name.lower() or term in city.state.lower()
        ]


tier_city_service = TierCityService()
