"""
Servicio de propiedades diversificadas.

Genera propiedades por localidad y micro mercado con mezcla de tipos de
builder, segmentos de precio y tipos de publicación, y limita la
repetición de builders y segmentos en el resultado.
"""

import random
import string
import time
from datetime import date, datetime, timedelta
from typing import Optional

import structlog

from brickmatrix.config import Settings, get_settings
from brickmatrix.data import catalog
from brickmatrix.models import DiverseProperty, SmartFilters
from brickmatrix.models.diverse import (
    BuilderCredibility,
    ListingMetadata,
    PricePoint,
    ReraStatus,
)
from brickmatrix.models.listing import Coordinates

logger = structlog.get_logger()

DEFAULT_CITY = "Mumbai"
MIN_PROPERTIES_BEFORE_ALTERNATIVES = 15
FALLBACK_PROPERTY_COUNT = 20

# Pesos de los sorteos
BUILDER_TYPE_WEIGHTS = {"National": 0.3, "Regional": 0.35, "Local": 0.25, "Boutique": 0.1}
SEGMENT_WEIGHTS = {"Affordable": 0.4, "Mid-Range": 0.35, "Premium": 0.2, "Ultra-Premium": 0.05}
LISTING_TYPE_WEIGHTS = {"Owner": 0.25, "Broker": 0.4, "Builder": 0.25, "Platform": 0.1}
STATUS_WEIGHTS = {"Ready": 0.4, "Under Construction": 0.3, "New Launch": 0.15, "Resale": 0.15}
BHK_WEIGHTS = {"1BHK": 0.15, "2BHK": 0.35, "3BHK": 0.35, "4BHK": 0.12, "5BHK": 0.03}

CREDIBILITY_SCORE_RANGES = {
    "National": (8.5, 9.5),
    "Regional": (7.5, 8.8),
    "Local": (6.5, 8.0),
    "Boutique": (7.0, 9.0),
}

BASE_AMENITIES = ["Security", "Parking", "Power Backup", "Lift"]
IMAGE_IDS = ["1560518560518", "1560518560519", "1560518560520", "1560518560521", "1560518560522"]


def credibility_badge(score: float) -> str:
    if score >= 9.0:
        return "Excellent"
    if score >= 8.0:
        return "Good"
    if score >= 7.0:
        return "Average"
    return "New"


def popularity_tag(view_count: int) -> Optional[str]:
    if view_count > 1500:
        return "Most Viewed"
    if view_count > 1000:
        return "Hot"
    if view_count > 500:
        return "Trending"
    return None


def shuffle_and_diversify(
    properties: list[DiverseProperty],
    rng: Optional[random.Random] = None,
    limit: int = 30,
    max_per_builder: int = 2,
    max_per_segment: int = 8,
) -> list[DiverseProperty]:
    """
    Mezcla las propiedades y admite cada una mientras su builder y su
    segmento no superen los topes.
    """
    rng = rng or random.Random()
    shuffled = list(properties)
    rng.shuffle(shuffled)

    diversified = []
    builder_counts: dict[str, int] = {}
    segment_counts: dict[str, int] = {}
    for prop in shuffled:
        if len(diversified) >= limit:
            break
        builder_count = builder_counts.get(prop.builder_name, 0)
        segment_count = segment_counts.get(prop.segment, 0)
        if builder_count < max_per_builder and segment_count < max_per_segment:
            diversified.append(prop)
            builder_counts[prop.builder_name] = builder_count + 1
            segment_counts[prop.segment] = segment_count + 1

    return diversified


class DiversePropertyService:
    """Generador de resultados variados por zona geográfica."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.zones = catalog.GEOGRAPHICAL_ZONES

    async def fetch_diverse_properties(
        self, filters: Optional[SmartFilters] = None
    ) -> list[DiverseProperty]:
        """
        Genera propiedades para la ciudad de los filtros (default Mumbai).

        Las ciudades sin datos geográficos reciben 20 propiedades genéricas
        sin diversificar.
        """
        filters = filters or SmartFilters()
        city = catalog.canonical_city(filters.location_proximity.city) or DEFAULT_CITY

        city_zones = self.zones.get(city)
        if not city_zones:
            logger.info("Ciudad sin datos geográficos, usando fallback", city=city)
            return self.generate_fallback_properties(city)

        properties: list[DiverseProperty] = []
        for localities in city_zones.values():
            for locality, (micro_markets, coordinates) in localities.items():
                properties.extend(
                    self._generate_locality_properties(city, locality, micro_markets, coordinates)
                )

        if len(properties) < MIN_PROPERTIES_BEFORE_ALTERNATIVES:
            properties.extend(self._generate_nearby_alternatives(city))

        diversified = shuffle_and_diversify(
            properties, self.rng, limit=self.settings.diverse_max_results
        )
        logger.info(
            "Propiedades diversificadas",
            city=city,
            generated=len(properties),
            total=len(diversified),
        )
        return diversified

    def _generate_locality_properties(
        self,
        city: str,
        locality: str,
        micro_markets: list[str],
        coordinates: tuple[float, float],
    ) -> list[DiverseProperty]:
        timestamp = int(time.time() * 1000)
        locality_slug = locality.lower().replace(" ", "-")
        properties = []
        for i in range(self.rng.randint(2, 5)):
            micro_market = self.rng.choice(micro_markets)
            builder_type = self._weighted(BUILDER_TYPE_WEIGHTS)
            segment = self._weighted(SEGMENT_WEIGHTS)
            status = self._weighted(STATUS_WEIGHTS)
            adjective = self.rng.choice(catalog.SEGMENT_ADJECTIVES[segment])
            lat, lng = coordinates

            properties.append(
                DiverseProperty(
                    id=f"diverse_{city}_{locality_slug}_{timestamp}_{i}",
                    title=f"{adjective} Home in {micro_market}, {locality}",
                    city=city,
                    locality=locality,
                    micro_market=micro_market,
                    price=self._price_by_segment(segment, city),
                    price_per_sqft=self._price_per_sqft(segment, city),
                    area=self._area(),
                    bhk=self._weighted(BHK_WEIGHTS),
                    builder_name=self.rng.choice(catalog.DIVERSE_BUILDERS[builder_type]),
                    builder_type=builder_type,
                    builder_credibility=self._builder_credibility(builder_type),
                    listing_type=self._weighted(LISTING_TYPE_WEIGHTS),
                    property_age=self._property_age(status),
                    status=status,
                    segment=segment,
                    rera_status=self._rera_status(),
                    price_history=self._price_history(),
                    metadata=self._metadata(),
                    amenities=self._amenities(segment),
                    images=self._images(),
                    possession_date=(
                        self._possession_date() if status == "Under Construction" else None
                    ),
                    coordinates=Coordinates(
                        lat=lat + (self.rng.random() - 0.5) * 0.01,
                        lng=lng + (self.rng.random() - 0.5) * 0.01,
                    ),
                )
            )
        return properties

    def _generate_nearby_alternatives(self, city: str) -> list[DiverseProperty]:
        timestamp = int(time.time() * 1000)
        alternatives = []
        for i in range(self.rng.randint(3, 7)):
            view_count = self.rng.randrange(500) + 100
            alternatives.append(
                DiverseProperty(
                    id=f"nearby_{city}_{timestamp}_{i}",
                    title=f"Nearby Alternative in {city}",
                    city=city,
                    locality="Adjacent Area",
                    micro_market="Nearby Location",
                    price=self._price_by_segment("Mid-Range", city),
                    price_per_sqft=self._price_per_sqft("Mid-Range", city),
                    area=self._area(),
                    bhk=self._weighted(BHK_WEIGHTS),
                    builder_name=self.rng.choice(catalog.DIVERSE_BUILDERS["Regional"]),
                    builder_type="Regional",
                    builder_credibility=self._builder_credibility("Regional"),
                    listing_type="Broker",
                    property_age=self.rng.randrange(5),
                    status="Ready",
                    segment="Mid-Range",
                    rera_status=self._rera_status(),
                    price_history=self._price_history(),
                    metadata=ListingMetadata(
                        view_count=view_count,
                        verified_tag=self.rng.random() > 0.3,
                        last_updated=datetime.utcnow().isoformat(),
                    ),
                    amenities=self._amenities("Mid-Range"),
                    images=self._images(),
                    coordinates=Coordinates(),
                )
            )
        return alternatives

    def generate_fallback_properties(self, city: str) -> list[DiverseProperty]:
        timestamp = int(time.time() * 1000)
        properties = []
        for i in range(FALLBACK_PROPERTY_COUNT):
            segment = self._weighted(SEGMENT_WEIGHTS)
            builder_type = self._weighted(BUILDER_TYPE_WEIGHTS)
            properties.append(
                DiverseProperty(
                    id=f"fallback_{city}_{timestamp}_{i}",
                    title=f"Property in {city}",
                    city=city,
                    locality="Central Area",
                    micro_market="Main Market",
                    price=self._price_by_segment(segment, city),
                    price_per_sqft=self._price_per_sqft(segment, city),
                    area=self._area(),
                    bhk=self._weighted(BHK_WEIGHTS),
                    builder_name=self.rng.choice(catalog.DIVERSE_BUILDERS[builder_type]),
                    builder_type=builder_type,
                    builder_credibility=self._builder_credibility(builder_type),
                    listing_type=self._weighted(LISTING_TYPE_WEIGHTS),
                    property_age=self.rng.randrange(10),
                    status=self._weighted(STATUS_WEIGHTS),
                    segment=segment,
                    rera_status=self._rera_status(),
                    price_history=self._price_history(),
                    metadata=self._metadata(),
                    amenities=self._amenities(segment),
                    images=self._images(),
                    coordinates=Coordinates(),
                )
            )
        return properties

    def _weighted(self, weights: dict[str, float]) -> str:
        return self.rng.choices(list(weights), weights=list(weights.values()))[0]

    def _price_by_segment(self, segment: str, city: str) -> int:
        prices = catalog.SEGMENT_BASE_PRICES.get(city, catalog.SEGMENT_BASE_PRICES["Bengaluru"])
        return int(prices[segment] * (0.8 + self.rng.random() * 0.4))

    def _price_per_sqft(self, segment: str, city: str) -> int:
        prices = catalog.SEGMENT_PRICE_PER_SQFT.get(
            city, catalog.SEGMENT_PRICE_PER_SQFT["Bengaluru"]
        )
        return int(prices[segment] * (0.9 + self.rng.random() * 0.2))

    def _area(self) -> int:
        return self.rng.randrange(1500) + 600

    def _builder_credibility(self, builder_type: str) -> BuilderCredibility:
        low, high = CREDIBILITY_SCORE_RANGES[builder_type]
        score = round(self.rng.random() * (high - low) + low, 1)
        national = builder_type == "National"
        return BuilderCredibility(
            score=score,
            badge=credibility_badge(score),
            completed_projects=self.rng.randrange(50) + (20 if national else 5),
            on_time_delivery=self.rng.randrange(30) + (70 if national else 60),
        )

    def _rera_status(self) -> ReraStatus:
        if self.rng.random() <= 0.15:
            return ReraStatus(approved=False)
        valid_till = date.today() + timedelta(days=int(self.rng.random() * 365 * 2))
        return ReraStatus(
            approved=True,
            registration_number="RERA" + "".join(
                self.rng.choice(string.ascii_uppercase + string.digits) for _ in range(9)
            ),
            valid_till=valid_till.isoformat(),
        )

    def _price_history(self) -> list[PricePoint]:
        """Doce meses de precio por sqft, de -1% a +3% mensual."""
        price = float(self.rng.randrange(5000) + 10000)
        today = date.today()
        history = []
        for months_ago in range(11, -1, -1):
            year, month = divmod(today.year * 12 + today.month - 1 - months_ago, 12)
            price *= 1 + (self.rng.random() * 0.04 - 0.01)
            history.append(PricePoint(month=f"{year:04d}-{month + 1:02d}", price=round(price)))
        return history

    def _metadata(self) -> ListingMetadata:
        view_count = self.rng.randrange(2000) + 50
        last_updated = datetime.utcnow() - timedelta(days=self.rng.random() * 7)
        return ListingMetadata(
            view_count=view_count,
            popularity_tag=popularity_tag(view_count),
            verified_tag=self.rng.random() > 0.25,
            last_updated=last_updated.isoformat(),
        )

    def _amenities(self, segment: str) -> list[str]:
        amenities = list(BASE_AMENITIES)
        for amenity in catalog.SEGMENT_AMENITIES.get(segment, []):
            if self.rng.random() > 0.3:
                amenities.append(amenity)
        return amenities

    def _images(self) -> list[str]:
        count = self.rng.randint(2, 4)
        return [catalog.IMAGE_URL_TEMPLATE.format(photo_id=photo_id) for photo_id in IMAGE_IDS[:count]]

    def _property_age(self, status: str) -> int:
        if status == "Under Construction":
            return self.rng.randrange(2)
        if status == "Ready":
            return self.rng.randrange(3)
        if status == "Resale":
            return self.rng.randrange(15) + 2
        return 0

    def _possession_date(self) -> str:
        months_ahead = self.rng.randrange(36) + 6
        today = date.today()
        year, month = divmod(today.year * 12 + today.month - 1 + months_ahead, 12)
        return date(year, month + 1, 1).isoformat()

    def get_supported_cities(self) -> list[str]:
        return list(self.zones)

    def get_localities_for_city(self, city: str) -> list[str]:
        city_zones = self.zones.get(catalog.canonical_city(city), {})
        return [locality for localities in city_zones.values() for locality in localities]

    def get_micro_markets_for_locality(self, city: str, locality: str) -> list[str]:
        city_zones = self.zones.get(catalog.canonical_city(city), {})
        for localities in city_zones.values():
            if locality in localities:
                return list(localities[locality][0])
        return []
