"""
Fuentes de la ingesta en tiempo real.

Housing.com, 99acres, MagicBricks y NoBroker comparten el mismo generador;
cada portal aplica su propio multiplicador de precio.
"""

import re
import time
from datetime import datetime

from brickmatrix.data import catalog
from brickmatrix.ingestion.base import BaseListingSource
from brickmatrix.models import PropertyListing


class PortalListingSource(BaseListingSource[PropertyListing]):
    """Generador de listings con el formato de la ingesta."""

    # 30 a 79 listings por consulta
    MIN_LISTINGS = 30
    MAX_LISTINGS = 79

    def generate(self, city: str, limit: int) -> list[PropertyListing]:
        city = catalog.canonical_city(city)
        count = min(self.rng.randint(self.MIN_LISTINGS, self.MAX_LISTINGS), limit)

        builders = catalog.get_builders(city) or catalog.FALLBACK_BUILDERS
        localities = catalog.get_localities(city)[:5]
        base_lat, base_lng = catalog.CITY_COORDINATES.get(city, catalog.DEFAULT_COORDINATES)
        timestamp = int(time.time() * 1000)

        listings = []
        for i in range(count):
            builder = self.rng.choice(builders)
            bhk = self.rng.choice(["1BHK", "2BHK", "3BHK", "4BHK"])
            carpet_area = self._area_for_bhk(bhk)
            price_per_sqft = self._price_per_sqft(city)

            listings.append(
                PropertyListing(
                    id=f"{self.SOURCE_NAME.replace('.', '_')}_{city}_{timestamp}_{i}",
                    source=self.SOURCE_NAME,
                    builder_name=builder,
                    project_name=self._project_name(builder),
                    price=int(carpet_area * price_per_sqft),
                    price_per_sqft=price_per_sqft,
                    carpet_area=carpet_area,
                    total_area=int(carpet_area * 1.2),
                    latitude=base_lat + (self.rng.random() - 0.5) * 0.05,
                    longitude=base_lng + (self.rng.random() - 0.5) * 0.05,
                    locality=self.rng.choice(localities),
                    city=city,
                    state=catalog.STATE_BY_CITY.get(city, "Unknown"),
                    bhk_config=bhk,
                    possession_date=self.rng.choice(catalog.POSSESSION_OPTIONS),
                    rera_id=self._rera_id(city),
                    verified_listing=self.rng.random() > 0.2,
                    builder_reputation_score=self._builder_reputation(builder, city),
                    project_link=self._project_link(city, builder),
                    platform_rating=round(self.rng.uniform(3.0, 5.0), 1),
                    amenities=self.rng.sample(catalog.AMENITIES, self.rng.randint(5, 12)),
                    images=self._images(),
                    last_updated=datetime.utcnow().isoformat(),
                    listing_age_days=self.rng.randrange(30),
                )
            )

        return listings

    def _area_for_bhk(self, bhk: str) -> int:
        low, high = catalog.BHK_AREA_RANGES.get(bhk, catalog.DEFAULT_AREA_RANGE)
        return int(self.rng.uniform(low, high))

    def _price_per_sqft(self, city: str) -> int:
        base = catalog.BASE_PRICE_PER_SQFT.get(city, catalog.DEFAULT_BASE_PRICE_PER_SQFT)
        multiplier = catalog.SOURCE_PRICE_MULTIPLIERS.get(self.SOURCE_NAME, 1.0)
        return int(base * multiplier * self.rng.uniform(0.9, 1.1))

    def _project_name(self, builder: str) -> str:
        return f"{builder.split(' ')[0]} {self.rng.choice(catalog.PROJECT_SUFFIXES)}"

    def _rera_id(self, city: str) -> str:
        state_code = catalog.RERA_STATE_CODES.get(city, "XX")
        return f"{state_code}RERA{self.rng.randint(10000, 99999)}"

    def _builder_reputation(self, builder: str, city: str) -> int:
        base = 80 if builder in catalog.get_builders(city) else 60
        return min(100, round(base + self.rng.uniform(0, 20)))

    def _project_link(self, city: str, builder: str) -> str:
        builder_slug = re.sub(r"\s+", "-", builder.lower())
        return f"{self.BASE_URL}/property/{city.lower()}-{builder_slug}"

    def _images(self) -> list[str]:
        return [
            catalog.IMAGE_URL_TEMPLATE.format(photo_id=f"156051883{i + 1}")
            for i in range(self.rng.randint(2, 5))
        ]


class HousingSource(PortalListingSource):
    SOURCE_NAME = "Housing.com"
    BASE_URL = catalog.SOURCE_BASE_URLS["Housing.com"]


class NinetyNineAcresSource(PortalListingSource):
    SOURCE_NAME = "99acres.com"
    BASE_URL = catalog.SOURCE_BASE_URLS["99acres.com"]


class MagicBricksSource(PortalListingSource):
    SOURCE_NAME = "MagicBricks.com"
    BASE_URL = catalog.SOURCE_BASE_URLS["MagicBricks.com"]


class NoBrokerSource(PortalListingSource):
    SOURCE_NAME = "NoBroker.in"
    BASE_URL = catalog.SOURCE_BASE_URLS["NoBroker.in"]


PORTAL_SOURCES = [HousingSource, NinetyNineAcresSource, MagicBricksSource, NoBrokerSource]
