"""
Feed unificado de marketplaces (housing, squareyards, nobroker).

Cada fuente entrega registros con el formato propio del portal, que se
transforman al esquema común ``MarketplaceListing``. Los duplicados no se
eliminan: se marcan y se envían al final.
"""

import asyncio
import random
import re
import time
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog

from brickmatrix.cache import TTLCache
from brickmatrix.config import BHK_CONFIGURATIONS, Settings, get_settings
from brickmatrix.data import catalog
from brickmatrix.ingestion.base import BaseListingSource
from brickmatrix.models import Coordinates, MarketplaceListing, MarketplaceQuery

logger = structlog.get_logger()

FALLBACK_CITIES = ["Mumbai", "Delhi", "Bengaluru", "Pune", "Hyderabad"]
FALLBACK_BUILDERS = ["DLF Limited", "Godrej Properties", "Prestige Group", "Brigade Group"]

# Estados tal como los publican los portales
RAW_STATUSES = ["Ready to Move", "Under Construction", "New Launch", "Upcoming", "Completed"]


class RateLimitExceeded(Exception):
    """La fuente superó su cuota de requests por minuto."""


class RateLimiter:
    """Ventana fija de requests por minuto, independiente por fuente."""

    WINDOW_SECONDS = 60.0

    def __init__(self, max_requests: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}

    def check(self, source: str) -> bool:
        """Registra un request; devuelve False si la fuente agotó su cuota."""
        now = self._clock()
        window = self._windows.get(source)
        if window is None or now >= window[1]:
            self._windows[source] = (1, now + self.WINDOW_SECONDS)
            return True

        count, reset_at = window
        if count >= self.max_requests:
            return False

        self._windows[source] = (count + 1, reset_at)
        return True


def parse_price(value: Any) -> float:
    """
    Convierte un precio del portal a INR.

    Acepta números o strings como "₹1,20,00,000", "1.2 Crore", "85 Lakh".
    """
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0.0

    numeric = re.sub(r"[₹,\s]", "", value)
    match = re.match(r"[-+]?\d*\.?\d+", numeric)
    if not match:
        return 0.0
    parsed = float(match.group())

    lowered = value.lower()
    if "crore" in lowered:
        return parsed * 10_000_000
    if "lakh" in lowered:
        return parsed * 100_000
    return parsed


def standardize_bhk(value: Any) -> str:
    if not value:
        return "Unknown"
    text = str(value).lower()
    for digit in "12345":
        if digit in text:
            return f"{digit}BHK"
    return str(value)


def parse_amenities(value: Any) -> list[str]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return []


def standardize_status(value: Any) -> str:
    if not value:
        return "Unknown"
    text = str(value).lower()
    if "ready" in text or "completed" in text:
        return "Ready"
    if "construction" in text or "ongoing" in text:
        return "Under Construction"
    if "launch" in text or "new" in text:
        return "New Launch"
    if "plan" in text or "upcoming" in text:
        return "Planning"
    return str(value)


class MarketplaceSource(BaseListingSource[MarketplaceListing]):
    """
    Fuente del feed unificado.

    Las subclases definen cómo luce un registro del portal
    (``raw_record``) y cómo se traduce al esquema común (``transform``).
    """

    LATENCY_RANGE = (0.3, 0.8)
    MIN_LISTINGS = 10
    MAX_LISTINGS = 25

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        query: Optional[MarketplaceQuery] = None,
    ):
        super().__init__(settings=settings, rng=rng)
        self.query = query or MarketplaceQuery()

    def generate(self, city: str, limit: int) -> list[MarketplaceListing]:
        count = min(self.rng.randint(self.MIN_LISTINGS, self.MAX_LISTINGS), limit)
        return [self.transform(self.raw_record(city, i)) for i in range(count)]

    def _base_record(self, city: str, index: int) -> dict:
        """Atributos comunes antes de darles el formato del portal."""
        city = catalog.canonical_city(city) or self.rng.choice(FALLBACK_CITIES)
        builder = self.query.builder_name or self.rng.choice(
            catalog.get_builders(city) or catalog.FALLBACK_BUILDERS
        )
        bhk = self.query.bhk or self.rng.choice(BHK_CONFIGURATIONS)
        low, high = catalog.BHK_AREA_RANGES.get(
            standardize_bhk(bhk), catalog.DEFAULT_AREA_RANGE
        )
        area = int(self.rng.uniform(low, high))
        base = catalog.BASE_PRICE_PER_SQFT.get(city, catalog.DEFAULT_BASE_PRICE_PER_SQFT)
        price_per_sqft = int(base * self.rng.uniform(0.85, 1.15))
        lat, lng = catalog.CITY_COORDINATES.get(city, catalog.DEFAULT_COORDINATES)

        return {
            "id": f"{int(time.time() * 1000)}_{index}",
            "city": city,
            "builder": builder,
            "project": f"{builder.split(' ')[0]} {self.rng.choice(catalog.PROJECT_SUFFIXES)}",
            "locality": self.rng.choice(catalog.get_localities(city)),
            "bhk": bhk,
            "area": area,
            "price_per_sqft": price_per_sqft,
            "price": area * price_per_sqft,
            "possession": self.rng.choice(catalog.POSSESSION_OPTIONS),
            "status": self.query.project_status or self.rng.choice(RAW_STATUSES),
            "amenities": self.rng.sample(catalog.AMENITIES, self.rng.randint(3, 10)),
            "lat": lat + (self.rng.random() - 0.5) * 0.05,
            "lng": lng + (self.rng.random() - 0.5) * 0.05,
            "rera_id": f"{catalog.RERA_STATE_CODES.get(city, 'XX')}RERA{self.rng.randint(10000, 99999)}",
        }

    @abstractmethod
    def raw_record(self, city: str, index: int) -> dict:
        """Registro con el formato propio del portal."""
        pass

    @abstractmethod
    def transform(self, record: dict) -> MarketplaceListing:
        """Traduce un registro del portal al esquema común."""
        pass


class HousingMarketplaceSource(MarketplaceSource):
    SOURCE_NAME = "housing"

    def raw_record(self, city: str, index: int) -> dict:
        base = self._base_record(city, index)
        return {
            "id": base["id"],
            "project_name": base["project"],
            "builder_name": base["builder"],
            "city": base["city"],
            "locality": base["locality"],
            "price": base["price"],
            "bhk": base["bhk"],
            "possession_date": base["possession"],
            "amenities": base["amenities"],
            "status": base["status"],
            "carpet_area": base["area"],
            "price_per_sqft": base["price_per_sqft"],
            "coordinates": {"latitude": base["lat"], "longitude": base["lng"]},
            "rera_id": base["rera_id"],
        }

    def transform(self, record: dict) -> MarketplaceListing:
        coordinates = record.get("coordinates")
        return MarketplaceListing(
            listing_id=f"housing_{record.get('id') or int(time.time() * 1000)}",
            project_name=record.get("project_name") or record.get("title") or "Unknown Project",
            builder=record.get("builder_name") or record.get("developer") or "Unknown Builder",
            city=record.get("city") or "Unknown City",
            locality=record.get("locality") or record.get("area") or "Unknown Locality",
            price=int(parse_price(record.get("price"))),
            bhk=standardize_bhk(record.get("bhk") or record.get("bedrooms")),
            possession_date=record.get("possession_date") or record.get("ready_date") or "TBD",
            amenities=parse_amenities(record.get("amenities")),
            project_status=standardize_status(record.get("status") or record.get("project_status")),
            source=self.SOURCE_NAME,
            area=record.get("carpet_area"),
            price_per_sqft=record.get("price_per_sqft"),
            coordinates=Coordinates(
                lat=coordinates["latitude"], lng=coordinates["longitude"]
            ) if coordinates else None,
            images=record.get("images") or [],
            rera_id=record.get("rera_id"),
        )


class SquareYardsMarketplaceSource(MarketplaceSource):
    SOURCE_NAME = "squareyards"

    def raw_record(self, city: str, index: int) -> dict:
        base = self._base_record(city, index)
        # SquareYards publica precio en lakhs/crores y amenities separadas por coma
        total_price = base["price"]
        if total_price >= 10_000_000:
            price_text = f"₹{total_price / 10_000_000:.2f} Crore"
        else:
            price_text = f"₹{total_price / 100_000:.2f} Lakh"
        return {
            "id": base["id"],
            "name": base["project"],
            "developer": base["builder"],
            "location": {"city": base["city"], "area": base["locality"]},
            "total_price": price_text,
            "bedrooms": base["bhk"].replace("BHK", " Bedrooms"),
            "completion_date": base["possession"],
            "features": ", ".join(base["amenities"]),
            "project_status": base["status"],
            "built_up_area": base["area"],
            "rate_per_sqft": base["price_per_sqft"],
            "latitude": base["lat"],
            "longitude": base["lng"],
            "rera_number": base["rera_id"],
        }

    def transform(self, record: dict) -> MarketplaceListing:
        location = record.get("location") or {}
        has_coordinates = record.get("latitude") and record.get("longitude")
        return MarketplaceListing(
            listing_id=f"squareyards_{record.get('id') or int(time.time() * 1000)}",
            project_name=record.get("name") or record.get("project_name") or "Unknown Project",
            builder=record.get("developer") or record.get("builder") or "Unknown Builder",
            city=record.get("city") or location.get("city") or "Unknown City",
            locality=record.get("locality") or location.get("area") or "Unknown Locality",
            price=int(parse_price(record.get("price") or record.get("total_price"))),
            bhk=standardize_bhk(record.get("bedrooms") or record.get("bhk")),
            possession_date=record.get("possession_date") or record.get("completion_date") or "TBD",
            amenities=parse_amenities(record.get("amenities") or record.get("features")),
            project_status=standardize_status(record.get("status") or record.get("project_status")),
            source=self.SOURCE_NAME,
            area=record.get("carpet_area") or record.get("built_up_area"),
            price_per_sqft=record.get("rate_per_sqft"),
            coordinates=Coordinates(
                lat=record["latitude"], lng=record["longitude"]
            ) if has_coordinates else None,
            images=record.get("images") or [],
            rera_id=record.get("rera_number"),
        )


class NoBrokerMarketplaceSource(MarketplaceSource):
    SOURCE_NAME = "nobroker"

    def raw_record(self, city: str, index: int) -> dict:
        base = self._base_record(city, index)
        return {
            "id": base["id"],
            "projectName": base["project"],
            "builderName": base["builder"],
            "city": base["city"],
            "locality": base["locality"],
            "price": base["price"],
            "bhk": base["bhk"],
            "possessionDate": base["possession"],
            "amenities": base["amenities"],
            "propertyStatus": base["status"],
            "carpetArea": base["area"],
            "pricePerSqft": base["price_per_sqft"],
            "latitude": base["lat"],
            "longitude": base["lng"],
            "reraId": base["rera_id"],
        }

    def transform(self, record: dict) -> MarketplaceListing:
        has_coordinates = record.get("latitude") and record.get("longitude")
        return MarketplaceListing(
            listing_id=f"nobroker_{record.get('id') or int(time.time() * 1000)}",
            project_name=record.get("projectName") or record.get("title") or "Unknown Project",
            builder=record.get("builderName") or record.get("builder") or "Unknown Builder",
            city=record.get("city") or "Unknown City",
            locality=record.get("locality") or record.get("area") or "Unknown Locality",
            price=int(parse_price(record.get("price") or record.get("rent"))),
            bhk=standardize_bhk(record.get("bhk") or record.get("bedroom")),
            possession_date=record.get("possessionDate") or record.get("availableFrom") or "TBD",
            amenities=parse_amenities(record.get("amenities")),
            project_status=standardize_status(record.get("propertyStatus") or record.get("status")),
            source=self.SOURCE_NAME,
            area=record.get("carpetArea") or record.get("builtUpArea"),
            price_per_sqft=record.get("pricePerSqft"),
            coordinates=Coordinates(
                lat=record["latitude"], lng=record["longitude"]
            ) if has_coordinates else None,
            images=record.get("images") or [],
            rera_id=record.get("reraId"),
        )


MARKETPLACE_SOURCE_CLASSES = [
    HousingMarketplaceSource,
    SquareYardsMarketplaceSource,
    NoBrokerMarketplaceSource,
]


@dataclass
class FeedMetadata:
    total_count: int
    sources_used: list[str] = field(default_factory=list)
    api_responses: dict[str, bool] = field(default_factory=dict)
    cache_hit: bool = False
    processing_time_ms: int = 0


class MarketplaceFeed:
    """
    Agregador del feed unificado.

    Consulta las fuentes en paralelo respetando el rate limit de cada una,
    marca duplicados y cachea por parámetros de consulta.
    """

    FEED_LIMIT = 50

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        source_classes: Optional[list[type[MarketplaceSource]]] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.source_classes = source_classes or MARKETPLACE_SOURCE_CLASSES
        self.rate_limiter = rate_limiter or RateLimiter(self.settings.rate_limit_per_minute)
        self._cache = TTLCache(self.settings.cache_ttl_seconds)

    async def fetch_unified_listings(
        self, query: Optional[MarketplaceQuery] = None
    ) -> tuple[list[MarketplaceListing], FeedMetadata]:
        """
        Obtiene listings de todas las fuentes.

        Returns:
            (listings deduplicados, metadata del fetch)
        """
        query = query or MarketplaceQuery()
        start = time.monotonic()

        cache_key = query.cache_key()
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("Devolviendo feed cacheado", total=len(cached))
            return cached, FeedMetadata(
                total_count=len(cached),
                sources_used=["cache"],
                cache_hit=True,
                processing_time_ms=_elapsed_ms(start),
            )

        sources = [
            source_class(settings=self.settings, rng=self.rng, query=query)
            for source_class in self.source_classes
        ]
        results = await asyncio.gather(
            *(self._fetch_source(source, query) for source in sources),
            return_exceptions=True,
        )

        all_listings: list[MarketplaceListing] = []
        metadata = FeedMetadata(total_count=0)
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                metadata.api_responses[source.SOURCE_NAME] = False
                logger.warning(
                    "Fuente del feed fallida",
                    source=source.SOURCE_NAME,
                    error=str(result),
                )
                continue
            all_listings.extend(result)
            metadata.sources_used.append(source.SOURCE_NAME)
            metadata.api_responses[source.SOURCE_NAME] = True
            logger.info("Listings obtenidos", source=source.SOURCE_NAME, count=len(result))

        processed = mark_duplicates(all_listings)
        self._cache.set(cache_key, processed)

        metadata.total_count = len(processed)
        metadata.processing_time_ms = _elapsed_ms(start)
        logger.info(
            "Feed unificado completado",
            total=metadata.total_count,
            ms=metadata.processing_time_ms,
        )
        return processed, metadata

    async def _fetch_source(
        self, source: MarketplaceSource, query: MarketplaceQuery
    ) -> list[MarketplaceListing]:
        if not self.rate_limiter.check(source.SOURCE_NAME):
            raise RateLimitExceeded(f"Rate limit excedido para {source.SOURCE_NAME}")
        return await source.fetch(query.city or "", self.FEED_LIMIT)

    async def get_fallback_listings(
        self, query: Optional[MarketplaceQuery] = None
    ) -> list[MarketplaceListing]:
        """Listings genéricos para cuando ninguna fuente responde."""
        query = query or MarketplaceQuery()
        logger.info("Generando listings de fallback")
        timestamp = int(time.time() * 1000)

        listings = []
        for i in range(20):
            builder = self.rng.choice(FALLBACK_BUILDERS)
            listings.append(
                MarketplaceListing(
                    listing_id=f"fallback_{timestamp}_{i}",
                    project_name=f"{builder.split(' ')[0]} Heights",
                    builder=builder,
                    city=catalog.canonical_city(query.city) or self.rng.choice(FALLBACK_CITIES),
                    locality="Central Area",
                    price=self.rng.randrange(10_000_000, 60_000_000),
                    bhk=self.rng.choice(["2BHK", "3BHK", "4BHK"]),
                    possession_date="Dec 2025",
                    amenities=["Swimming Pool", "Gym", "Security", "Parking"],
                    project_status="Ready",
                    source="housing",
                    area=self.rng.randrange(800, 1800),
                    price_per_sqft=self.rng.randrange(8000, 13000),
                )
            )
        return listings

    def clear_cache(self):
        self._cache.clear()

    def get_cache_stats(self) -> dict:
        return self._cache.stats()


def mark_duplicates(listings: list[MarketplaceListing]) -> list[MarketplaceListing]:
    """
    Marca como duplicadas las apariciones repetidas de un proyecto.

    Los duplicados se conservan; el resultado queda ordenado con los
    originales primero y luego por precio ascendente.
    """
    seen: set[str] = set()
    marked = []
    for listing in listings:
        if listing.dedup_key in seen:
            listing = listing.model_copy(
                update={
                    "is_duplicate": True,
                    "duplicate_reason": (
                        f"Duplicate of project in {listing.locality} by {listing.builder}"
                    ),
                }
            )
        else:
            seen.add(listing.dedup_key)
        marked.append(listing)

    return sorted(marked, key=lambda item: (item.is_duplicate, item.price))


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
