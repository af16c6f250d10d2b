"""
Pipeline de ingesta multi-portal.

Implementa:
- Fan-out concurrente a todas las fuentes (una fuente caída no corta la ingesta)
- Deduplicación por builder + proyecto + localidad + BHK
- Normalización de nombres y re-scoring de reputación/verificación
- Cache por ciudad con TTL
"""

import asyncio
import random
import re
from dataclasses import dataclass, field
from typing import Optional

import structlog

from brickmatrix.cache import TTLCache
from brickmatrix.config import TIER1_CITIES, Settings, get_settings
from brickmatrix.data import catalog
from brickmatrix.ingestion.base import BaseListingSource
from brickmatrix.ingestion.portals import PORTAL_SOURCES
from brickmatrix.models import PropertyListing

logger = structlog.get_logger()


@dataclass
class IngestionReport:
    """Resultado de un ciclo de ingesta."""

    city: str
    listings: list[PropertyListing] = field(default_factory=list)
    per_source: dict[str, int] = field(default_factory=dict)
    failed_sources: list[str] = field(default_factory=list)
    duplicates_removed: int = 0
    cache_hit: bool = False


class RealEstateDataIngestion:
    """
    Ingesta de listings desde todos los portales.

    Flujo:
    1. Verificar cache de la ciudad
    2. Consultar todas las fuentes en paralelo
    3. Deduplicar y normalizar
    4. Cachear el resultado
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        sources: Optional[list[BaseListingSource]] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.sources = sources or [
            source_class(settings=self.settings, rng=self.rng)
            for source_class in PORTAL_SOURCES
        ]
        self._cache = TTLCache(self.settings.cache_ttl_seconds)

    async def ingest(
        self,
        city: str,
        max_listings_per_source: Optional[int] = None,
    ) -> IngestionReport:
        """
        Ejecuta la ingesta para una ciudad.

        Args:
            city: Ciudad a ingerir
            max_listings_per_source: Tope por fuente (default: settings)

        Returns:
            IngestionReport con los listings normalizados
        """
        city = catalog.canonical_city(city)
        limit = max_listings_per_source or self.settings.max_listings_per_source
        cache_key = f"ingestion_{city}"

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("Devolviendo ingesta cacheada", city=city, total=len(cached))
            return IngestionReport(city=city, listings=cached, cache_hit=True)

        logger.info("Iniciando ingesta", city=city, sources=len(self.sources))

        results = await asyncio.gather(
            *(source.fetch(city, limit) for source in self.sources),
            return_exceptions=True,
        )

        report = IngestionReport(city=city)
        all_listings: list[PropertyListing] = []
        for source, result in zip(self.sources, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Fuente fallida, se ignora",
                    source=source.SOURCE_NAME,
                    error=str(result),
                )
                report.failed_sources.append(source.SOURCE_NAME)
                report.per_source[source.SOURCE_NAME] = 0
                continue
            report.per_source[source.SOURCE_NAME] = len(result)
            all_listings.extend(result)

        unique = self.deduplicate_listings(all_listings)
        report.duplicates_removed = len(all_listings) - len(unique)
        report.listings = self.normalize_and_enhance(unique, city)

        self._cache.set(cache_key, report.listings)

        logger.info(
            "Ingesta completada",
            city=city,
            total=len(report.listings),
            duplicates=report.duplicates_removed,
            failed=len(report.failed_sources),
        )
        return report

    async def ingest_from_all_sources(
        self,
        city: str,
        max_listings_per_source: Optional[int] = None,
    ) -> list[PropertyListing]:
        """Atajo que devuelve solo los listings de ``ingest``."""
        report = await self.ingest(city, max_listings_per_source)
        return report.listings

    @staticmethod
    def deduplicate_listings(listings: list[PropertyListing]) -> list[PropertyListing]:
        """Conserva la primera aparición de cada clave compuesta."""
        seen: set[str] = set()
        unique = []
        for listing in listings:
            if listing.dedup_key in seen:
                continue
            seen.add(listing.dedup_key)
            unique.append(listing)
        return unique

    def normalize_and_enhance(
        self, listings: list[PropertyListing], city: str
    ) -> list[PropertyListing]:
        normalized = []
        for listing in listings:
            normalized.append(
                listing.model_copy(
                    update={
                        "builder_name": normalize_builder_name(listing.builder_name),
                        "project_name": normalize_project_name(listing.project_name),
                        "builder_reputation_score": self._enhance_builder_score(
                            listing.builder_name, city
                        ),
                        "verified_listing": enhance_verification(listing),
                    }
                )
            )
        return normalized

    def _enhance_builder_score(self, builder_name: str, city: str) -> int:
        is_premium = builder_name in catalog.get_builders(city)
        base = 85 if is_premium else 65
        return min(100, round(base + self.rng.uniform(0, 15)))

    def get_supported_cities(self) -> list[str]:
        return list(TIER1_CITIES)

    def get_builders_by_city(self, city: str) -> list[str]:
        return catalog.get_builders(city)

    def clear_cache(self):
        self._cache.clear()


def normalize_builder_name(name: str) -> str:
    return catalog.BUILDER_NAME_NORMALIZATIONS.get(name, name)


def normalize_project_name(name: str) -> str:
    return re.sub(r"\s+", " ", name.strip())


def enhance_verification(listing: PropertyListing) -> bool:
    """Un listing con RERA y buena reputación, o bien rankeado, se considera verificado."""
    if listing.rera_id and listing.builder_reputation_score > 75:
        return True
    if listing.platform_rating and listing.platform_rating > 4.0:
        return True
    return listing.verified_listing
