"""
Ingesta de listings.

Provee las fuentes de portales inmobiliarios, el pipeline de ingesta
multi-portal y el feed unificado de marketplaces.
"""

from brickmatrix.ingestion.base import BaseListingSource
from brickmatrix.ingestion.portals import (
    HousingSource,
    NinetyNineAcresSource,
    MagicBricksSource,
    NoBrokerSource,
)
from brickmatrix.ingestion.pipeline import IngestionReport, RealEstateDataIngestion
from brickmatrix.ingestion.marketplace import (
    MarketplaceFeed,
    RateLimiter,
    RateLimitExceeded,
)

__all__ = [
    "BaseListingSource",
    "HousingSource",
    "NinetyNineAcresSource",
    "MagicBricksSource",
    "NoBrokerSource",
    "IngestionReport",
    "RealEstateDataIngestion",
    "MarketplaceFeed",
    "RateLimiter",
    "RateLimitExceeded",
]
