"""
Modelos de datos del sistema.

- Listings crudos: PropertyListing (ingesta), MarketplaceListing (feed)
- BrickMatrixProperty: propiedad completa del motor BrickMatrix™
- Resultados: EnhancedRecommendation, UnifiedProperty, DiverseProperty
- Usuario: UserIntent, SmartFilters y filtros por motor
"""

from brickmatrix.models.listing import (
    Coordinates,
    MarketplaceListing,
    MarketplaceQuery,
    PropertyListing,
)
from brickmatrix.models.user import (
    BrickMatrixFilters,
    BudgetRange,
    SmartFilters,
    UnifiedFilters,
    UserIntent,
)
from brickmatrix.models.brickmatrix import (
    AIRecommendation,
    BrickMatrixProperty,
    BrickMatrixScoring,
    BuilderProfile,
    LocationIntelligence,
    PricingOffers,
    ProjectDetails,
)
from brickmatrix.models.recommendation import (
    BuilderTrackRecord,
    EnhancedRecommendation,
    RecommendationScore,
    UnifiedMetadata,
    UnifiedProperty,
    UnifiedRecommendation,
    UnifiedResult,
)
from brickmatrix.models.diverse import DiverseProperty
from brickmatrix.models.wishlist import ComparisonItem, WishlistItem

__all__ = [
    # Listings
    "Coordinates",
    "MarketplaceListing",
    "MarketplaceQuery",
    "PropertyListing",
    # Usuario
    "BrickMatrixFilters",
    "BudgetRange",
    "SmartFilters",
    "UnifiedFilters",
    "UserIntent",
    # BrickMatrix
    "AIRecommendation",
    "BrickMatrixProperty",
    "BrickMatrixScoring",
    "BuilderProfile",
    "LocationIntelligence",
    "PricingOffers",
    "ProjectDetails",
    # Resultados
    "BuilderTrackRecord",
    "EnhancedRecommendation",
    "RecommendationScore",
    "UnifiedMetadata",
    "UnifiedProperty",
    "UnifiedRecommendation",
    "UnifiedResult",
    "DiverseProperty",
    # Wishlist
    "ComparisonItem",
    "WishlistItem",
]
