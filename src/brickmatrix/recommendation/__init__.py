"""
Motores de recomendación.

- BrickMatrixEngine: scoring ponderado sobre MagicBricks y 99acres
- IntelligentRecommendationEngine: scoring por intención sobre la ingesta
- UnifiedRecommendationService: combina feed de marketplaces y motores locales
- DiversePropertyService: resultados variados por zona geográfica
"""

from brickmatrix.recommendation.brickmatrix import BrickMatrixEngine, RecommendationError
from brickmatrix.recommendation.intelligent import IntelligentRecommendationEngine
from brickmatrix.recommendation.diversity import DiversePropertyService, shuffle_and_diversify
from brickmatrix.recommendation.unified import UnifiedRecommendationService

__all__ = [
    "BrickMatrixEngine",
    "RecommendationError",
    "IntelligentRecommendationEngine",
    "DiversePropertyService",
    "shuffle_and_diversify",
    "UnifiedRecommendationService",
]
