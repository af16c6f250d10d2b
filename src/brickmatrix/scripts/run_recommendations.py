"""
Script para obtener recomendaciones de cualquiera de los motores.

Uso:
    python -m brickmatrix.scripts.run_recommendations --engine brickmatrix --city Mumbai
    python -m brickmatrix.scripts.run_recommendations --engine intelligent --city Pune --bhk 2BHK 3BHK
    python -m brickmatrix.scripts.run_recommendations --engine unified --budget-min 5000000 --json
    python -m brickmatrix.scripts.run_recommendations --engine diverse --city Delhi --limit 5
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

import structlog

from brickmatrix.cities import tier_city_service
from brickmatrix.models import (
    BrickMatrixFilters,
    BudgetRange,
    SmartFilters,
    UnifiedFilters,
    UserIntent,
)
from brickmatrix.models.user import LocationProximityFilter, PropertySpecsFilter
from brickmatrix.recommendation import (
    BrickMatrixEngine,
    DiversePropertyService,
    IntelligentRecommendationEngine,
    UnifiedRecommendationService,
)
from brickmatrix.scripts import configure_logging

logger = structlog.get_logger()

ENGINES = ["brickmatrix", "intelligent", "unified", "diverse"]

DEFAULT_BUDGET_MIN = 5_000_000
DEFAULT_BUDGET_MAX = 50_000_000


async def run_recommendations(
    engine: str,
    city: Optional[str],
    budget: BudgetRange,
    bhk: Optional[list[str]],
) -> list[dict]:
    """
    Ejecuta el motor indicado y devuelve los resultados como dicts
    con una fila resumida (``_row``) para la salida de consola.
    """
    if engine == "brickmatrix":
        properties = await BrickMatrixEngine().fetch_recommendations(
            BrickMatrixFilters(budget=budget, city=city, bhk=bhk)
        )
        return [
            {
                **p.model_dump(),
                "_row": (
                    p.brickmatrix_scoring.brickmatrix_score,
                    p.project_details.project_name,
                    p.location_intelligence.locality,
                    p.brickmatrix_scoring.ai_recommendation.action,
                ),
            }
            for p in properties
        ]

    if engine == "intelligent":
        intent = UserIntent(budget=budget, bhk_preference=bhk or ["2BHK", "3BHK"])
        filters = SmartFilters(property_specs=PropertySpecsFilter(bhk_range=bhk or []))
        recommendations = await IntelligentRecommendationEngine().generate_recommendations(
            city or "Mumbai", intent, filters
        )
        return [
            {
                **r.model_dump(),
                "_row": (r.recommendation_score.overall, r.title, r.builder_name, r.investment_grade),
            }
            for r in recommendations
        ]

    if engine == "unified":
        result = await UnifiedRecommendationService().get_unified_recommendations(
            UnifiedFilters(city=city, budget=budget, bhk=bhk)
        )
        logger.info(
            "Metadata unificada",
            api=result.metadata.api_count,
            local=result.metadata.local_count,
            sources=result.metadata.sources_used,
        )
        return [
            {
                **p.model_dump(),
                "_row": (p.brick_matrix_score or 0, p.title, p.locality, p.source),
            }
            for p in result.properties
        ]

    if engine == "diverse":
        properties = await DiversePropertyService().fetch_diverse_properties(
            SmartFilters(location_proximity=LocationProximityFilter(city=city))
        )
        return [
            {
                **p.model_dump(),
                "_row": (p.builder_credibility.score, p.title, p.builder_name, p.segment),
            }
            for p in properties
        ]

    raise ValueError(f"Motor no soportado: {engine}")


def describe_city(city: Optional[str]) -> Optional[str]:
    """Resumen de mercado de la ciudad: tier, precio por sqft e insights."""
    if not city:
        return None
    price_range = tier_city_service.get_price_range(city)
    insights = ", ".join(tier_city_service.get_market_insights(city))
    return (
        f"{city} | Tier {tier_city_service.get_city_tier(city)}"
        f" | ₹{price_range.min:,}-₹{price_range.max:,}/sqft | {insights}"
    )


def print_results(results: list[dict], as_json: bool):
    if as_json:
        payload = [{k: v for k, v in r.items() if k != "_row"} for r in results]
        print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
        return

    for i, result in enumerate(results, 1):
        score, title, detail, tag = result["_row"]
        print(f"{i:>3}. [{score:>4.1f}] {title} | {detail} | {tag}")


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Recomendaciones de propiedades")
    parser.add_argument(
        "--engine",
        type=str,
        default="unified",
        choices=ENGINES,
        help="Motor de recomendación",
    )
    parser.add_argument("--city", type=str, default=None, help="Ciudad (ej: Mumbai, Bangalore)")
    parser.add_argument("--budget-min", type=int, default=DEFAULT_BUDGET_MIN, help="Presupuesto mínimo (INR)")
    parser.add_argument("--budget-max", type=int, default=DEFAULT_BUDGET_MAX, help="Presupuesto máximo (INR)")
    parser.add_argument("--bhk", type=str, nargs="*", default=None, help="Configuraciones (ej: 2BHK 3BHK)")
    parser.add_argument("--limit", type=int, default=10, help="Máximo de resultados a mostrar")
    parser.add_argument("--json", action="store_true", help="Salida en JSON")
    args = parser.parse_args()

    if args.budget_min > args.budget_max:
        parser.error("--budget-min no puede superar a --budget-max")

    configure_logging()
    logger.info("Buscando recomendaciones...", engine=args.engine, city=args.city)

    try:
        results = asyncio.run(
            run_recommendations(
                engine=args.engine,
                city=args.city,
                budget=BudgetRange(min=args.budget_min, max=args.budget_max),
                bhk=args.bhk or None,
            )
        )
        header = None if args.json else describe_city(args.city)
        if header:
            print(header)
        print_results(results[: args.limit], args.json)
        sys.exit(0)

    except KeyboardInterrupt:
        logger.info("Búsqueda interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en recomendaciones", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
