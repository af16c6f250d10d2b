"""
Script para ejecutar la ingesta multi-portal de una ciudad.

Uso:
    python -m brickmatrix.scripts.run_ingestion --city Mumbai
    python -m brickmatrix.scripts.run_ingestion --city Bangalore --max-per-source 40
"""

import argparse
import asyncio
import sys
from typing import Optional

import structlog

from brickmatrix.ingestion import IngestionReport, RealEstateDataIngestion
from brickmatrix.scripts import configure_logging

logger = structlog.get_logger()


async def run_ingestion(city: str, max_per_source: Optional[int] = None) -> IngestionReport:
    """Ejecuta un ciclo de ingesta para la ciudad."""
    ingestion = RealEstateDataIngestion()
    return await ingestion.ingest(city, max_per_source)


def print_report(report: IngestionReport):
    print(f"Ingesta para {report.city}")
    for source, count in report.per_source.items():
        status = "FALLIDA" if source in report.failed_sources else "ok"
        print(f"  {source:<18} {count:>4} listings  [{status}]")
    print(f"  Duplicados eliminados: {report.duplicates_removed}")
    print(f"  Total: {len(report.listings)}")


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Ingesta de listings multi-portal")
    parser.add_argument("--city", type=str, required=True, help="Ciudad a ingerir")
    parser.add_argument(
        "--max-per-source",
        type=int,
        default=None,
        help="Máximo de listings por portal (default: settings)",
    )
    args = parser.parse_args()

    configure_logging()
    logger.info("Iniciando ingesta...", city=args.city)

    try:
        report = asyncio.run(run_ingestion(args.city, args.max_per_source))
        print_report(report)
        sys.exit(0 if len(report.failed_sources) < len(report.per_source) else 1)

    except KeyboardInterrupt:
        logger.info("Ingesta interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en ingesta", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
