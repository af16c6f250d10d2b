"""
Tests de los scripts de línea de comandos.
"""

import asyncio
import json

import pytest

from brickmatrix.config import get_settings
from brickmatrix.ingestion import IngestionReport
from brickmatrix.models import BudgetRange
from brickmatrix.scripts.run_ingestion import print_report, run_ingestion
from brickmatrix.scripts.run_recommendations import (
    ENGINES,
    describe_city,
    print_results,
    run_recommendations,
)


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    monkeypatch.setenv("SIMULATED_LATENCY_SCALE", "0")
    monkeypatch.setenv("RANDOM_SEED", "17")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestRunIngestion:
    def test_run_ingestion(self):
        report = asyncio.run(run_ingestion("Pune", 10))
        assert report.city == "Pune"
        assert len(report.per_source) == 4

    def test_print_report(self, capsys):
        report = IngestionReport(
            city="Pune",
            per_source={"Housing.com": 10, "NoBroker.in": 0},
            failed_sources=["NoBroker.in"],
            duplicates_removed=2,
        )
        print_report(report)
        output = capsys.readouterr().out

        assert "Ingesta para Pune" in output
        assert "FALLIDA" in output
        assert "Duplicados eliminados: 2" in output


class TestRunRecommendations:
    @pytest.mark.parametrize("engine", ENGINES)
    def test_every_engine_returns_rows(self, engine):
        results = asyncio.run(
            run_recommendations(
                engine=engine,
                city="Mumbai",
                budget=BudgetRange(min=1_000_000, max=100_000_000),
                bhk=None,
            )
        )
        assert results
        assert all(len(result["_row"]) == 4 for result in results)

    def test_unknown_engine(self):
        with pytest.raises(ValueError):
            asyncio.run(
                run_recommendations("magic", None, BudgetRange(min=0, max=1), None)
            )

    def test_describe_city_uses_tier_data(self):
        assert describe_city("Bangalore") == (
            "Bangalore | Tier 1 | ₹8,000-₹15,000/sqft | IT Hub, Garden City, Cosmopolitan"
        )
        assert describe_city("Atlantis") == "Atlantis | Tier 3 | ₹3,000-₹6,000/sqft | Emerging Market"
        assert describe_city(None) is None

    def test_print_results_json(self, capsys):
        print_results([{"id": "a", "_row": (8.0, "T", "D", "X")}], as_json=True)
        assert json.loads(capsys.readouterr().out) == [{"id": "a"}]

    def test_print_results_table(self, capsys):
        print_results([{"id": "a", "_row": (8.04, "Godrej Eternis", "Powai", "api")}], as_json=False)
        assert "  1. [ 8.0] Godrej Eternis | Powai | api" in capsys.readouterr().out
