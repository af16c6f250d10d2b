"""
Datos de referencia.

Tablas estáticas de ciudades, builders y precios usadas por los generadores.
"""

from brickmatrix.data.catalog import (
    canonical_city,
    get_builders,
    get_localities,
    get_market_average_price,
)

__all__ = [
    "canonical_city",
    "get_builders",
    "get_localities",
    "get_market_average_price",
]
