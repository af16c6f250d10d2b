"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> brickmatrix/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")

    # Cache en memoria
    cache_ttl_seconds: float = Field(
        900.0, ge=0, description="TTL de los caches en memoria (15 minutos)"
    )

    # Simulación de latencia de las fuentes
    simulated_latency_scale: float = Field(
        1.0,
        ge=0.0,
        description="Multiplicador de los delays simulados (0 los desactiva)",
    )
    random_seed: Optional[int] = Field(
        None, description="Semilla para reproducir los datos generados"
    )

    # Ingesta
    max_listings_per_source: int = Field(
        100, ge=1, description="Máximo de listings por fuente en la ingesta"
    )
    source_retry_attempts: int = Field(
        2, ge=1, description="Intentos por fuente antes de descartarla"
    )
    rate_limit_per_minute: int = Field(
        60, ge=1, description="Requests por minuto permitidos por fuente del marketplace"
    )

    # Recomendaciones
    intelligent_max_results: int = Field(
        50, ge=1, description="Máximo de recomendaciones inteligentes devueltas"
    )
    diverse_max_results: int = Field(
        30, ge=1, description="Máximo de propiedades tras diversificar"
    )

    # Wishlist / comparación
    wishlist_path: str = Field(
        "data/wishlist.json", description="Archivo JSON de wishlist y comparación"
    )
    max_comparison_items: int = Field(
        4, ge=1, description="Máximo de propiedades en comparación"
    )


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
TIER1_CITIES = [
    "Mumbai",
    "Delhi",
    "Noida",
    "Gurugram",
    "Ghaziabad",
    "Bengaluru",
    "Pune",
    "Hyderabad",
    "Chennai",
    "Ahmedabad",
    "Kolkata",
]

# Portales de la ingesta en tiempo real
LISTING_SOURCES = ["Housing.com", "99acres.com", "MagicBricks.com", "NoBroker.in"]

# Fuentes del feed unificado
MARKETPLACE_SOURCES = ["housing", "squareyards", "nobroker"]

BHK_CONFIGURATIONS = ["1BHK", "2BHK", "3BHK", "4BHK"]
