"""
Fuente de listings base abstracta.

Define la interfaz común para todas las fuentes de portales inmobiliarios.
Ninguna fuente hace I/O real: los listings se generan y se entregan tras
una latencia simulada.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from brickmatrix.config import Settings, get_settings

logger = structlog.get_logger()

T = TypeVar("T")


async def simulate_latency(seconds: float, settings: Optional[Settings] = None):
    """Duerme ``seconds`` escalados por ``simulated_latency_scale``."""
    settings = settings or get_settings()
    delay = seconds * settings.simulated_latency_scale
    if delay > 0:
        await asyncio.sleep(delay)


class BaseListingSource(ABC, Generic[T]):
    """
    Clase base abstracta para fuentes de listings.

    Implementa la lógica común de latencia simulada y reintentos.
    """

    # Nombre del portal (override en subclases)
    SOURCE_NAME: str = "base"

    # URL base (override en subclases)
    BASE_URL: str = ""

    # Latencia simulada en segundos (min, max)
    LATENCY_RANGE: tuple[float, float] = (1.0, 3.0)

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.random_seed)

    async def _random_delay(self):
        """Aplica un delay aleatorio que simula la respuesta del portal."""
        await simulate_latency(self.rng.uniform(*self.LATENCY_RANGE), self.settings)

    async def fetch(self, city: str, limit: int) -> list[T]:
        """
        Obtiene listings de la fuente con reintentos.

        Args:
            city: Ciudad a consultar
            limit: Máximo de listings

        Returns:
            Lista de listings generados

        Raises:
            Exception: La última excepción si se agotan los intentos
        """
        scale = self.settings.simulated_latency_scale
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.source_retry_attempts),
            wait=wait_exponential(multiplier=scale, min=0, max=10 * scale),
            reraise=True,
        ):
            with attempt:
                logger.debug(
                    "Consultando fuente",
                    source=self.SOURCE_NAME,
                    city=city,
                    attempt=attempt.retry_state.attempt_number,
                )
                await self._random_delay()
                return self.generate(city, limit)
        return []

    @abstractmethod
    def generate(self, city: str, limit: int) -> list[T]:
        """Genera los listings de la fuente para una ciudad."""
        pass
