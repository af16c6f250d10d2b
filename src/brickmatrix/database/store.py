"""
Almacenamiento JSON de wishlist y comparación.

Un único archivo con una colección por clave; es la única persistencia
del sistema.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import structlog

from brickmatrix.config import get_settings

logger = structlog.get_logger()


class JsonStore:
    """Colecciones de dicts persistidas en un archivo JSON."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> dict[str, list[dict]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Archivo de wishlist corrupto, se ignora", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def read(self, collection: str) -> list[dict]:
        """Items de una colección (vacía si no existe)."""
        return list(self._load().get(collection, []))

    def write(self, collection: str, items: list[dict]) -> None:
        data = self._load()
        data[collection] = items
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def delete(self, collection: str) -> None:
        data = self._load()
        if data.pop(collection, None) is not None:
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


@lru_cache
def get_store(path: Optional[str] = None) -> JsonStore:
    """
    Obtiene el store JSON (singleton cacheado por ruta).

    Returns:
        JsonStore sobre ``settings.wishlist_path`` si no se indica ruta
    """
    store = JsonStore(path or get_settings().wishlist_path)
    logger.debug("Store JSON inicializado", path=str(store.path))
    return store
