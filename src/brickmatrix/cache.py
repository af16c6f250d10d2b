"""
Cache en memoria con TTL.

Cada servicio mantiene su propia instancia; nada se comparte entre
procesos ni se persiste.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


class TTLCache:
    """Diccionario con expiración por entrada."""

    def __init__(self, default_ttl: float, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Devuelve el valor si sigue vigente; si expiró lo elimina."""
        entry = self._entries.get(key)
        if entry and entry.is_fresh(self._clock()):
            return entry.data
        self._entries.pop(key, None)
        return None

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def values(self) -> Iterator[Any]:
        """Valores vigentes."""
        now = self._clock()
        for entry in list(self._entries.values()):
            if entry.is_fresh(now):
                yield entry.data

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict:
        return {"size": len(self._entries), "keys": list(self._entries.keys())}

    def __len__(self) -> int:
        return len(self._entries)
