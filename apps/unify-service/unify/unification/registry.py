"""Registries keyed by vertical/object(/provider), filled at bootstrap."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from unify.errors import MapperNotFound


class MappersRegistry:
    def __init__(self) -> None:
        self._mappers: Dict[Tuple[str, str, str], Any] = {}

    def register(self, vertical: str, object_name: str, provider: str, mapper: Any) -> None:
        self._mappers[(vertical, object_name, provider.lower())] = mapper

    def get(self, vertical: str, object_name: str, provider: str) -> Any:
        try:
            return self._mappers[(vertical, object_name, (provider or "").lower())]
        except KeyError:
            raise MapperNotFound(vertical, object_name, provider) from None


class SyncRegistry:
    def __init__(self) -> None:
        self._services: Dict[Tuple[str, str], Any] = {}

    def register(self, vertical: str, object_name: str, service: Any) -> None:
        self._services[(vertical, object_name)] = service

    def get(self, vertical: str, object_name: str) -> Any:
        service = self._services.get((vertical, object_name))
        if service is None:
            raise KeyError(f"No sync service registered for {vertical}.{object_name}")
        return service

    def all(self) -> List[Tuple[str, str, Any]]:
        return [(v, o, s) for (v, o), s in self._services.items()]


mappers_registry = MappersRegistry()
sync_registry = SyncRegistry()
