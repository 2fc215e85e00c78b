"""
Dispatch between unified payloads and provider wire formats.

Mappers implement::

    desunify(db, source, custom_field_mappings) -> provider payload
    unify(db, source, connection_id, custom_field_mappings) -> list of unified dicts
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .registry import MappersRegistry, mappers_registry


class CoreUnification:
    def __init__(self, registry: MappersRegistry) -> None:
        self.registry = registry

    def desunify(
        self,
        db: Session,
        *,
        source: Dict[str, Any],
        vertical: str,
        object_name: str,
        provider: str,
        custom_field_mappings: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        mapper = self.registry.get(vertical, object_name, provider)
        return mapper.desunify(db, source, custom_field_mappings or [])

    def unify(
        self,
        db: Session,
        *,
        source: Any,
        vertical: str,
        object_name: str,
        provider: str,
        connection_id: uuid.UUID,
        custom_field_mappings: Optional[List[Dict[str, str]]] = None,
    ) -> List[Dict[str, Any]]:
        mapper = self.registry.get(vertical, object_name, provider)
        return mapper.unify(db, source, connection_id, custom_field_mappings or [])


core_unification = CoreUnification(mappers_registry)


def as_list(source: Any) -> List[Any]:
    if source is None:
        return []
    return list(source) if isinstance(source, (list, tuple)) else [source]


def custom_fields_out(
    field_mappings: Optional[Dict[str, Any]],
    custom_field_mappings: List[Dict[str, str]],
) -> List[Dict[str, Any]]:
    """Translate ``{slug: value}`` into provider ``[{"id", "value"}]`` entries."""
    if not field_mappings:
        return []
    by_slug = {m["slug"]: m["remote_id"] for m in custom_field_mappings}
    return [{"id": by_slug[slug], "value": value} for slug, value in field_mappings.items() if slug in by_slug]


def custom_fields_in(
    remote_values: Dict[str, Any],
    custom_field_mappings: List[Dict[str, str]],
) -> Dict[str, Any]:
    """Collect ``{slug: value}`` from a provider's ``{remote_id: value}`` view."""
    result: Dict[str, Any] = {}
    for mapping in custom_field_mappings:
        key = str(mapping["remote_id"])
        if key in remote_values:
            result[mapping["slug"]] = remote_values[key]
    return result
