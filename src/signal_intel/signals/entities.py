"""Searchable names from a signal's semi-structured ``entities`` payload.

The payload is whatever ingestion stored: usually a mapping with optional
``people``, ``organizations``, ``locations``, ``financials`` and ``dates``
lists, where each element is either a bare string or an object carrying a
``name``. Anything else is skipped without complaint.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

ENTITY_CATEGORIES = ("people", "organizations", "locations", "financials", "dates")

BARE = "bare"
NAMED = "named"


@dataclass(frozen=True)
class EntityName:
    category: str
    name: str
    kind: str


def _parse_element(category: str, element: Any) -> EntityName | None:
    if isinstance(element, str):
        return EntityName(category=category, name=element, kind=BARE)
    if isinstance(element, Mapping) and "name" in element:
        return EntityName(category=category, name=str(element["name"]), kind=NAMED)
    return None


def parse_entities(payload: Any) -> list[EntityName]:
    if not isinstance(payload, Mapping):
        return []

    parsed: list[EntityName] = []
    for category in ENTITY_CATEGORIES:
        elements = payload.get(category)
        if not isinstance(elements, list):
            continue
        for element in elements:
            entity = _parse_element(category, element)
            if entity is not None:
                parsed.append(entity)
    return parsed


def extract_entity_names(payload: Any) -> list[str]:
    return [entity.name.lower() for entity in parse_entities(payload)]
