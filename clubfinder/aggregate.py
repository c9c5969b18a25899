"""Result accumulation, deduplication and diagnostics."""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from .models import Diagnostics, Entity


class EntityArena:
    """Append-only entity list with an id -> index map.

    The first entity added for an id is canonical; later ones are dropped, so
    the keyword/sport that surfaced a place first decides its sport tag.
    """

    def __init__(self) -> None:
        self._entities: List[Entity] = []
        self._index_by_id: Dict[str, int] = {}

    def add(self, entity: Entity) -> bool:
        if entity.id in self._index_by_id:
            return False
        self._index_by_id[entity.id] = len(self._entities)
        self._entities.append(entity)
        return True

    def extend(self, entities: Iterable[Entity]) -> int:
        return sum(1 for e in entities if self.add(e))

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    def to_list(self) -> List[Entity]:
        return list(self._entities)


def dedupe(entities: Iterable[Entity]) -> List[Entity]:
    arena = EntityArena()
    arena.extend(entities)
    return arena.to_list()


def bypass_sample(entities: Iterable[Entity], size: int) -> List[Entity]:
    return dedupe(entities)[: max(0, size)]


def average_confidence(entities: List[Entity]) -> float:
    if not entities:
        return 0.0
    total = sum(e.confidence_score for e in entities)
    return round(total / len(entities), 1)


def finalize_diagnostics(diagnostics: Diagnostics, entities: List[Entity], bypassed: bool) -> Diagnostics:
    diagnostics.unique_count = len(entities)
    diagnostics.bypassed = bypassed
    diagnostics.avg_confidence = average_confidence(entities)
    return diagnostics
