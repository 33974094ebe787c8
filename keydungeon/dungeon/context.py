"""Explicit mutable state for one generation run.

Grower, classifier and key distributor all read and write through this
object; nothing lives at module level, so independent runs (and tests) never
share state.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import DungeonConfig
from .graph import Connection, DungeonGraph, Room
from .grid import Coordinate, neighbors


@dataclass
class GrowthContext:
    config: DungeonConfig
    rng: random.Random
    graph: DungeonGraph
    start: Optional[Room] = None
    # room coordinate -> coordinate of the room it was grown from
    parents: Dict[Coordinate, Coordinate] = field(default_factory=dict)
    locks_added: Dict[int, int] = field(default_factory=dict)
    new_locks: Dict[int, List[Connection]] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_config(cls, config: DungeonConfig, rng: random.Random | None = None, metrics=None) -> "GrowthContext":
        if rng is None:
            rng = random.Random(config.seed)
        return cls(config=config, rng=rng, graph=DungeonGraph(config.rule), metrics=metrics or {})

    @property
    def rule(self) -> str:
        return self.graph.rule

    @property
    def bounds(self):
        return self.config.bounds

    def neighbors(self, coord, bounded: bool = True):
        return neighbors(coord, self.rule, self.bounds if bounded else None)

    def free_neighbors(self, coord, bounded: bool = True) -> List[Coordinate]:
        return [n for n in self.neighbors(coord, bounded) if not self.graph.is_occupied(n)]

    @property
    def last_layer(self) -> int:
        """Highest layer index holding at least one room."""
        indices = self.graph.layer_indices
        return indices[-1] if indices else 0


__all__ = ["GrowthContext"]
