"""Read-only dungeon aggregate.

Public contract consumed by renderers, exporters and the HTTP layer:
    Dungeon.rooms / connections / keys          tuples, generation order
    Dungeon.start_room / boss_room              Room references
    Dungeon.layers                              tuple of room tuples, index = layer
    Dungeon.locks_added                         layer -> locks created in that pass
    Dungeon.metrics, seed, config               generation metadata
    Dungeon.to_dict()                           JSON-ready view (coordinates as [x, y])

Instances are only built by the builder once a run finished and validated.
Attribute assignment afterwards raises, the underlying graph is frozen and
``config`` hands out a fresh copy on every access.
"""
from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple

from .config import DungeonConfig
from .graph import Connection, DungeonGraph, Key, Room


class Dungeon:
    def __init__(
        self,
        graph: DungeonGraph,
        start_room: Room,
        boss_room: Optional[Room],
        config: DungeonConfig,
        locks_added: Dict[int, int],
        metrics: Dict[str, Any] | None = None,
    ):
        s = object.__setattr__
        s(self, "_graph", graph)
        s(self, "_config", replace(config))
        s(self, "seed", config.seed)
        s(self, "start_room", start_room)
        s(self, "boss_room", boss_room)
        s(self, "rooms", tuple(graph.rooms))
        s(self, "connections", tuple(graph.connections))
        s(self, "keys", tuple(graph.keys))
        s(self, "layers", tuple(tuple(graph.rooms_in_layer(i)) for i in range(max(graph.layer_indices) + 1)))
        s(self, "locks_added", MappingProxyType(dict(locks_added)))
        s(self, "metrics", MappingProxyType(dict(metrics or {})))

    def __setattr__(self, name, value):
        raise AttributeError(f"Dungeon is immutable (tried to set {name!r})")

    def __delattr__(self, name):
        raise AttributeError(f"Dungeon is immutable (tried to delete {name!r})")

    def __repr__(self) -> str:
        return (
            f"Dungeon(seed={self.seed}, rooms={len(self.rooms)}, layers={len(self.layers)}, "
            f"locks={len(self.locked_connections)}, keys={len(self.keys)})"
        )

    @property
    def config(self) -> DungeonConfig:
        return replace(self._config)

    # ---------------- Queries -------------------------------------------------
    def room_at(self, coord) -> Optional[Room]:
        return self._graph.room_at(coord)

    def rooms_in_layer(self, layer: int) -> Tuple[Room, ...]:
        return tuple(self._graph.rooms_in_layer(layer))

    def connections_of(self, room) -> Tuple[Connection, ...]:
        return tuple(self._graph.connections_of(room))

    def connection_between(self, a, b) -> Optional[Connection]:
        return self._graph.connection_between(a, b)

    def keys_in(self, room) -> Tuple[Key, ...]:
        return tuple(self._graph.keys_in(room))

    def key_for(self, lock) -> Optional[Key]:
        return self._graph.key_for(lock)

    def is_reachable(self, origin, target, ignore_locked: bool = False, keys=()) -> bool:
        return self._graph.is_reachable(origin, target, ignore_locked=ignore_locked, keys=keys)

    @property
    def locked_connections(self) -> Tuple[Connection, ...]:
        return tuple(c for c in self.connections if c.is_locked)

    @property
    def final_layer(self) -> int:
        """Index of the last grown (non-boss) layer."""
        if self.boss_room is not None:
            return self.boss_room.layer - 1
        return len(self.layers) - 1

    def solve(self):
        from .solver import solve

        return solve(self)

    # ---------------- Export --------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        def xy(c):
            return [c[0], c[1]]

        return {
            "seed": self.seed,
            "config": self.config.as_dict(),
            "start": xy(self.start_room.coord),
            "boss": xy(self.boss_room.coord) if self.boss_room else None,
            "layers": [[xy(r.coord) for r in layer] for layer in self.layers],
            "rooms": [
                {
                    "x": r.x,
                    "y": r.y,
                    "layer": r.layer,
                    "role": r.role,
                    "keys": [k.index for k in self._graph.keys_in(r)],
                }
                for r in self.rooms
            ],
            "connections": [
                {"a": xy(c.a), "b": xy(c.b), "kind": c.kind, "layer": c.layer} for c in self.connections
            ],
            "keys": [
                {"index": k.index, "holder": xy(k.holder), "lock": [xy(k.lock[0]), xy(k.lock[1])], "layer": k.layer}
                for k in self.keys
            ],
            "locks_added": {str(k): v for k, v in self.locks_added.items()},
            "metrics": dict(self.metrics),
        }


__all__ = ["Dungeon"]
