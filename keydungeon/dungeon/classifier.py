"""Connection classification for a freshly grown layer.

Three ordered passes per layer L:
    * growth links: every new room is joined to the room it was grown from;
      links reaching back into layer L-1 are the cross-layer edges, a sample of
      which is upgraded to LOCKED (never for L == 1, the player starts keyless);
    * same-layer pass: remaining adjacent pairs inside layer L become OPEN;
    * shortcut pass: any other adjacent pair touching a new room becomes a
      SHORTCUT. Shortcuts are never locked.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Union

from .context import GrowthContext
from .graph import LOCKED, OPEN, SHORTCUT, Connection, Room
from .metrics import bump


@dataclass
class LayerClassification:
    layer: int
    cross_layer: List[Connection] = field(default_factory=list)
    locked: List[Connection] = field(default_factory=list)
    same_layer: List[Connection] = field(default_factory=list)
    shortcuts: List[Connection] = field(default_factory=list)

    @property
    def locks_added(self) -> int:
        return len(self.locked)


def lock_count(setting: Union[int, float], available: int) -> int:
    """Number of cross-layer edges to lock: an int is a count, a float a fraction (rounded up)."""
    if available <= 0:
        return 0
    if isinstance(setting, float):
        return min(available, math.ceil(setting * available))
    return min(available, int(setting))


def link_growth_parents(ctx: GrowthContext, layer: int, rooms: List[Room], result: LayerClassification) -> None:
    graph = ctx.graph
    for room in rooms:
        parent = graph.room_at(ctx.parents[room.coord])
        conn = graph.add_connection(room.coord, parent.coord, OPEN, layer)
        if parent.layer == layer - 1:
            result.cross_layer.append(conn)
        else:
            result.same_layer.append(conn)


def lock_cross_edges(ctx: GrowthContext, layer: int, result: LayerClassification) -> None:
    if layer < 2:
        return
    n = lock_count(ctx.config.locks_per_layer, len(result.cross_layer))
    if n == 0:
        return
    picks = sorted(ctx.rng.sample(range(len(result.cross_layer)), n))
    for i in picks:
        locked = ctx.graph.set_kind(result.cross_layer[i], LOCKED)
        result.cross_layer[i] = locked
        result.locked.append(locked)


def connect_same_layer(ctx: GrowthContext, layer: int, rooms: List[Room], result: LayerClassification) -> None:
    graph = ctx.graph
    for room in rooms:
        for n in ctx.neighbors(room.coord, bounded=False):
            other = graph.room_at(n)
            if other is None or other.layer != layer or graph.connection_between(room.coord, n):
                continue
            result.same_layer.append(graph.add_connection(room.coord, n, OPEN, layer))


def add_shortcuts(ctx: GrowthContext, layer: int, rooms: List[Room], result: LayerClassification) -> None:
    graph = ctx.graph
    for room in rooms:
        for n in ctx.neighbors(room.coord, bounded=False):
            if graph.room_at(n) is None or graph.connection_between(room.coord, n):
                continue
            result.shortcuts.append(graph.add_connection(room.coord, n, SHORTCUT, layer))


def classify_layer(ctx: GrowthContext, layer: int, rooms: List[Room]) -> LayerClassification:
    result = LayerClassification(layer=layer)
    link_growth_parents(ctx, layer, rooms, result)
    lock_cross_edges(ctx, layer, result)
    if ctx.config.same_layer_connections:
        connect_same_layer(ctx, layer, rooms, result)
    if ctx.config.shortcuts:
        add_shortcuts(ctx, layer, rooms, result)
    ctx.locks_added[layer] = result.locks_added
    ctx.new_locks[layer] = list(result.locked)
    bump(ctx.metrics, 'locks_added', result.locks_added)
    opened = len(result.cross_layer) - result.locks_added + len(result.same_layer)
    bump(ctx.metrics, 'open_connections', opened)
    bump(ctx.metrics, 'shortcut_connections', len(result.shortcuts))
    return result


__all__ = [
    "LayerClassification",
    "lock_count",
    "link_growth_parents",
    "lock_cross_edges",
    "connect_same_layer",
    "add_shortcuts",
    "classify_layer",
]
