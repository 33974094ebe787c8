"""Layer growth: frontier expansion that populates one new layer.

Each placement draws uniformly from the current frontier of the previous
layer plus the rooms already placed in this pass, so later rooms may branch
off earlier ones. Running out of frontier is an expected outcome and comes
back as a ``Deferred`` result rather than an exception.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from ..logging_utils import get_logger
from .context import GrowthContext
from .graph import NORMAL, Room
from .grid import Coordinate
from .metrics import bump

FRONTIER_EXHAUSTED = "frontier_exhausted"

log = get_logger("keydungeon.grower")


@dataclass(frozen=True)
class Placed:
    room: Room


@dataclass(frozen=True)
class Deferred:
    reason: str
    detail: str = ""


PlacementResult = Union[Placed, Deferred]


@dataclass
class LayerGrowth:
    layer: int
    requested: int
    rooms: List[Room] = field(default_factory=list)
    deferred: Optional[Deferred] = None

    @property
    def exhausted(self) -> bool:
        return self.deferred is not None


def frontier(ctx: GrowthContext, sources: List[Room]) -> Tuple[List[Coordinate], Dict[Coordinate, Coordinate]]:
    """Unoccupied neighbors of ``sources`` in first-seen order, plus the first room offering each."""
    order: List[Coordinate] = []
    offered_by: Dict[Coordinate, Coordinate] = {}
    for room in sources:
        for n in ctx.free_neighbors(room.coord):
            if n not in offered_by:
                offered_by[n] = room.coord
                order.append(n)
    return order, offered_by


def place_room(ctx: GrowthContext, layer: int, placed: List[Room]) -> PlacementResult:
    sources = ctx.graph.rooms_in_layer(layer - 1) + placed
    candidates, offered_by = frontier(ctx, sources)
    if not candidates:
        return Deferred(FRONTIER_EXHAUSTED, f"layer {layer} has no free neighbor after {len(placed)} rooms")
    coord = candidates[ctx.rng.randrange(len(candidates))]
    room = ctx.graph.add_room(coord, layer, NORMAL)
    ctx.parents[coord] = offered_by[coord]
    return Placed(room)


def grow_layer(ctx: GrowthContext, layer: int, target: int) -> LayerGrowth:
    """Grow up to ``target`` rooms at index ``layer`` (fewer when the frontier runs out)."""
    growth = LayerGrowth(layer=layer, requested=target)
    for _ in range(target):
        result = place_room(ctx, layer, growth.rooms)
        if isinstance(result, Deferred):
            growth.deferred = result
            break
        growth.rooms.append(result.room)
    bump(ctx.metrics, 'rooms_requested', target)
    bump(ctx.metrics, 'rooms_placed', len(growth.rooms))
    if growth.exhausted:
        bump(ctx.metrics, 'frontier_exhaustions')
        log.warn(event=FRONTIER_EXHAUSTED, layer=layer, requested=target, placed=len(growth.rooms))
    else:
        log.debug(event="layer_grown", layer=layer, rooms=len(growth.rooms))
    return growth


__all__ = [
    "FRONTIER_EXHAUSTED",
    "Placed",
    "Deferred",
    "PlacementResult",
    "LayerGrowth",
    "frontier",
    "place_room",
    "grow_layer",
]
