"""Key distribution: one key per new lock, always obtainable before that lock."""
from __future__ import annotations

from typing import List, Optional, Sequence

from ..logging_utils import get_logger
from .context import GrowthContext
from .errors import UnsolvableKeyPlacement
from .graph import START, Connection, Key, Room
from .metrics import bump
from .solver import explore

log = get_logger("keydungeon.keys")


def _draw_reachable(ctx: GrowthContext, pool: Sequence[Room], held) -> Optional[Room]:
    """Draw uniformly without replacement until a room reachable with ``held`` keys turns up."""
    remaining = list(pool)
    while remaining:
        room = remaining.pop(ctx.rng.randrange(len(remaining)))
        if ctx.graph.is_reachable(ctx.start, room, ignore_locked=False, keys=held):
            return room
    return None


def place_key(
    ctx: GrowthContext,
    lock: Connection,
    layer: int,
    candidates: Sequence[Room],
    fallback: Sequence[Room],
) -> Key:
    """Put the key for ``lock`` in a room of ``candidates`` reachable without crossing it.

    ``held`` is every key collectable from the start with the current placements;
    ``lock`` itself has no key yet, so rooms behind it only pass when another
    route exists. When no candidate qualifies, a reachable room of ``fallback``
    is used; if even that fails the classification is contradictory.
    """
    held = explore(ctx.graph, ctx.start).keys
    pool = list(candidates)
    if not ctx.config.allow_start_room_keys:
        pool = [r for r in pool if r.role != START]
    tiers = []
    if ctx.config.one_key_per_room:
        tiers.append([r for r in pool if not ctx.graph.keys_in(r)])
    tiers.append(pool)
    for tier in tiers:
        room = _draw_reachable(ctx, tier, held)
        if room is not None:
            return ctx.graph.add_key(lock, room, layer)
    room = _draw_reachable(ctx, fallback, held)
    if room is None:
        raise UnsolvableKeyPlacement(f"no reachable room can hold the key for lock {lock.pair} (layer {layer})")
    bump(ctx.metrics, 'key_fallbacks')
    log.warn(event="key_fallback", layer=layer, lock=lock.pair, holder=tuple(room.coord))
    return ctx.graph.add_key(lock, room, layer)


def distribute_keys(ctx: GrowthContext, layer: int, locks: Sequence[Connection] | None = None) -> List[Key]:
    """Place exactly one key per lock created in ``layer``, in rooms of earlier layers."""
    if locks is None:
        locks = ctx.new_locks.get(layer, [])
    candidates = [r for r in ctx.graph.rooms if r.layer < layer]
    fallback = ctx.graph.rooms_in_layer(layer - 1)
    placed = [place_key(ctx, lock, layer, candidates, fallback) for lock in locks]
    bump(ctx.metrics, 'keys_placed', len(placed))
    return placed


__all__ = ["place_key", "distribute_keys"]
