"""Dungeon builder: orchestrates one generation run.

State sequence (recorded in ``DungeonBuilder.history``):
    init -> growing_layer(L) -> classifying_connections(L) -> placing_keys(L)
         -> ... -> finalizing -> placing_boss -> placing_final_key -> done

Random draws happen in a fixed order so a seed reproduces the same dungeon:
start coordinate (unless overridden), layer count, then per layer the room
count, one draw per placed room, the lock sample and the key draws; finally
the boss site, the boss neighbor and the boss key.
"""
from __future__ import annotations

import random
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from .classifier import classify_layer
from .config import DungeonConfig
from .context import GrowthContext
from .dungeon import Dungeon
from .errors import DungeonError, UnsolvableKeyPlacement
from .graph import BOSS, LOCKED, START, Connection, Room
from .grid import Coordinate, in_bounds, ring
from .grower import FRONTIER_EXHAUSTED, Deferred, frontier, grow_layer
from .keys import distribute_keys, place_key
from .metrics import init_metrics
from .solver import explore

INIT = "init"
GROWING_LAYER = "growing_layer"
CLASSIFYING_CONNECTIONS = "classifying_connections"
PLACING_KEYS = "placing_keys"
PLACING_BOSS = "placing_boss"
PLACING_FINAL_KEY = "placing_final_key"
FINALIZING = "finalizing"
DONE = "done"

log = get_logger("keydungeon.builder")


class DungeonBuilder:
    def __init__(self, config: DungeonConfig | None = None, *, seed: int | None = None, rng: random.Random | None = None):
        config = replace(config) if config is not None else DungeonConfig()
        if seed is not None:
            config.seed = seed
        config.validate()
        # Preserve seed semantics: 0 is a valid deterministic seed; None => random
        if config.seed is None:
            config.seed = random.randint(1, 1_000_000)
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)
        self.metrics: Dict[str, Any] = init_metrics() if config.enable_metrics else {}
        self.ctx = GrowthContext.for_config(config, self.rng, self.metrics)
        self.state = INIT
        self.history: List[Tuple[str, Optional[int]]] = []
        self.layer_count: Optional[int] = None
        self.boss_room: Optional[Room] = None
        self.boss_lock: Optional[Connection] = None

    def _enter(self, state: str, layer: int | None = None) -> None:
        self.state = state
        self.history.append((state, layer))

    def _phase(self, label: str, fn, *a, **k):
        if not self.metrics:
            return fn(*a, **k)
        ps = time.perf_counter()
        r = fn(*a, **k)
        pe = time.perf_counter()
        phases = self.metrics['phase_ms']
        phases[label] = phases.get(label, 0) + int((pe - ps) * 1000)
        return r

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def build(self) -> Dungeon:
        if self.state != INIT or self.history:
            raise DungeonError("builder instances are single-use")
        start = time.perf_counter()
        self._enter(INIT)
        self._place_start()
        self.layer_count = self.rng.randint(*self.config.layer_count_range)
        if self.metrics:
            self.metrics['layers_requested'] = self.layer_count
        for layer in range(1, self.layer_count + 1):
            if not self._run_layer(layer):
                break
        self._enter(FINALIZING)
        self._enter(PLACING_BOSS)
        self._phase('boss', self._place_boss)
        self._enter(PLACING_FINAL_KEY)
        self._phase('final_key', self._place_final_key)
        self._phase('validate', self._validate)
        self.ctx.graph.freeze()
        if self.metrics:
            self.metrics['runtime_ms'] = int((time.perf_counter() - start) * 1000)
        dungeon = Dungeon(self.ctx.graph, self.ctx.start, self.boss_room, self.config, self.ctx.locks_added, self.metrics)
        self._enter(DONE)
        log.info(
            event="dungeon_generated",
            seed=self.config.seed,
            rooms=len(dungeon.rooms),
            layers=len(dungeon.layers),
            locks=len(dungeon.locked_connections),
            keys=len(dungeon.keys),
        )
        return dungeon

    def _place_start(self) -> None:
        cfg = self.config
        if cfg.start_coordinate is not None:
            coord = Coordinate(*cfg.start_coordinate)
        elif cfg.bounds is not None:
            coord = Coordinate(self.rng.randrange(cfg.width), self.rng.randrange(cfg.height))
        else:
            coord = Coordinate(self.rng.randrange(cfg.start_window), self.rng.randrange(cfg.start_window))
        self.ctx.start = self.ctx.graph.add_room(coord, 0, START)

    def _run_layer(self, layer: int) -> bool:
        """Grow, classify and key one layer; False once the frontier yields nothing."""
        self._enter(GROWING_LAYER, layer)
        target = self.rng.randint(*self.config.rooms_per_layer_range)
        growth = self._phase('grow', grow_layer, self.ctx, layer, target)
        if not growth.rooms:
            log.warn(event="layers_truncated", layer=layer, requested=self.layer_count)
            return False
        if self.metrics:
            self.metrics['layers_grown'] += 1
        self._enter(CLASSIFYING_CONNECTIONS, layer)
        self._phase('classify', classify_layer, self.ctx, layer, growth.rooms)
        self._enter(PLACING_KEYS, layer)
        self._phase('keys', distribute_keys, self.ctx, layer)
        return True

    # ------------------------------------------------------------------
    # Boss
    # ------------------------------------------------------------------
    def _boss_site(self, final: int) -> Tuple[List[Coordinate], Optional[Deferred]]:
        """Candidate boss coordinates, plus a Deferred marker when the final layer is enclosed."""
        ctx = self.ctx
        candidates, _ = frontier(ctx, ctx.graph.rooms_in_layer(final))
        if candidates:
            return candidates, None
        deferred = Deferred(FRONTIER_EXHAUSTED, f"final layer {final} is enclosed")
        candidates, _ = frontier(ctx, ctx.graph.rooms)
        if candidates:
            return candidates, deferred
        return self._ring_search(final), deferred

    def _ring_search(self, final: int) -> List[Coordinate]:
        """Expand outward from the final layer, ignoring bounds, until free space touches a room."""
        graph = self.ctx.graph
        sources = graph.rooms_in_layer(final)
        xs = [r.x for r in graph.rooms]
        ys = [r.y for r in graph.rooms]
        max_radius = max(max(xs) - min(xs), max(ys) - min(ys)) + 2
        for radius in range(1, max_radius + 1):
            found: List[Coordinate] = []
            for room in sources:
                for c in ring(room.coord, radius):
                    if c in found or graph.is_occupied(c):
                        continue
                    if any(graph.is_occupied(n) for n in self.ctx.neighbors(c, bounded=False)):
                        found.append(c)
            if found:
                return found
        raise DungeonError("no free coordinate next to any room")

    def _place_boss(self) -> None:
        ctx = self.ctx
        final = ctx.last_layer
        candidates, deferred = self._boss_site(final)
        coord = candidates[self.rng.randrange(len(candidates))]
        touching = [ctx.graph.room_at(n) for n in ctx.neighbors(coord, bounded=False) if ctx.graph.is_occupied(n)]
        top = max(r.layer for r in touching)
        choices = [r for r in touching if r.layer == top]
        neighbor = choices[self.rng.randrange(len(choices))]
        if deferred is not None:
            if self.metrics:
                self.metrics['boss_fallback'] = True
            log.warn(
                event="boss_fallback",
                reason=deferred.reason,
                site=tuple(coord),
                in_bounds=in_bounds(coord, self.config.bounds),
                neighbor_layer=neighbor.layer,
            )
        boss_layer = final + 1
        self.boss_room = ctx.graph.add_room(coord, boss_layer, BOSS)
        self.boss_lock = ctx.graph.add_connection(coord, neighbor.coord, LOCKED, boss_layer)
        ctx.locks_added[boss_layer] = 1
        ctx.new_locks[boss_layer] = [self.boss_lock]
        if self.metrics:
            self.metrics['locks_added'] += 1

    def _place_final_key(self) -> None:
        ctx = self.ctx
        final = self.boss_room.layer - 1
        door = ctx.graph.room_at(self.boss_lock.other(self.boss_room.coord))
        if door.layer < final:
            # boss hangs off an earlier layer: keep the key at or below the door
            candidates = [r for r in ctx.graph.rooms if r.layer <= door.layer]
            fallback = ctx.graph.rooms_in_layer(final)
        else:
            candidates = ctx.graph.rooms_in_layer(final)
            fallback = [r for r in ctx.graph.rooms if r.role != BOSS]
        place_key(ctx, self.boss_lock, self.boss_room.layer, candidates, fallback)
        if self.metrics:
            self.metrics['keys_placed'] += 1

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _validate(self) -> None:
        graph = self.ctx.graph
        start = self.ctx.start
        everything = graph.reachable_from(start, ignore_locked=True)
        if len(everything) != len(graph.rooms):
            raise UnsolvableKeyPlacement(f"{len(graph.rooms) - len(everything)} rooms are disconnected")
        ex = explore(graph, start)
        if self.boss_room.coord not in ex.visited:
            raise UnsolvableKeyPlacement(f"boss room unreachable; unopened locks: {sorted(ex.blocked)}")


def generate_dungeon(config: DungeonConfig | None = None, **overrides) -> Dungeon:
    """Convenience wrapper: ``generate_dungeon(seed=42, layer_count_range=(2, 2))``."""
    if config is None:
        config = DungeonConfig(**overrides)
    elif overrides:
        config = replace(config, **overrides)
    return DungeonBuilder(config).build()


__all__ = [
    "INIT",
    "GROWING_LAYER",
    "CLASSIFYING_CONNECTIONS",
    "PLACING_KEYS",
    "PLACING_BOSS",
    "PLACING_FINAL_KEY",
    "FINALIZING",
    "DONE",
    "DungeonBuilder",
    "generate_dungeon",
]
