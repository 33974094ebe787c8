"""Key-collecting traversal.

``explore`` computes the obtainable region: flood from the start room over
open and shortcut edges, pick up every key in each visited room, and pass a
locked edge once its key is held. Iterates to a fixed point, so backtracking
for keys is implicit in the visit order.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .graph import LOCKED, Key, Pair, Room
from .grid import Coordinate


@dataclass
class Exploration:
    order: List[Coordinate] = field(default_factory=list)
    keys: List[Key] = field(default_factory=list)
    blocked: Dict[Pair, List[Coordinate]] = field(default_factory=dict)

    @property
    def visited(self) -> Set[Coordinate]:
        return set(self.order)

    @property
    def held(self) -> Set[Pair]:
        return {k.lock for k in self.keys}


@dataclass
class Solution:
    order: List[Coordinate]
    keys_collected: List[Key]
    boss: Optional[Coordinate]
    unopened: List[Pair]

    @property
    def solvable(self) -> bool:
        return self.boss is not None and self.boss in set(self.order)

    def to_dict(self) -> dict:
        return {
            "solvable": self.solvable,
            "order": [list(c) for c in self.order],
            "keys_collected": [
                {"index": k.index, "holder": list(k.holder), "lock": [list(c) for c in k.lock]}
                for k in self.keys_collected
            ],
            "unopened_locks": [[list(c) for c in p] for p in self.unopened],
        }


def explore(graph, start) -> Exploration:
    """Fixed-point flood from ``start`` collecting keys; ``graph`` needs connections_of/keys_in."""
    start = start.coord if isinstance(start, Room) else Coordinate(*start)
    result = Exploration()
    visited: Set[Coordinate] = set()
    held: Set[Pair] = set()
    q: deque = deque()

    def visit(coord: Coordinate) -> None:
        stack = [coord]
        while stack:
            c = stack.pop()
            if c in visited:
                continue
            visited.add(c)
            result.order.append(c)
            q.append(c)
            for key in graph.keys_in(c):
                held.add(key.lock)
                result.keys.append(key)
                stack.extend(result.blocked.pop(key.lock, ()))

    visit(start)
    while q:
        cur = q.popleft()
        for conn in graph.connections_of(cur):
            nxt = conn.other(cur)
            if nxt in visited:
                continue
            if conn.kind == LOCKED and conn.pair not in held:
                result.blocked.setdefault(conn.pair, []).append(nxt)
                continue
            visit(nxt)
    return result


def solve(dungeon) -> Solution:
    """Traversal order for a finished dungeon (anything exposing start_room/boss_room and graph queries)."""
    start = dungeon.start_room
    boss = dungeon.boss_room.coord if dungeon.boss_room is not None else None
    ex = explore(dungeon, start)
    return Solution(order=ex.order, keys_collected=ex.keys, boss=boss, unopened=sorted(ex.blocked))


__all__ = ["Exploration", "Solution", "explore", "solve"]
