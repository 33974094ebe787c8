"""Room/connection graph over grid coordinates.

Rooms are keyed by coordinate; connections by the unordered coordinate pair.
Keys are tracked here as well so reachability queries can open the locks a
traverser already holds the key for.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .errors import DuplicateConnection, DuplicateCoordinate, GraphError, NotAdjacent
from .grid import ORTHOGONAL, Coordinate, is_adjacent

NORMAL = "normal"
START = "start"
BOSS = "boss"
ROOM_ROLES = (NORMAL, START, BOSS)

OPEN = "open"
LOCKED = "locked"
SHORTCUT = "shortcut"
CONNECTION_KINDS = (OPEN, LOCKED, SHORTCUT)

Pair = Tuple[Coordinate, Coordinate]


def pair_of(a, b) -> Pair:
    """Canonical (sorted) form of an unordered coordinate pair."""
    a = Coordinate(*a)
    b = Coordinate(*b)
    return (a, b) if a <= b else (b, a)


@dataclass(frozen=True)
class Room:
    coord: Coordinate
    layer: int
    role: str = NORMAL

    @property
    def x(self) -> int:
        return self.coord.x

    @property
    def y(self) -> int:
        return self.coord.y


@dataclass(frozen=True)
class Connection:
    a: Coordinate
    b: Coordinate
    kind: str
    layer: int

    @property
    def pair(self) -> Pair:
        return (self.a, self.b)

    @property
    def is_locked(self) -> bool:
        return self.kind == LOCKED

    def other(self, coord: Coordinate) -> Coordinate:
        if coord == self.a:
            return self.b
        if coord == self.b:
            return self.a
        raise GraphError(f"{tuple(coord)} is not an endpoint of {self.pair}")


@dataclass(frozen=True)
class Key:
    index: int
    lock: Pair
    holder: Coordinate
    layer: int


class DungeonGraph:
    def __init__(self, rule: str = ORTHOGONAL):
        self.rule = rule
        self._rooms: Dict[Coordinate, Room] = {}
        self._layers: Dict[int, List[Room]] = {}
        self._connections: Dict[Pair, Connection] = {}
        self._edges: Dict[Coordinate, List[Connection]] = {}
        self._keys: List[Key] = []
        self._keys_by_lock: Dict[Pair, Key] = {}
        self._keys_by_room: Dict[Coordinate, List[Key]] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def freeze(self) -> None:
        """Refuse further edits; called once generation has been validated."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphError("graph is frozen; finished dungeons are read-only")

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------
    def add_room(self, coord, layer: int, role: str = NORMAL) -> Room:
        self._check_mutable()
        coord = Coordinate(*coord)
        if coord in self._rooms:
            raise DuplicateCoordinate(coord)
        if role not in ROOM_ROLES:
            raise GraphError(f"unknown room role: {role!r}")
        if layer < 0:
            raise GraphError(f"negative layer index: {layer}")
        room = Room(coord, layer, role)
        self._rooms[coord] = room
        self._layers.setdefault(layer, []).append(room)
        self._edges[coord] = []
        return room

    def room_at(self, coord) -> Optional[Room]:
        return self._rooms.get(Coordinate(*coord))

    def is_occupied(self, coord) -> bool:
        return Coordinate(*coord) in self._rooms

    def rooms_in_layer(self, layer: int) -> List[Room]:
        return list(self._layers.get(layer, ()))

    @property
    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    @property
    def occupied(self) -> FrozenSet[Coordinate]:
        return frozenset(self._rooms)

    @property
    def layer_indices(self) -> List[int]:
        return sorted(self._layers)

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------
    def add_connection(self, a, b, kind: str = OPEN, layer: int = 0) -> Connection:
        self._check_mutable()
        if kind not in CONNECTION_KINDS:
            raise GraphError(f"unknown connection kind: {kind!r}")
        a, b = pair_of(a, b)
        if not is_adjacent(a, b, self.rule):
            raise NotAdjacent(a, b)
        for c in (a, b):
            if c not in self._rooms:
                raise GraphError(f"no room at {tuple(c)}")
        if (a, b) in self._connections:
            raise DuplicateConnection(a, b)
        conn = Connection(a, b, kind, layer)
        self._store(conn)
        return conn

    def set_kind(self, conn: Connection, kind: str) -> Connection:
        """Replace ``conn`` with the same edge of a different kind (lock upgrades)."""
        self._check_mutable()
        if self._keys_by_lock.get(conn.pair) is not None:
            raise GraphError(f"cannot reclassify {conn.pair}: a key already targets it")
        current = self._connections.get(conn.pair)
        if current is None:
            raise GraphError(f"no connection {conn.pair}")
        updated = Connection(current.a, current.b, kind, current.layer)
        for c in updated.pair:
            self._edges[c] = [updated if e.pair == updated.pair else e for e in self._edges[c]]
        self._connections[updated.pair] = updated
        return updated

    def _store(self, conn: Connection) -> None:
        self._connections[conn.pair] = conn
        self._edges[conn.a].append(conn)
        self._edges[conn.b].append(conn)

    def connection_between(self, a, b) -> Optional[Connection]:
        return self._connections.get(pair_of(a, b))

    def connections_of(self, room) -> List[Connection]:
        coord = room.coord if isinstance(room, Room) else Coordinate(*room)
        return list(self._edges.get(coord, ()))

    @property
    def connections(self) -> List[Connection]:
        return list(self._connections.values())

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------
    def add_key(self, lock, holder, layer: int) -> Key:
        self._check_mutable()
        lock_pair = lock.pair if isinstance(lock, Connection) else pair_of(*lock)
        conn = self._connections.get(lock_pair)
        if conn is None or conn.kind != LOCKED:
            raise GraphError(f"no locked connection {lock_pair}")
        if lock_pair in self._keys_by_lock:
            raise GraphError(f"lock {lock_pair} already has a key")
        holder = holder.coord if isinstance(holder, Room) else Coordinate(*holder)
        if holder not in self._rooms:
            raise GraphError(f"no room at {tuple(holder)}")
        key = Key(len(self._keys), lock_pair, holder, layer)
        self._keys.append(key)
        self._keys_by_lock[lock_pair] = key
        self._keys_by_room.setdefault(holder, []).append(key)
        return key

    def keys_in(self, room) -> List[Key]:
        coord = room.coord if isinstance(room, Room) else Coordinate(*room)
        return list(self._keys_by_room.get(coord, ()))

    def key_for(self, lock) -> Optional[Key]:
        lock_pair = lock.pair if isinstance(lock, Connection) else pair_of(*lock)
        return self._keys_by_lock.get(lock_pair)

    @property
    def keys(self) -> List[Key]:
        return list(self._keys)

    # ------------------------------------------------------------------
    # Reachability
    # ------------------------------------------------------------------
    def reachable_from(self, origin, ignore_locked: bool = False, keys: Iterable = ()) -> Set[Coordinate]:
        """Breadth-first flood from ``origin``.

        Locked edges are impassable unless ``ignore_locked`` is set or the lock's
        pair appears in ``keys`` (``Key`` objects or lock pairs).
        """
        origin = origin.coord if isinstance(origin, Room) else Coordinate(*origin)
        if origin not in self._rooms:
            return set()
        held = {k.lock if isinstance(k, Key) else pair_of(*k) for k in keys}
        q = deque([origin])
        visited = {origin}
        while q:
            cur = q.popleft()
            for conn in self._edges[cur]:
                if conn.kind == LOCKED and not ignore_locked and conn.pair not in held:
                    continue
                nxt = conn.other(cur)
                if nxt not in visited:
                    visited.add(nxt)
                    q.append(nxt)
        return visited

    def is_reachable(self, origin, target, ignore_locked: bool = False, keys: Iterable = ()) -> bool:
        target = target.coord if isinstance(target, Room) else Coordinate(*target)
        return target in self.reachable_from(origin, ignore_locked=ignore_locked, keys=keys)


__all__ = [
    "NORMAL",
    "START",
    "BOSS",
    "ROOM_ROLES",
    "OPEN",
    "LOCKED",
    "SHORTCUT",
    "CONNECTION_KINDS",
    "Pair",
    "pair_of",
    "Room",
    "Connection",
    "Key",
    "DungeonGraph",
]
