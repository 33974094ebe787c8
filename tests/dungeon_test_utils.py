"""Shared helpers for dungeon structure tests."""

from keydungeon.dungeon import DungeonConfig, generate_dungeon
from keydungeon.dungeon.graph import DungeonGraph
from keydungeon.dungeon.grid import is_adjacent

SAMPLE_SEEDS = (1, 7, 42, 99, 123, 2024, 31337, 424242)


def small_config(seed, **kw):
    base = dict(seed=seed, rooms_per_layer_range=(3, 5), layer_count_range=(2, 4))
    base.update(kw)
    return DungeonConfig(**base)


def build(seed, **kw):
    return generate_dungeon(small_config(seed, **kw))


def line_graph(n, rule="orthogonal"):
    """Rooms at (0,0)..(n-1,0), layer == x, joined by OPEN edges."""
    g = DungeonGraph(rule)
    for x in range(n):
        g.add_room((x, 0), x, "start" if x == 0 else "normal")
    for x in range(n - 1):
        g.add_connection((x, 0), (x + 1, 0), "open", x + 1)
    return g


def locks_between(dungeon, a_layer, b_layer):
    out = []
    for c in dungeon.locked_connections:
        layers = sorted((dungeon.room_at(c.a).layer, dungeon.room_at(c.b).layer))
        if layers == sorted((a_layer, b_layer)):
            out.append(c)
    return out


def assert_edges_adjacent(dungeon):
    rule = dungeon.config.adjacency
    for c in dungeon.connections:
        assert is_adjacent(c.a, c.b, rule), f"non-adjacent edge {c.pair}"
