import random

from keydungeon.dungeon.config import DungeonConfig
from keydungeon.dungeon.context import GrowthContext
from keydungeon.dungeon.graph import START
from keydungeon.dungeon.grid import Coordinate, is_adjacent
from keydungeon.dungeon.grower import FRONTIER_EXHAUSTED, Deferred, Placed, frontier, grow_layer, place_room
from keydungeon.dungeon.metrics import init_metrics


def make_ctx(seed=1, start=(0, 0), **cfg):
    config = DungeonConfig(seed=seed, **cfg).validate()
    ctx = GrowthContext.for_config(config, random.Random(seed), init_metrics())
    ctx.start = ctx.graph.add_room(start, 0, START)
    return ctx


def test_frontier_lists_free_neighbors_once():
    ctx = make_ctx()
    ctx.graph.add_room((1, 0), 0)
    order, offered_by = frontier(ctx, ctx.graph.rooms_in_layer(0))
    assert len(order) == len(set(order)) == 6
    assert Coordinate(1, 0) not in order
    # (0, 1) is offered by the start room first
    assert offered_by[Coordinate(0, 1)] == Coordinate(0, 0)
    assert offered_by[Coordinate(2, 0)] == Coordinate(1, 0)


def test_layer_rooms_touch_previous_layer_or_each_other():
    ctx = make_ctx(seed=5)
    growth = grow_layer(ctx, 1, 6)
    assert len(growth.rooms) == 6 and not growth.exhausted
    seen = [ctx.start]
    for room in growth.rooms:
        assert room.layer == 1
        parent = ctx.parents[room.coord]
        assert is_adjacent(room.coord, parent)
        assert parent in {r.coord for r in seen}
        seen.append(room)


def test_second_layer_grows_from_first():
    ctx = make_ctx(seed=9)
    first = grow_layer(ctx, 1, 3)
    second = grow_layer(ctx, 2, 4)
    allowed = {r.coord for r in first.rooms} | {r.coord for r in second.rooms}
    for room in second.rooms:
        assert ctx.parents[room.coord] in allowed
    # At least one room of layer 2 hangs directly off layer 1
    assert any(ctx.graph.room_at(ctx.parents[r.coord]).layer == 1 for r in second.rooms)


def test_frontier_exhaustion_returns_partial_layer(capsys):
    ctx = make_ctx(width=1, height=2)
    growth = grow_layer(ctx, 1, 3)
    assert [r.coord for r in growth.rooms] == [Coordinate(0, 1)]
    assert growth.exhausted
    assert growth.deferred.reason == FRONTIER_EXHAUSTED
    assert ctx.metrics["frontier_exhaustions"] == 1
    assert ctx.metrics["rooms_requested"] == 3
    assert ctx.metrics["rooms_placed"] == 1
    assert "frontier_exhausted" in capsys.readouterr().err


def test_enclosed_start_grows_nothing():
    ctx = make_ctx(start=(5, 5))
    for c in ((4, 5), (6, 5), (5, 4), (5, 6)):
        ctx.graph.add_room(c, 3)
    result = place_room(ctx, 1, [])
    assert isinstance(result, Deferred)
    growth = grow_layer(ctx, 1, 2)
    assert growth.rooms == [] and growth.exhausted


def test_place_room_respects_bounds():
    ctx = make_ctx(seed=3, width=4, height=4)
    for layer in (1, 2):
        grow_layer(ctx, layer, 3)
    for room in ctx.graph.rooms:
        assert 0 <= room.x < 4 and 0 <= room.y < 4


def test_growth_is_seed_deterministic():
    def coords(seed):
        ctx = make_ctx(seed=seed)
        grow_layer(ctx, 1, 5)
        return [r.coord for r in ctx.graph.rooms]

    assert coords(77) == coords(77)


def test_place_room_returns_placed_with_parent():
    ctx = make_ctx(seed=2)
    result = place_room(ctx, 1, [])
    assert isinstance(result, Placed)
    assert ctx.parents[result.room.coord] == Coordinate(0, 0)
