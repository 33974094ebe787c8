import random

import pytest

from keydungeon.dungeon.classifier import classify_layer, lock_count
from keydungeon.dungeon.config import DungeonConfig
from keydungeon.dungeon.context import GrowthContext
from keydungeon.dungeon.graph import LOCKED, OPEN, SHORTCUT, START
from keydungeon.dungeon.metrics import init_metrics

# Layout used below (x right, y down):
#   layer 0: S(0,0)
#   layer 1: (1,0) and (0,1), both grown from S
#   layer 2: (2,0) and (1,1) grown from (1,0); (2,1) grown from (2,0)
LAYER_1 = {(1, 0): (0, 0), (0, 1): (0, 0)}
LAYER_2 = {(2, 0): (1, 0), (1, 1): (1, 0), (2, 1): (2, 0)}


def staged(seed=3, **cfg):
    config = DungeonConfig(seed=seed, **cfg).validate()
    ctx = GrowthContext.for_config(config, random.Random(seed), init_metrics())
    ctx.start = ctx.graph.add_room((0, 0), 0, START)
    return ctx


def grow(ctx, layer, placements):
    rooms = []
    for coord, parent in placements.items():
        rooms.append(ctx.graph.add_room(coord, layer))
        ctx.parents[rooms[-1].coord] = ctx.graph.room_at(parent).coord
    return rooms


def classify_both(ctx):
    first = classify_layer(ctx, 1, grow(ctx, 1, LAYER_1))
    second = classify_layer(ctx, 2, grow(ctx, 2, LAYER_2))
    return first, second


@pytest.mark.parametrize(
    "setting,available,expected",
    [(1, 3, 1), (5, 2, 2), (0, 3, 0), (1, 0, 0), (0.5, 3, 2), (0.4, 2, 1), (1.0, 4, 4)],
)
def test_lock_count(setting, available, expected):
    assert lock_count(setting, available) == expected


def test_first_layer_never_locked():
    ctx = staged(locks_per_layer=1.0)
    first = classify_layer(ctx, 1, grow(ctx, 1, LAYER_1))
    assert first.locked == []
    assert ctx.locks_added[1] == 0
    assert all(c.kind == OPEN for c in ctx.graph.connections)


def test_second_layer_locks_one_cross_edge():
    ctx = staged()
    _, second = classify_both(ctx)
    assert len(second.cross_layer) == 2
    assert second.locks_added == 1
    assert ctx.locks_added[2] == 1
    lock = second.locked[0]
    assert ctx.graph.connection_between(lock.a, lock.b).kind == LOCKED
    assert {ctx.graph.room_at(c).layer for c in lock.pair} == {1, 2}
    assert ctx.new_locks[2] == [lock]
    assert ctx.metrics["locks_added"] == 1


def test_fraction_locks_every_cross_edge():
    ctx = staged(locks_per_layer=1.0)
    _, second = classify_both(ctx)
    assert second.locks_added == 2
    # Growth links inside the layer stay open
    assert ctx.graph.connection_between((2, 1), (2, 0)).kind == OPEN


def test_same_layer_and_shortcut_passes():
    ctx = staged()
    _, second = classify_both(ctx)
    assert ctx.graph.connection_between((1, 1), (2, 1)).kind == OPEN
    shortcut = ctx.graph.connection_between((1, 1), (0, 1))
    assert shortcut.kind == SHORTCUT and shortcut.layer == 2
    assert [c.pair for c in second.shortcuts] == [shortcut.pair]
    assert ctx.metrics["shortcut_connections"] == 1


def test_passes_can_be_disabled():
    ctx = staged(same_layer_connections=False, shortcuts=False)
    classify_both(ctx)
    assert ctx.graph.connection_between((1, 1), (2, 1)) is None
    assert ctx.graph.connection_between((1, 1), (0, 1)) is None


def test_shortcut_pass_covers_same_layer_pairs_when_disabled():
    ctx = staged(same_layer_connections=False)
    classify_both(ctx)
    assert ctx.graph.connection_between((1, 1), (2, 1)).kind == SHORTCUT


def test_zero_locks_setting():
    ctx = staged(locks_per_layer=0)
    _, second = classify_both(ctx)
    assert second.locked == [] and ctx.locks_added[2] == 0


def test_new_rooms_all_linked():
    ctx = staged()
    classify_both(ctx)
    reach = ctx.graph.reachable_from(ctx.start, ignore_locked=True)
    assert len(reach) == len(ctx.graph.rooms)
