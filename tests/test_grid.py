import pytest

from keydungeon.dungeon.errors import ConfigurationError
from keydungeon.dungeon.grid import (
    OCTILE,
    ORTHOGONAL,
    Coordinate,
    in_bounds,
    is_adjacent,
    neighbors,
    normalize_rule,
    ring,
)


def test_orthogonal_neighbors_fixed_order():
    assert neighbors(Coordinate(5, 5)) == (
        Coordinate(4, 5),
        Coordinate(6, 5),
        Coordinate(5, 4),
        Coordinate(5, 6),
    )


def test_octile_neighbors_include_diagonals():
    ns = neighbors(Coordinate(0, 0), OCTILE)
    assert len(ns) == 8
    assert Coordinate(1, 1) in ns and Coordinate(-1, -1) in ns
    # Orthogonal steps come first so both rules share a prefix
    assert ns[:4] == neighbors(Coordinate(0, 0), ORTHOGONAL)


def test_neighbors_clipped_to_bounds():
    assert set(neighbors(Coordinate(0, 0), ORTHOGONAL, bounds=(3, 3))) == {Coordinate(1, 0), Coordinate(0, 1)}
    assert len(neighbors(Coordinate(0, 0), OCTILE, bounds=(3, 3))) == 3
    assert neighbors(Coordinate(0, 0), ORTHOGONAL, bounds=(1, 1)) == ()


def test_is_adjacent_respects_rule():
    a, b = Coordinate(2, 2), Coordinate(3, 3)
    assert not is_adjacent(a, b, ORTHOGONAL)
    assert is_adjacent(a, b, OCTILE)
    assert is_adjacent(a, Coordinate(2, 3), ORTHOGONAL)
    assert not is_adjacent(a, a, OCTILE)
    assert not is_adjacent(a, Coordinate(4, 2), OCTILE)


def test_in_bounds():
    assert in_bounds(Coordinate(-50, 9000), None)
    assert in_bounds(Coordinate(0, 0), (1, 1))
    assert not in_bounds(Coordinate(1, 0), (1, 1))
    assert not in_bounds(Coordinate(0, -1), (4, 4))


@pytest.mark.parametrize("raw,expected", [(4, ORTHOGONAL), ("8", OCTILE), ("Octile", OCTILE), ("cardinal", ORTHOGONAL)])
def test_normalize_rule_aliases(raw, expected):
    assert normalize_rule(raw) == expected


def test_normalize_rule_rejects_unknown():
    with pytest.raises(ConfigurationError):
        normalize_rule("hex")


def test_ring_is_chebyshev_shell():
    assert ring(Coordinate(0, 0), 0) == (Coordinate(0, 0),)
    r1 = ring(Coordinate(0, 0), 1)
    assert len(r1) == 8
    assert len(ring(Coordinate(3, 3), 2)) == 16
    assert all(max(abs(c.x), abs(c.y)) == 1 for c in r1)
