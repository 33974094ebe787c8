"""Grid model: integer coordinates and the adjacency rule.

Every component asks this module which coordinates touch, so the rule stays
uniform across growth, classification and boss placement. Direction order is
fixed; generation relies on it for reproducible candidate ordering.
"""
from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

from .errors import ConfigurationError


class Coordinate(NamedTuple):
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)


Bounds = Tuple[int, int]

ORTHOGONAL = "orthogonal"
OCTILE = "octile"

_ORTHOGONAL_STEPS = ((-1, 0), (1, 0), (0, -1), (0, 1))
_DIAGONAL_STEPS = ((-1, -1), (1, -1), (-1, 1), (1, 1))

DIRECTIONS = {
    ORTHOGONAL: _ORTHOGONAL_STEPS,
    OCTILE: _ORTHOGONAL_STEPS + _DIAGONAL_STEPS,
}

_ALIASES = {
    "4": ORTHOGONAL,
    "orthogonal": ORTHOGONAL,
    "cardinal": ORTHOGONAL,
    "8": OCTILE,
    "octile": OCTILE,
    "diagonal": OCTILE,
}


def normalize_rule(rule) -> str:
    """Map user-facing adjacency spellings (4, "8", "octile", ...) to a rule name."""
    key = str(rule).strip().lower()
    if key not in _ALIASES:
        raise ConfigurationError(f"unknown adjacency rule: {rule!r}")
    return _ALIASES[key]


def in_bounds(coord: Coordinate, bounds: Optional[Bounds]) -> bool:
    if bounds is None:
        return True
    width, height = bounds
    return 0 <= coord.x < width and 0 <= coord.y < height


def neighbors(coord: Coordinate, rule: str = ORTHOGONAL, bounds: Optional[Bounds] = None) -> Tuple[Coordinate, ...]:
    """Coordinates adjacent to ``coord`` under ``rule``, optionally clipped to ``bounds``."""
    out = []
    for dx, dy in DIRECTIONS[rule]:
        n = Coordinate(coord[0] + dx, coord[1] + dy)
        if in_bounds(n, bounds):
            out.append(n)
    return tuple(out)


def is_adjacent(a: Coordinate, b: Coordinate, rule: str = ORTHOGONAL) -> bool:
    dx = abs(a[0] - b[0])
    dy = abs(a[1] - b[1])
    if rule == OCTILE:
        return max(dx, dy) == 1
    return dx + dy == 1


def ring(center: Coordinate, radius: int) -> Tuple[Coordinate, ...]:
    """Coordinates at Chebyshev distance exactly ``radius`` from ``center``, row-major."""
    if radius <= 0:
        return (Coordinate(center[0], center[1]),)
    cx, cy = center
    out = []
    for y in range(cy - radius, cy + radius + 1):
        for x in range(cx - radius, cx + radius + 1):
            if max(abs(x - cx), abs(y - cy)) == radius:
                out.append(Coordinate(x, y))
    return tuple(out)


__all__ = [
    "Coordinate",
    "Bounds",
    "ORTHOGONAL",
    "OCTILE",
    "DIRECTIONS",
    "normalize_rule",
    "in_bounds",
    "neighbors",
    "is_adjacent",
    "ring",
]
