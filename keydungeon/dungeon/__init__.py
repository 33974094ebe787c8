"""Public dungeon package interface.

Layered lock-and-key dungeon generation: build with ``generate_dungeon`` or
``DungeonBuilder(config).build()``; consume the read-only ``Dungeon``.
"""

from .builder import DungeonBuilder, generate_dungeon  # noqa: F401
from .config import DungeonConfig  # noqa: F401
from .dungeon import Dungeon  # noqa: F401
from .errors import (  # noqa: F401
    ConfigurationError,
    DuplicateConnection,
    DuplicateCoordinate,
    DungeonError,
    GraphError,
    NotAdjacent,
    UnsolvableKeyPlacement,
)
from .graph import (  # noqa: F401
    BOSS,
    LOCKED,
    NORMAL,
    OPEN,
    SHORTCUT,
    START,
    Connection,
    DungeonGraph,
    Key,
    Room,
)
from .grid import OCTILE, ORTHOGONAL, Coordinate, is_adjacent, neighbors  # noqa: F401
from .solver import Solution, solve  # noqa: F401

__all__ = [
    "Dungeon",
    "DungeonBuilder",
    "DungeonConfig",
    "generate_dungeon",
    "solve",
    "Solution",
    "DungeonGraph",
    "Room",
    "Connection",
    "Key",
    "Coordinate",
    "neighbors",
    "is_adjacent",
    "ORTHOGONAL",
    "OCTILE",
    "NORMAL",
    "START",
    "BOSS",
    "OPEN",
    "LOCKED",
    "SHORTCUT",
    "DungeonError",
    "ConfigurationError",
    "GraphError",
    "DuplicateCoordinate",
    "NotAdjacent",
    "DuplicateConnection",
    "UnsolvableKeyPlacement",
]
