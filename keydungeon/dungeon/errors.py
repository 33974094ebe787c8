"""Exception taxonomy for dungeon generation.

Frontier exhaustion has no exception class: it is an expected outcome and is
reported through ``Deferred`` results instead of being raised.
"""


class DungeonError(Exception):
    """Base class for all generation errors."""


class ConfigurationError(DungeonError, ValueError):
    """Invalid generation parameters; raised before any room is placed."""


class GraphError(DungeonError):
    pass


class DuplicateCoordinate(GraphError):
    def __init__(self, coord):
        super().__init__(f"coordinate already occupied: {tuple(coord)}")
        self.coord = coord


class NotAdjacent(GraphError):
    def __init__(self, a, b):
        super().__init__(f"coordinates are not adjacent: {tuple(a)} / {tuple(b)}")
        self.a = a
        self.b = b


class DuplicateConnection(GraphError):
    def __init__(self, a, b):
        super().__init__(f"connection already exists: {tuple(a)} / {tuple(b)}")
        self.a = a
        self.b = b


class UnsolvableKeyPlacement(DungeonError):
    """A lock could not receive a reachable key; the classification contradicts itself."""


__all__ = [
    "DungeonError",
    "ConfigurationError",
    "GraphError",
    "DuplicateCoordinate",
    "NotAdjacent",
    "DuplicateConnection",
    "UnsolvableKeyPlacement",
]
