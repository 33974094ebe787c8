import os
from dataclasses import dataclass, fields
from typing import Optional, Tuple, Union

from .errors import ConfigurationError
from .grid import Coordinate, in_bounds, normalize_rule

Range = Tuple[int, int]

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class DungeonConfig:
    seed: Optional[int] = None
    start_coordinate: Optional[Tuple[int, int]] = None
    rooms_per_layer_range: Range = (4, 7)
    layer_count_range: Range = (3, 5)
    adjacency: Union[str, int] = "orthogonal"
    locks_per_layer: Union[int, float] = 1
    same_layer_connections: bool = True
    shortcuts: bool = True
    width: Optional[int] = None
    height: Optional[int] = None
    start_window: int = 32
    allow_start_room_keys: bool = True
    one_key_per_room: bool = False
    enable_metrics: bool = True

    @property
    def bounds(self) -> Optional[Tuple[int, int]]:
        if self.width is None and self.height is None:
            return None
        return (self.width, self.height)

    @property
    def rule(self) -> str:
        return normalize_rule(self.adjacency)

    def validate(self) -> "DungeonConfig":
        """Check every option; raise ConfigurationError on the first problem."""
        _check_range("rooms_per_layer_range", self.rooms_per_layer_range, minimum=1)
        _check_range("layer_count_range", self.layer_count_range, minimum=1)
        self.adjacency = self.rule
        lpl = self.locks_per_layer
        if isinstance(lpl, bool) or not isinstance(lpl, (int, float)):
            raise ConfigurationError(f"locks_per_layer must be an int or float, got {lpl!r}")
        if isinstance(lpl, int) and lpl < 0:
            raise ConfigurationError("locks_per_layer count must be >= 0")
        if isinstance(lpl, float) and not 0.0 < lpl <= 1.0:
            raise ConfigurationError("locks_per_layer fraction must be in (0, 1]")
        if (self.width is None) != (self.height is None):
            raise ConfigurationError("width and height must be given together")
        if self.width is not None and (self.width < 1 or self.height < 1):
            raise ConfigurationError(f"bounds must be positive, got {self.width}x{self.height}")
        if self.start_window < 1:
            raise ConfigurationError("start_window must be >= 1")
        if self.start_coordinate is not None:
            try:
                start = Coordinate(*self.start_coordinate)
            except TypeError:
                raise ConfigurationError(f"start_coordinate must be an (x, y) pair, got {self.start_coordinate!r}")
            if not all(isinstance(v, int) and not isinstance(v, bool) for v in start):
                raise ConfigurationError(f"start_coordinate must hold integers, got {self.start_coordinate!r}")
            if not in_bounds(start, self.bounds):
                raise ConfigurationError(f"start_coordinate {tuple(start)} lies outside bounds {self.bounds}")
            self.start_coordinate = start
        return self

    def as_dict(self) -> dict:
        out = {}
        for f in fields(self):
            val = getattr(self, f.name)
            out[f.name] = list(val) if isinstance(val, tuple) else val
        return out

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "DungeonConfig":
        """Build a config from ``KEYDUNGEON_*`` variables; keyword overrides win."""
        env = os.environ if environ is None else environ
        cfg = cls()
        if "KEYDUNGEON_SEED" in env:
            cfg.seed = _env_int(env, "KEYDUNGEON_SEED")
        rooms = list(cfg.rooms_per_layer_range)
        layers = list(cfg.layer_count_range)
        for i, suffix in enumerate(("MIN", "MAX")):
            if f"KEYDUNGEON_ROOMS_{suffix}" in env:
                rooms[i] = _env_int(env, f"KEYDUNGEON_ROOMS_{suffix}")
            if f"KEYDUNGEON_LAYERS_{suffix}" in env:
                layers[i] = _env_int(env, f"KEYDUNGEON_LAYERS_{suffix}")
        cfg.rooms_per_layer_range = (rooms[0], rooms[1])
        cfg.layer_count_range = (layers[0], layers[1])
        if "KEYDUNGEON_ADJACENCY" in env:
            cfg.adjacency = env["KEYDUNGEON_ADJACENCY"]
        if "KEYDUNGEON_LOCKS_PER_LAYER" in env:
            cfg.locks_per_layer = parse_locks(env["KEYDUNGEON_LOCKS_PER_LAYER"])
        flag_map = {
            "KEYDUNGEON_SHORTCUTS": "shortcuts",
            "KEYDUNGEON_SAME_LAYER": "same_layer_connections",
            "KEYDUNGEON_ENABLE_METRICS": "enable_metrics",
            "KEYDUNGEON_START_ROOM_KEYS": "allow_start_room_keys",
            "KEYDUNGEON_ONE_KEY_PER_ROOM": "one_key_per_room",
        }
        for env_key, attr in flag_map.items():
            if env_key in env:
                setattr(cfg, attr, env[env_key].strip().lower() in _TRUTHY)
        for k, v in overrides.items():
            if v is not None:
                setattr(cfg, k, v)
        return cfg


def parse_locks(raw) -> Union[int, float]:
    """Parse a lock setting: ``"2"`` is a count, ``"0.5"`` a fraction."""
    s = str(raw).strip()
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        raise ConfigurationError(f"invalid locks_per_layer value: {raw!r}")


def _env_int(env, key: str) -> int:
    try:
        return int(env[key])
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {env[key]!r}")


def _check_range(name: str, value, minimum: int) -> None:
    try:
        lo, hi = value
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a (min, max) pair, got {value!r}")
    if not isinstance(lo, int) or not isinstance(hi, int):
        raise ConfigurationError(f"{name} bounds must be integers, got {value!r}")
    if lo < minimum:
        raise ConfigurationError(f"{name} minimum must be >= {minimum}, got {lo}")
    if hi < lo:
        raise ConfigurationError(f"{name} max < min: {value!r}")


__all__ = ["DungeonConfig", "parse_locks"]
