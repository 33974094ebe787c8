"""
project: KeyDungeon
module: dungeon_api.py
License: MIT

Dungeon generation API routes.

GET /api/dungeon            generated dungeon as JSON (Dungeon.to_dict())
GET /api/dungeon/solution   key-collecting traversal order for the same dungeon

Query args (all optional): seed (int or string), rooms_min, rooms_max,
layers_min, layers_max, adjacency, locks, shortcuts, same_layer, width, height.
Anything not given falls back to KEYDUNGEON_* environment settings.
"""

import hashlib
import json
import random
import threading
from collections import OrderedDict

from flask import Blueprint, current_app, jsonify, request

from keydungeon.dungeon import ConfigurationError, Dungeon, DungeonBuilder, DungeonConfig
from keydungeon.dungeon.config import parse_locks
from keydungeon.logging_utils import get_logger

bp_dungeon = Blueprint("dungeon_api", __name__)

log = get_logger("keydungeon.api")

SEED_MAX = 2**63 - 1


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into a bounded non-negative int."""
    if payload_seed is None:
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, int):
        return payload_seed % SEED_MAX
    s = str(payload_seed).strip()
    if not s:
        return random.randint(1, 1_000_000)
    if s.isdigit():
        return int(s) % SEED_MAX
    h = hashlib.sha256(s.encode("utf-8")).digest()
    return int.from_bytes(h[:8], "big") % SEED_MAX


def _int_arg(args, name: str):
    raw = args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _flag_arg(args, name: str):
    raw = args.get(name)
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


def config_from_args(args) -> DungeonConfig:
    """Build a validated DungeonConfig from request query args over the env defaults."""
    cfg = DungeonConfig.from_env()
    cfg.seed = _coerce_seed(args.get("seed", cfg.seed))
    rooms = list(cfg.rooms_per_layer_range)
    layers = list(cfg.layer_count_range)
    for i, suffix in enumerate(("min", "max")):
        val = _int_arg(args, f"rooms_{suffix}")
        if val is not None:
            rooms[i] = val
        val = _int_arg(args, f"layers_{suffix}")
        if val is not None:
            layers[i] = val
    cfg.rooms_per_layer_range = (rooms[0], rooms[1])
    cfg.layer_count_range = (layers[0], layers[1])
    if args.get("adjacency"):
        cfg.adjacency = args["adjacency"]
    if args.get("locks"):
        cfg.locks_per_layer = parse_locks(args["locks"])
    for arg, attr in (("shortcuts", "shortcuts"), ("same_layer", "same_layer_connections")):
        flag = _flag_arg(args, arg)
        if flag is not None:
            setattr(cfg, attr, flag)
    width = _int_arg(args, "width")
    height = _int_arg(args, "height")
    if width is not None or height is not None:
        cfg.width, cfg.height = width, height
    return cfg.validate()


# Small in-process cache keyed by the resolved configuration; the dev server
# is threaded, so access goes through the lock.
_dungeon_cache: "OrderedDict[str, Dungeon]" = OrderedDict()
_dungeon_cache_lock = threading.Lock()


def get_cached_dungeon(cfg: DungeonConfig) -> Dungeon:
    if current_app.config.get("KEYDUNGEON_DISABLE_CACHE"):
        return DungeonBuilder(cfg).build()
    key = json.dumps(cfg.as_dict(), sort_keys=True)
    with _dungeon_cache_lock:
        dungeon = _dungeon_cache.get(key)
        if dungeon is not None:
            _dungeon_cache.move_to_end(key)
            return dungeon
    dungeon = DungeonBuilder(cfg).build()
    with _dungeon_cache_lock:
        _dungeon_cache[key] = dungeon
        while len(_dungeon_cache) > current_app.config.get("KEYDUNGEON_CACHE_MAX", 8):
            _dungeon_cache.popitem(last=False)
    return dungeon


def clear_cache() -> None:
    with _dungeon_cache_lock:
        _dungeon_cache.clear()


@bp_dungeon.errorhandler(ConfigurationError)
def _bad_config(err):
    log.info(event="bad_config", error=str(err))
    return jsonify({"error": str(err)}), 400


@bp_dungeon.route("/api/dungeon", methods=["GET"])
def dungeon_json():
    cfg = config_from_args(request.args)
    return jsonify(get_cached_dungeon(cfg).to_dict())


@bp_dungeon.route("/api/dungeon/solution", methods=["GET"])
def dungeon_solution():
    cfg = config_from_args(request.args)
    dungeon = get_cached_dungeon(cfg)
    payload = dungeon.solve().to_dict()
    payload["seed"] = dungeon.seed
    return jsonify(payload)
