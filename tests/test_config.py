import pytest

from keydungeon.dungeon import ConfigurationError, DungeonConfig
from keydungeon.dungeon.config import parse_locks
from keydungeon.dungeon.grid import Coordinate


def test_defaults_validate():
    cfg = DungeonConfig().validate()
    assert cfg.adjacency == "orthogonal"
    assert cfg.bounds is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"layer_count_range": (0, 0)},
        {"rooms_per_layer_range": (0, 3)},
        {"rooms_per_layer_range": (5, 2)},
        {"layer_count_range": "3"},
        {"adjacency": "hex"},
        {"locks_per_layer": -1},
        {"locks_per_layer": 0.0},
        {"locks_per_layer": 1.5},
        {"locks_per_layer": True},
        {"locks_per_layer": "1"},
        {"width": 10},
        {"width": 0, "height": 4},
        {"start_window": 0},
        {"start_coordinate": (20, 1), "width": 10, "height": 10},
        {"start_coordinate": (1,)},
        {"start_coordinate": ("a", "b")},
        {"start_coordinate": (1.5, 2)},
    ],
)
def test_invalid_configs_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        DungeonConfig(**kwargs).validate()


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        DungeonConfig(layer_count_range=(0, 0)).validate()


def test_validate_normalizes_fields():
    cfg = DungeonConfig(adjacency=8, start_coordinate=[2, 3]).validate()
    assert cfg.adjacency == "octile"
    assert cfg.start_coordinate == Coordinate(2, 3)


def test_parse_locks():
    assert parse_locks("2") == 2 and isinstance(parse_locks("2"), int)
    assert parse_locks(" 0.25 ") == 0.25
    with pytest.raises(ConfigurationError):
        parse_locks("lots")


def test_from_env_reads_variables():
    env = {
        "KEYDUNGEON_SEED": "99",
        "KEYDUNGEON_ROOMS_MIN": "2",
        "KEYDUNGEON_ROOMS_MAX": "3",
        "KEYDUNGEON_LAYERS_MAX": "6",
        "KEYDUNGEON_ADJACENCY": "8",
        "KEYDUNGEON_LOCKS_PER_LAYER": "0.5",
        "KEYDUNGEON_SHORTCUTS": "0",
        "KEYDUNGEON_ONE_KEY_PER_ROOM": "yes",
    }
    cfg = DungeonConfig.from_env(env)
    assert cfg.seed == 99
    assert cfg.rooms_per_layer_range == (2, 3)
    assert cfg.layer_count_range == (3, 6)
    assert cfg.adjacency == "8"
    assert cfg.locks_per_layer == 0.5
    assert cfg.shortcuts is False
    assert cfg.same_layer_connections is True
    assert cfg.one_key_per_room is True


def test_from_env_overrides_win():
    cfg = DungeonConfig.from_env({"KEYDUNGEON_SEED": "1"}, seed=5, adjacency=None)
    assert cfg.seed == 5
    assert cfg.adjacency == "orthogonal"


def test_from_env_bad_integer():
    with pytest.raises(ConfigurationError):
        DungeonConfig.from_env({"KEYDUNGEON_ROOMS_MIN": "few"})


def test_as_dict_is_json_friendly():
    d = DungeonConfig(seed=3).as_dict()
    assert d["rooms_per_layer_range"] == [4, 7]
    assert d["seed"] == 3
