import pytest

from village_economy.core.model.tribe import Tribe
from village_economy.infrastructure import config_loader

FULL_CONFIG = """
log_level: DEBUG
economy:
  speed: 3
  map-size: 200
  player-starting-resources: 1000
  player-wheat-upkeep: 2
  npc-wheat-upkeep: 10
simulation:
  player-name: ${TEST_PLAYER_NAME}
  tribe: teutons
  resource-field-composition: "3339"
  tick-check-interval: 5
"""


def _write(tmp_path, content: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return str(path)


def test_load_maps_every_section(tmp_path, monkeypatch):
    monkeypatch.setenv("TEST_PLAYER_NAME", "Alice")

    config = config_loader.load(_write(tmp_path, FULL_CONFIG))

    assert config.log_level == "DEBUG"
    assert config.economy_config.speed == 3
    assert config.economy_config.map_size == 200
    assert config.economy_config.player_starting_resources == 1000
    assert config.economy_config.player_wheat_upkeep == 2
    assert config.economy_config.npc_wheat_upkeep == 10
    assert config.simulation_config.player_name == "Alice"
    assert config.simulation_config.tribe == Tribe.TEUTONS
    assert config.simulation_config.resource_field_composition == "3339"
    assert config.simulation_config.tick_check_interval == 5


def test_unset_variable_is_kept_verbatim(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLAYER_NAME", raising=False)

    config = config_loader.load(_write(tmp_path, FULL_CONFIG))

    assert config.simulation_config.player_name == "${TEST_PLAYER_NAME}"


def test_missing_sections_fall_back_to_defaults(tmp_path):
    config = config_loader.load(_write(tmp_path, "log_level: WARNING\n"))

    assert config.log_level == "WARNING"
    assert config.economy_config.speed == 1
    assert config.economy_config.npc_wheat_upkeep is None
    assert config.simulation_config.tribe == Tribe.GAULS
    assert config.simulation_config.resource_field_composition == "4446"


def test_tribe_by_number(tmp_path):
    config = config_loader.load(_write(tmp_path, "simulation:\n  tribe: 1\n"))

    assert config.simulation_config.tribe == Tribe.ROMANS


def test_unknown_tribe(tmp_path):
    with pytest.raises(ValueError):
        config_loader.load(_write(tmp_path, "simulation:\n  tribe: vikings\n"))


def test_invalid_economy_values(tmp_path):
    with pytest.raises(ValueError):
        config_loader.load(_write(tmp_path, "economy:\n  speed: 0\n"))


def test_non_mapping_config(tmp_path):
    with pytest.raises(ValueError):
        config_loader.load(_write(tmp_path, "- just\n- a list\n"))


def test_missing_explicit_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        config_loader.load(str(tmp_path / "nope.yaml"))


def test_config_path_env_takes_precedence(tmp_path, monkeypatch):
    path = _write(tmp_path, "log_level: INFO\n")
    monkeypatch.setenv("CONFIG_PATH", path)

    assert config_loader.find_config_path() == path


def test_config_path_env_pointing_nowhere(tmp_path, monkeypatch):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.yaml"))

    with pytest.raises(FileNotFoundError):
        config_loader.find_config_path()


def test_config_found_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    _write(tmp_path, "log_level: INFO\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    assert config_loader.find_config_path() == str(tmp_path / "config.yaml")
