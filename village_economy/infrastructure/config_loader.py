import os
import re
from pathlib import Path
from typing import Optional, Any

import yaml
from dotenv import load_dotenv

from village_economy.core.model.tribe import Tribe
from village_economy.domain.config import Config, EconomyConfig, SimulationConfig

CONFIG_FILENAME = "config.yaml"


def find_config_path() -> str:
    """Locate config.yaml: CONFIG_PATH, then the working directory and its parents, then the source tree."""
    env_config_path = os.getenv("CONFIG_PATH")
    if env_config_path:
        if not Path(env_config_path).is_file():
            raise FileNotFoundError(f"CONFIG_PATH is set but file not found: {env_config_path}")
        return env_config_path

    cwd = Path.cwd()
    source_root = Path(__file__).resolve().parents[2]
    for directory in (cwd, *cwd.parents, source_root):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return str(candidate)

    raise FileNotFoundError(f"No {CONFIG_FILENAME} found from {cwd} upwards and CONFIG_PATH is not set")


def load(config_path: Optional[str] = None) -> Config:
    file = _find_config(config_path)
    data = _read_config(file)

    if not isinstance(data, dict):
        raise ValueError(f"Parsed config file {file} does not contain a mapping")

    return _map_to_domain(data)


def _read_config(file: Path) -> dict[str, Any]:
    content = file.read_text()

    def replace_env_var(match: re.Match) -> str:
        var_name = match.group(1)
        return os.getenv(var_name, match.group(0))

    content = re.sub(r'\$\{(\w+)}', replace_env_var, content)

    data = yaml.safe_load(content)
    return data


def _find_config(config_path: str | None) -> Path:
    load_dotenv()

    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"CONFIG_PATH is set but file not found: {config_path}")
        return path
    return Path(find_config_path())


def _parse_tribe(raw: str | int | None) -> Tribe:
    if raw is None:
        return Tribe.GAULS
    if isinstance(raw, int):
        return Tribe(raw)
    try:
        return Tribe[str(raw).upper()]
    except KeyError:
        raise ValueError(f"Unknown tribe: {raw}") from None


def _map_to_domain(data: dict) -> Config:
    economy_data = data.get('economy', {})
    npc_wheat_upkeep = economy_data.get('npc-wheat-upkeep')
    economy_config = EconomyConfig(
        speed=int(economy_data.get('speed', 1)),
        map_size=int(economy_data.get('map-size', 100)),
        player_starting_resources=int(economy_data.get('player-starting-resources', 750)),
        player_wheat_upkeep=int(economy_data.get('player-wheat-upkeep', 3)),
        npc_wheat_upkeep=int(npc_wheat_upkeep) if npc_wheat_upkeep is not None else None,
    )

    simulation_data = data.get('simulation', {})
    simulation_config = SimulationConfig(
        player_name=str(simulation_data.get('player-name', 'Player')),
        tribe=_parse_tribe(simulation_data.get('tribe')),
        resource_field_composition=str(simulation_data.get('resource-field-composition', '4446')),
        tick_check_interval=int(simulation_data.get('tick-check-interval', 1)),
    )

    return Config(
        log_level=data.get('log_level', 'INFO'),
        economy_config=economy_config,
        simulation_config=simulation_config,
    )
