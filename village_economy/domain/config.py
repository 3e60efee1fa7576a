from dataclasses import dataclass

from village_economy.core.model.tribe import Tribe


@dataclass(frozen=True)
class EconomyConfig:
    """Tunable constants of the economy."""
    speed: int = 1
    map_size: int = 100
    player_starting_resources: int = 750
    player_wheat_upkeep: int = 3
    # None derives the upkeep from the population of the NPC village's presets
    npc_wheat_upkeep: int | None = None

    def __post_init__(self):
        if self.speed < 1:
            raise ValueError(f"speed must be at least 1, got: {self.speed}")
        if self.map_size < 1:
            raise ValueError(f"map_size must be positive, got: {self.map_size}")
        if self.player_starting_resources < 0:
            raise ValueError(f"player_starting_resources cannot be negative, got: {self.player_starting_resources}")


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for the simulation main loop."""
    player_name: str = "Player"
    tribe: Tribe = Tribe.GAULS
    resource_field_composition: str = "4446"
    tick_check_interval: int = 1  # seconds


@dataclass(frozen=True)
class Config:
    """Main configuration containing log level and nested config objects."""
    log_level: str
    economy_config: EconomyConfig
    simulation_config: SimulationConfig
