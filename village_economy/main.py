# Import only what's necessary for startup
import os

from village_economy.config.logging_config import configure_logging
from village_economy.domain.config import Config
from village_economy.infrastructure.config_loader import load


def setup_env() -> Config:
    """Load configuration and configure logging."""
    config = load()
    configure_logging(os.getenv("LOG_LEVEL", config.log_level))
    return config


def main() -> None:
    # 1. Load loggers before heavy modules are imported
    config = setup_env()

    # 2. Local imports (lazy loading)
    from datetime import datetime

    from village_economy.core.catalog.buildings_data import create_default_catalog
    from village_economy.core.construction.event_store import InMemoryEventStore
    from village_economy.core.factory.village_factory import user_village_factory
    from village_economy.core.model.model import PLAYER_OWNER, Player, Tile
    from village_economy.core.simulation import Simulation

    economy = config.economy_config
    simulation_config = config.simulation_config

    catalog = create_default_catalog(economy.speed)
    player = Player(id=1, name=simulation_config.player_name, tribe=simulation_config.tribe)
    tile = Tile(
        id=1,
        coordinates=(0, 0),
        resource_field_composition=simulation_config.resource_field_composition,
        owned_by=PLAYER_OWNER,
    )
    village = user_village_factory(tile, player, catalog, economy, datetime.now())

    simulation = Simulation(
        village=village,
        catalog=catalog,
        event_store=InMemoryEventStore(),
        tick_check_interval=simulation_config.tick_check_interval,
    )
    simulation.run()


if __name__ == "__main__":
    main()
