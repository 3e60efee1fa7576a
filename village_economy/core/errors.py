"""Error taxonomy for the village economy core.

Calculators raise these and never catch them; the composition layer decides
what to tell the player.
"""


class EconomyError(Exception):
    """Base class for all village economy errors."""


class UnknownBuilding(EconomyError):
    def __init__(self, building_id: str) -> None:
        super().__init__(f"Building {building_id!r} is not in the catalog")
        self.building_id = building_id


class UnknownField(EconomyError):
    def __init__(self, village_id: int, building_field_id: int) -> None:
        super().__init__(f"Village {village_id} has no building field {building_field_id}")
        self.village_id = village_id
        self.building_field_id = building_field_id


class LevelOutOfRange(EconomyError):
    def __init__(self, building_id: str, level: int, max_level: int) -> None:
        super().__init__(f"Level {level} of {building_id} is outside 0..{max_level}")
        self.building_id = building_id
        self.level = level
        self.max_level = max_level


class AlreadyMaxLevel(EconomyError):
    def __init__(self, building_id: str, max_level: int) -> None:
        super().__init__(f"{building_id} is already at max level {max_level}")
        self.building_id = building_id
        self.max_level = max_level


class InvalidPlacement(EconomyError):
    """Raised when a village layout breaks slot, position or level rules."""


class InvalidEventTransition(EconomyError):
    """Raised when a construction event leaves a terminal state."""


class InsufficientResources(EconomyError):
    """Raised when a village cannot pay for an upgrade."""
