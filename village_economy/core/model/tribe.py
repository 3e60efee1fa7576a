"""Tribe enumeration for the village economy."""

from enum import Enum


class Tribe(Enum):
    """Represents the playable tribes."""

    ROMANS = 1
    TEUTONS = 2
    GAULS = 3
    HUNS = 4
    SPARTANS = 5
    NORS = 6
    EGYPTIANS = 7

    @property
    def wall_building_id(self) -> str:
        return TRIBE_TO_WALL_BUILDING_ID[self]

    @property
    def builds_in_parallel(self) -> bool:
        """Romans run resource fields and village structures on separate timelines."""
        return self == Tribe.ROMANS


TRIBE_TO_WALL_BUILDING_ID: dict[Tribe, str] = {
    Tribe.ROMANS: "CITY_WALL",
    Tribe.TEUTONS: "EARTH_WALL",
    Tribe.GAULS: "PALISADE",
    Tribe.HUNS: "MAKESHIFT_WALL",
    Tribe.SPARTANS: "DEFENSIVE_WALL",
    Tribe.NORS: "BARRICADE",
    Tribe.EGYPTIANS: "STONE_WALL",
}
