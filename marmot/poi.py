"""Points of interest placed on the map."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from marmot.track import GeoCoordinate


def _unset_coordinate() -> GeoCoordinate:
    return GeoCoordinate(math.nan, math.nan)


@dataclass
class Poi:
    """A named waypoint with an optional description."""

    name: str = ""
    description: str = ""
    coordinate: GeoCoordinate = field(default_factory=_unset_coordinate)
    object_name: str = ""

    def move_to(self, coordinate: GeoCoordinate) -> None:
        """Place the point of interest at a new coordinate."""
        self.coordinate = coordinate