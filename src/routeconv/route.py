#!/usr/bin/env python3
"""
Route data model: an ordered list of positions plus name, description lines
and a route characteristic, bound to the format that produced it.
"""

from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple, TYPE_CHECKING
import logging

from .errors import PositionIndexError
from .geometry import calculate_bounds, calculate_center, calculate_length
from .position import BaseNavigationPosition, Wgs84Position

if TYPE_CHECKING:
    from .formats.base import NavigationFormat

logger = logging.getLogger(__name__)


class RouteCharacteristics(Enum):
    """Distinguishes unordered waypoints, planned routes and recorded tracks."""

    WAYPOINTS = "Waypoints"
    ROUTE = "Route"
    TRACK = "Track"


class BaseRoute:
    """
    An ordered sequence of positions with route metadata.

    Equality is structural over name, description, characteristics and
    positions; the producing format does not take part.
    """

    position_class = Wgs84Position

    def __init__(
        self,
        format: "NavigationFormat",
        characteristics: RouteCharacteristics,
        name: Optional[str] = None,
        description: Optional[Iterable[str]] = None,
        positions: Optional[Iterable[BaseNavigationPosition]] = None,
    ):
        self.format = format
        self.characteristics = characteristics
        self.name = name
        self.description: Optional[List[str]] = (
            list(description) if description is not None else None
        )
        self.positions: List[BaseNavigationPosition] = (
            list(positions) if positions is not None else []
        )

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self) -> Iterator[BaseNavigationPosition]:
        return iter(self.positions)

    def __getitem__(self, index: int) -> BaseNavigationPosition:
        return self.get_position(index)

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if other is None or type(self) is not type(other):
            return False
        return (
            self.name == other.name
            and self.description == other.description
            and self.characteristics == other.characteristics
            and self.positions == other.positions
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.name,
                tuple(self.description) if self.description is not None else None,
                self.characteristics,
                len(self.positions),
            )
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"characteristics={self.characteristics.value}, "
            f"positions={len(self.positions)})"
        )

    def get_positions(self) -> List[BaseNavigationPosition]:
        return self.positions

    def get_position_count(self) -> int:
        return len(self.positions)

    def get_position(self, index: int) -> BaseNavigationPosition:
        """
        Get the position at an index.

        Raises:
            PositionIndexError: If index lies outside [0, count)
        """
        if not 0 <= index < len(self.positions):
            raise PositionIndexError(
                f"Position index {index} outside [0, {len(self.positions)})"
            )
        return self.positions[index]

    def add(self, index: int, position: BaseNavigationPosition) -> None:
        """
        Insert a position before the given index.

        Raises:
            PositionIndexError: If index lies outside [0, count]
        """
        if not 0 <= index <= len(self.positions):
            raise PositionIndexError(
                f"Insert index {index} outside [0, {len(self.positions)}]"
            )
        self.positions.insert(index, position)

    def remove(self, index: int) -> BaseNavigationPosition:
        """Remove and return the position at an index."""
        position = self.get_position(index)
        del self.positions[index]
        return position

    def _coordinates(self) -> List[Tuple[float, float]]:
        return [
            (position.longitude, position.latitude)
            for position in self.positions
            if position.has_coordinates()
        ]

    def get_length(self) -> float:
        """
        Get the length of the route along the WGS84 ellipsoid.

        Positions without coordinates are skipped.

        Returns:
            Length in meters
        """
        return calculate_length(self._coordinates())

    def get_bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Tuple of (south, west, north, east), None without coordinates."""
        return calculate_bounds(self._coordinates())

    def get_center(self) -> Optional[BaseNavigationPosition]:
        center = calculate_center(self._coordinates())
        if center is None:
            return None
        return self.position_class(longitude=center[0], latitude=center[1])

    # Route projections: one per target format. Each builds a new route and
    # leaves this one untouched.

    def as_format(self, target_format: "NavigationFormat") -> "BaseRoute":
        from .conversion import convert  # Local import to avoid circular imports

        return convert(self, target_format)

    def as_magic_maps_2go_format(self) -> "BaseRoute":
        from .formats.magicmaps import MagicMaps2GoFormat

        return self.as_format(MagicMaps2GoFormat())

    def as_magic_maps_ikt_format(self) -> "BaseRoute":
        from .formats.ikt import MagicMapsIktFormat

        return self.as_format(MagicMapsIktFormat())

    def as_nmea_format(self) -> "BaseRoute":
        from .formats.nmea import NmeaFormat

        return self.as_format(NmeaFormat())

    def as_tomtom_route_format(self) -> "BaseRoute":
        from .formats.tomtom import TomTomRouteFormat

        return self.as_format(TomTomRouteFormat())

    def as_ozi_explorer_track_format(self) -> "BaseRoute":
        from .formats.ozi import OziExplorerTrackFormat

        return self.as_format(OziExplorerTrackFormat())

    def as_ozi_explorer_waypoint_format(self) -> "BaseRoute":
        from .formats.ozi import OziExplorerWaypointFormat

        return self.as_format(OziExplorerWaypointFormat())

    def as_bcr_format(self) -> "BaseRoute":
        from .formats.bcr import BcrFormat

        return self.as_format(BcrFormat())

    def as_gpx_10_format(self) -> "BaseRoute":
        from .formats.gpx import Gpx10Format

        return self.as_format(Gpx10Format())

    def as_gpx_11_format(self) -> "BaseRoute":
        from .formats.gpx import Gpx11Format

        return self.as_format(Gpx11Format())

    def as_kml_22_format(self) -> "BaseRoute":
        from .formats.kml import Kml22Format

        return self.as_format(Kml22Format())


class Wgs84Route(BaseRoute):
    """Route of plain WGS84 positions."""

    position_class = Wgs84Position
