#!/usr/bin/env python3
"""
Position data model shared by every format.

A position is an immutable value. Editing a field means building a
replacement with one of the ``with_*`` methods, and projecting a position
into another format's family means building a new instance with one of the
``as_*_position`` methods; neither touches the original.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from .geometry import calculate_bearing, calculate_distance
from .transfer import CompactCalendar

if TYPE_CHECKING:
    from .formats.bcr import BcrPosition
    from .formats.gpx import GpxPosition
    from .formats.kml import KmlPosition
    from .formats.nmea import NmeaPosition
    from .formats.tomtom import TomTomPosition

# m/s to km/h
METERS_PER_SECOND_TO_KILOMETERS_PER_HOUR = 3.6


@dataclass(frozen=True)
class BaseNavigationPosition:
    """A single trackpoint: coordinates, elevation, speed, time and comment."""

    longitude: Optional[float] = None
    latitude: Optional[float] = None
    elevation: Optional[float] = None
    speed: Optional[float] = None
    time: Optional[CompactCalendar] = None
    comment: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.time, datetime):
            object.__setattr__(self, "time", CompactCalendar.from_datetime(self.time))

    def has_coordinates(self) -> bool:
        return self.longitude is not None and self.latitude is not None

    def has_time(self) -> bool:
        return self.time is not None

    def calculate_distance(self, other: "BaseNavigationPosition") -> Optional[float]:
        """
        Calculate the distance to another position.

        Returns:
            Distance in meters, or None if either position lacks coordinates
        """
        if not (self.has_coordinates() and other.has_coordinates()):
            return None
        return calculate_distance(
            self.longitude, self.latitude, other.longitude, other.latitude
        )

    def calculate_angle(self, other: "BaseNavigationPosition") -> Optional[float]:
        """
        Calculate the bearing from this position to another one.

        Returns:
            Bearing in degrees in [0, 360), or None if either position
            lacks coordinates
        """
        if not (self.has_coordinates() and other.has_coordinates()):
            return None
        return calculate_bearing(
            self.longitude, self.latitude, other.longitude, other.latitude
        )

    def calculate_elevation_delta(
        self, other: "BaseNavigationPosition"
    ) -> Optional[float]:
        if self.elevation is None or other.elevation is None:
            return None
        return other.elevation - self.elevation

    def calculate_time_delta(self, other: "BaseNavigationPosition") -> Optional[int]:
        """Milliseconds from this position's time to the other one's."""
        if self.time is None or other.time is None:
            return None
        return other.time.millis - self.time.millis

    def calculate_speed(
        self, predecessor: "BaseNavigationPosition"
    ) -> Optional[float]:
        """
        Derive the speed between a predecessor and this position.

        Args:
            predecessor: The position recorded before this one

        Returns:
            Speed in km/h, or None if either position lacks coordinates or a
            time, or if both share the same time
        """
        distance = self.calculate_distance(predecessor)
        time_delta = self.calculate_time_delta(predecessor)
        if distance is None or time_delta is None or time_delta == 0:
            return None
        seconds = abs(time_delta) / 1000.0
        return distance / seconds * METERS_PER_SECOND_TO_KILOMETERS_PER_HOUR

    def with_elevation(self, elevation: Optional[float]):
        return replace(self, elevation=elevation)

    def with_speed(self, speed: Optional[float]):
        return replace(self, speed=speed)

    def with_time(self, time: Optional[CompactCalendar]):
        return replace(self, time=time)

    def with_comment(self, comment: Optional[str]):
        return replace(self, comment=comment)

    # Projections into every position family. A new family adds one method
    # here and overrides it where a subtype carries extra fields.

    def as_wgs84_position(self) -> "Wgs84Position":
        return Wgs84Position(
            longitude=self.longitude,
            latitude=self.latitude,
            elevation=self.elevation,
            speed=self.speed,
            time=self.time,
            comment=self.comment,
        )

    def as_nmea_position(self) -> "NmeaPosition":
        from .formats.nmea import NmeaPosition

        return NmeaPosition(
            longitude=self.longitude,
            latitude=self.latitude,
            elevation=self.elevation,
            speed=self.speed,
            time=self.time,
        )

    def as_tomtom_position(self) -> "TomTomPosition":
        from .formats.tomtom import TomTomPosition

        return TomTomPosition(
            longitude=self.longitude, latitude=self.latitude, comment=self.comment
        )

    def as_bcr_position(self) -> "BcrPosition":
        from .formats.bcr import BcrPosition

        return BcrPosition.from_wgs84(self.longitude, self.latitude, self.comment)

    def as_gpx_position(self) -> "GpxPosition":
        from .formats.gpx import GpxPosition

        return GpxPosition(
            longitude=self.longitude,
            latitude=self.latitude,
            elevation=self.elevation,
            speed=self.speed,
            time=self.time,
            comment=self.comment,
        )

    def as_kml_position(self) -> "KmlPosition":
        from .formats.kml import KmlPosition

        return KmlPosition(
            longitude=self.longitude,
            latitude=self.latitude,
            elevation=self.elevation,
            time=self.time,
            comment=self.comment,
        )


@dataclass(frozen=True)
class Wgs84Position(BaseNavigationPosition):
    """Plain WGS84 position used by the simple text formats."""

    pass
