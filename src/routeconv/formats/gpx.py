#!/usr/bin/env python3
"""
GPS Exchange Format 1.0 and 1.1.

A document maps to one Waypoints route for its <wpt> elements, one Route
per <rte> and one Track per <trk> (segments concatenated). Point names
carry the position comments. Only GPX 1.0 track points have a place for
speed and course.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import BinaryIO, List, Optional, TYPE_CHECKING
import logging
import gpxpy
import gpxpy.gpx

from ..errors import GrammarMismatch
from ..position import BaseNavigationPosition
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, trim
from .base import NavigationFormat, PositionFamily

if TYPE_CHECKING:
    from .nmea import NmeaPosition

logger = logging.getLogger(__name__)

CREATOR = "routeconv"
METERS_PER_SECOND_TO_KILOMETERS_PER_HOUR = 3.6


@dataclass(frozen=True)
class GpxPosition(BaseNavigationPosition):
    """A GPX point; heading is the GPX 1.0 course in degrees."""

    heading: Optional[float] = None
    satellites: Optional[int] = None
    hdop: Optional[float] = None

    def as_gpx_position(self) -> "GpxPosition":
        return replace(self)

    def as_nmea_position(self) -> "NmeaPosition":
        from .nmea import NmeaPosition

        return NmeaPosition(
            longitude=self.longitude,
            latitude=self.latitude,
            elevation=self.elevation,
            speed=self.speed,
            time=self.time,
            heading=self.heading,
            satellites=self.satellites,
            hdop=self.hdop,
        )


class GpxRoute(BaseRoute):
    position_class = GpxPosition


def _join_description(description: Optional[List[str]]) -> Optional[str]:
    if not description:
        return None
    return "\n".join(description)


def _split_description(text: Optional[str]) -> Optional[List[str]]:
    if text is None or not text.strip():
        return None
    return text.split("\n")


def _to_calendar(value: Optional[datetime]) -> Optional[CompactCalendar]:
    return CompactCalendar.from_datetime(value) if value is not None else None


class GpxFormat(NavigationFormat):
    """GPS Exchange Format of a single schema version."""

    extension = ".gpx"
    encoding = "utf-8"
    version = ""
    # GPX 1.0 has <course> and <speed> in track points, GPX 1.1 has neither
    writes_speed = False
    position_family = PositionFamily.GPX
    route_characteristics = RouteCharacteristics.TRACK
    supported_characteristics = (
        RouteCharacteristics.WAYPOINTS,
        RouteCharacteristics.ROUTE,
        RouteCharacteristics.TRACK,
    )
    route_class = GpxRoute

    def read(
        self, data: bytes, start_date: Optional[CompactCalendar] = None
    ) -> List[BaseRoute]:
        """
        Parse a GPX document of this format's version.

        Raises:
            GrammarMismatch: If gpxpy cannot parse the document or it declares
                another GPX version
        """
        try:
            gpx = gpxpy.parse(self._decode(data))
        except gpxpy.gpx.GPXException as e:
            raise GrammarMismatch(f"{self.display_name}: not a GPX document: {e}")
        if gpx.version != self.version:
            raise GrammarMismatch(
                f"{self.display_name}: document declares version {gpx.version}"
            )

        routes = []
        if gpx.waypoints:
            routes.append(
                self.create_route(
                    RouteCharacteristics.WAYPOINTS,
                    trim(gpx.name),
                    _split_description(gpx.description),
                    [self._parse_point(point) for point in gpx.waypoints],
                )
            )
        for gpx_route in gpx.routes:
            routes.append(
                self.create_route(
                    RouteCharacteristics.ROUTE,
                    trim(gpx_route.name),
                    _split_description(gpx_route.description),
                    [self._parse_point(point) for point in gpx_route.points],
                )
            )
        for track in gpx.tracks:
            routes.append(
                self.create_route(
                    RouteCharacteristics.TRACK,
                    trim(track.name),
                    _split_description(track.description),
                    [
                        self._parse_point(point)
                        for segment in track.segments
                        for point in segment.points
                    ],
                )
            )

        if not routes:
            raise GrammarMismatch(
                f"{self.display_name}: no waypoints, routes or tracks"
            )
        logger.debug(f"Parsed {len(routes)} routes from {self.display_name}")
        return routes

    def _parse_point(self, point) -> GpxPosition:
        speed = None
        heading = None
        if self.writes_speed:
            speed = getattr(point, "speed", None)
            if speed is not None:
                speed *= METERS_PER_SECOND_TO_KILOMETERS_PER_HOUR
            heading = getattr(point, "course", None)

        return GpxPosition(
            longitude=point.longitude,
            latitude=point.latitude,
            elevation=point.elevation,
            speed=speed,
            time=_to_calendar(point.time),
            comment=trim(point.name),
            heading=heading,
            satellites=point.satellites,
            hdop=point.horizontal_dilution,
        )

    def _create_point(self, point_class, position: GpxPosition):
        point = point_class(
            latitude=position.latitude,
            longitude=position.longitude,
            elevation=position.elevation,
            time=position.time.datetime if position.time is not None else None,
            name=position.comment,
        )
        point.satellites = position.satellites
        point.horizontal_dilution = position.hdop
        if self.writes_speed and point_class is gpxpy.gpx.GPXTrackPoint:
            point.course = position.heading
            if position.speed is not None:
                speed = position.speed / METERS_PER_SECOND_TO_KILOMETERS_PER_HOUR
                point.speed = round(speed, 6)
        return point

    def write(self, route: BaseRoute, sink: BinaryIO) -> None:
        positions = [
            position.as_gpx_position() for position in self._writable_positions(route)
        ]
        description = _join_description(route.description)
        gpx = gpxpy.gpx.GPX()
        gpx.creator = CREATOR

        if route.characteristics == RouteCharacteristics.WAYPOINTS:
            gpx.name = route.name
            gpx.description = description
            for position in positions:
                gpx.waypoints.append(
                    self._create_point(gpxpy.gpx.GPXWaypoint, position)
                )
        elif route.characteristics == RouteCharacteristics.ROUTE:
            gpx_route = gpxpy.gpx.GPXRoute(name=route.name, description=description)
            for position in positions:
                gpx_route.points.append(
                    self._create_point(gpxpy.gpx.GPXRoutePoint, position)
                )
            gpx.routes.append(gpx_route)
        else:
            track = gpxpy.gpx.GPXTrack(name=route.name, description=description)
            segment = gpxpy.gpx.GPXTrackSegment()
            for position in positions:
                segment.points.append(
                    self._create_point(gpxpy.gpx.GPXTrackPoint, position)
                )
            track.segments.append(segment)
            gpx.tracks.append(track)

        sink.write(gpx.to_xml(version=self.version).encode(self.encoding))


class Gpx10Format(GpxFormat):
    """GPX 1.0, which keeps speed and course of every track point."""

    display_name = "GPS Exchange Format 1.0"
    version = "1.0"
    writes_speed = True


class Gpx11Format(GpxFormat):
    """GPX 1.1, which has no place for speed and course."""

    display_name = "GPS Exchange Format 1.1"
    version = "1.1"
