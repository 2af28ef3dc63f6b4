#!/usr/bin/env python3
"""
Map&Guide Tourenplaner route (.bcr) format.

An INI file whose [COORDINATES] section lists the stations as integer
Web Mercator (EPSG:3857) meters, with one comment per station in
[DESCRIPTION] and the route name and description in [ROUTE].
"""

from dataclasses import dataclass, replace
from typing import BinaryIO, List, Optional
import configparser
import logging
import math

from pyproj import Transformer

from ..errors import GrammarMismatch
from ..position import BaseNavigationPosition
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, format_int, parse_int, single_line, trim
from .base import NavigationFormat, PositionFamily

logger = logging.getLogger(__name__)

CLIENT_SECTION = "CLIENT"
COORDINATES_SECTION = "COORDINATES"
DESCRIPTION_SECTION = "DESCRIPTION"
ROUTE_SECTION = "ROUTE"
STATION_PREFIX = "STATION"
ROUTE_NAME = "ROUTENAME"
DESCRIPTION_LINE_COUNT = "DESCRIPTIONLINES"
DESCRIPTION_PREFIX = "DESCRIPTION"
DEFAULT_STATION = "Standort,999999999"

_TO_MERCATOR = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
_FROM_MERCATOR = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)


@dataclass(frozen=True)
class BcrPosition(BaseNavigationPosition):
    """A station with coordinates kept in both WGS84 and integer Mercator form."""

    x: Optional[int] = None
    y: Optional[int] = None

    def __post_init__(self):
        super().__post_init__()
        if (self.x is None or self.y is None) and self.has_coordinates():
            x, y = _TO_MERCATOR.transform(self.longitude, self.latitude)
            # The poles have no Mercator coordinates
            if math.isfinite(x) and math.isfinite(y):
                object.__setattr__(self, "x", int(format_int(x)))
                object.__setattr__(self, "y", int(format_int(y)))

    @classmethod
    def from_wgs84(
        cls,
        longitude: Optional[float],
        latitude: Optional[float],
        comment: Optional[str] = None,
    ) -> "BcrPosition":
        return cls(longitude=longitude, latitude=latitude, comment=comment)

    @classmethod
    def from_mercator(
        cls, x: int, y: int, comment: Optional[str] = None
    ) -> "BcrPosition":
        longitude, latitude = _FROM_MERCATOR.transform(x, y)
        return cls(longitude=longitude, latitude=latitude, comment=comment, x=x, y=y)

    def as_bcr_position(self) -> "BcrPosition":
        return replace(self)


class BcrRoute(BaseRoute):
    position_class = BcrPosition


def _station(index: int) -> str:
    return f"{STATION_PREFIX}{index}"


class BcrFormat(NavigationFormat):
    """Map&Guide Tourenplaner routes."""

    extension = ".bcr"
    display_name = "Map&Guide Tourenplaner"
    encoding = "latin-1"
    position_family = PositionFamily.BCR
    route_characteristics = RouteCharacteristics.ROUTE
    supported_characteristics = (RouteCharacteristics.ROUTE,)
    route_class = BcrRoute

    def _new_parser(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(interpolation=None)
        # Keys are upper case and must stay that way
        parser.optionxform = str
        return parser

    def read(
        self, data: bytes, start_date: Optional[CompactCalendar] = None
    ) -> List[BaseRoute]:
        parser = self._new_parser()
        try:
            parser.read_string(self._decode(data))
        except configparser.Error as e:
            raise GrammarMismatch(f"{self.display_name}: not an INI file: {e}")
        if not parser.has_section(COORDINATES_SECTION):
            raise GrammarMismatch(f"{self.display_name}: no [{COORDINATES_SECTION}]")

        positions = []
        index = 1
        while parser.has_option(COORDINATES_SECTION, _station(index)):
            positions.append(self._parse_station(parser, index))
            index += 1
        if not positions:
            raise GrammarMismatch(f"{self.display_name}: no stations found")

        name = None
        description = None
        if parser.has_section(ROUTE_SECTION):
            name = trim(parser.get(ROUTE_SECTION, ROUTE_NAME, fallback=None))
            line_count = parse_int(
                parser.get(ROUTE_SECTION, DESCRIPTION_LINE_COUNT, fallback=None)
            )
            if line_count is not None:
                description = [
                    parser.get(ROUTE_SECTION, f"{DESCRIPTION_PREFIX}{i}", fallback="")
                    for i in range(1, line_count + 1)
                ]

        return [
            self.create_route(self.route_characteristics, name, description, positions)
        ]

    def _parse_station(
        self, parser: configparser.ConfigParser, index: int
    ) -> BcrPosition:
        value = parser.get(COORDINATES_SECTION, _station(index))
        fields = value.split(",")
        x = parse_int(fields[0]) if len(fields) == 2 else None
        y = parse_int(fields[1]) if len(fields) == 2 else None
        if x is None or y is None:
            raise GrammarMismatch(
                f"{self.display_name}: invalid coordinates for {_station(index)}: {value!r}"
            )
        comment = trim(parser.get(DESCRIPTION_SECTION, _station(index), fallback=None))
        return BcrPosition.from_mercator(x, y, comment)

    def write(self, route: BaseRoute, sink: BinaryIO) -> None:
        positions = []
        for position in self._writable_positions(route):
            position = position.as_bcr_position()
            if position.x is None or position.y is None:
                logger.warning(
                    f"{self.display_name}: skipping position at latitude "
                    f"{position.latitude} without Mercator coordinates"
                )
                continue
            positions.append(position)
        parser = self._new_parser()

        parser[CLIENT_SECTION] = {"REQUEST": "TRUE"}
        parser[COORDINATES_SECTION] = {}
        parser[DESCRIPTION_SECTION] = {}
        for index, position in enumerate(positions, start=1):
            parser[CLIENT_SECTION][_station(index)] = DEFAULT_STATION
            parser[COORDINATES_SECTION][_station(index)] = f"{position.x},{position.y}"
            parser[DESCRIPTION_SECTION][_station(index)] = single_line(
                position.comment
            )

        parser[ROUTE_SECTION] = {}
        if route.name is not None:
            parser[ROUTE_SECTION][ROUTE_NAME] = single_line(route.name)
        if route.description is not None:
            parser[ROUTE_SECTION][DESCRIPTION_LINE_COUNT] = str(len(route.description))
            for i, line in enumerate(route.description, start=1):
                parser[ROUTE_SECTION][f"{DESCRIPTION_PREFIX}{i}"] = single_line(line)

        with self._text_writer(sink) as writer:
            parser.write(writer, space_around_delimiters=False)
