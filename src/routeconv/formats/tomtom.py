#!/usr/bin/env python3
"""
TomTom itinerary (.itn) format.

Each line is ``longitude|latitude|comment|type|`` with coordinates as
integers in 1e-5 degrees and type 4 for the departure, 2 for the
destination and 0 for everything in between.
"""

from dataclasses import dataclass
from typing import List, Optional, TextIO
import logging
import re

from ..position import BaseNavigationPosition
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, format_int, parse_int, single_line, trim
from .base import BEGIN_OF_LINE, END_OF_LINE, LineBasedFormat, PositionFamily

logger = logging.getLogger(__name__)

ITN_FACTOR = 100000.0
TT_DEPARTURE = 4
TT_WAYPOINT = 0
TT_DESTINATION = 2

LINE_PATTERN = re.compile(
    BEGIN_OF_LINE + r"(-?\d+)\|(-?\d+)\|(.*)\|(\d)\|" + END_OF_LINE
)


@dataclass(frozen=True)
class TomTomPosition(BaseNavigationPosition):
    """An itinerary stop: coordinates and a comment, nothing else."""

    pass


class TomTomRoute(BaseRoute):
    position_class = TomTomPosition


class TomTomRouteFormat(LineBasedFormat):
    """TomTom itinerary files for planned routes."""

    extension = ".itn"
    display_name = "TomTom Route"
    encoding = "iso-8859-1"
    position_family = PositionFamily.TOMTOM
    route_characteristics = RouteCharacteristics.ROUTE
    supported_characteristics = (RouteCharacteristics.ROUTE,)
    route_class = TomTomRoute

    def is_position(self, line: str) -> bool:
        return LINE_PATTERN.match(line) is not None

    def parse_position(
        self, line: str, start_date: Optional[CompactCalendar] = None
    ) -> TomTomPosition:
        self._require_position(line)
        longitude, latitude, comment, _ = LINE_PATTERN.match(line).groups()
        return TomTomPosition(
            longitude=parse_int(longitude) / ITN_FACTOR,
            latitude=parse_int(latitude) / ITN_FACTOR,
            comment=trim(comment),
        )

    def write_positions(
        self, positions: List[BaseNavigationPosition], writer: TextIO
    ) -> None:
        last_index = len(positions) - 1
        for index, position in enumerate(positions):
            self.write_position(
                position, writer, index, index == 0, index == last_index
            )

    def write_position(
        self,
        position: BaseNavigationPosition,
        writer: TextIO,
        index: int,
        is_first_position: bool,
        is_last_position: bool = False,
    ) -> None:
        if is_first_position:
            flag = TT_DEPARTURE
        elif is_last_position:
            flag = TT_DESTINATION
        else:
            flag = TT_WAYPOINT
        longitude = format_int(position.longitude * ITN_FACTOR)
        latitude = format_int(position.latitude * ITN_FACTOR)
        comment = single_line(position.comment)
        writer.write(f"{longitude}|{latitude}|{comment}|{flag}|\n")
