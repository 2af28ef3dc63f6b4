#!/usr/bin/env python3
"""
MagicMaps2Go text format.

One trackpoint per line, fields separated by a single space:

    52.4135141 13.3115464 40.8000000 31.05.09 07:05:58

latitude, longitude, elevation, date and time of day in UTC.
"""

from typing import Optional, TextIO
import logging
import re

from ..errors import FieldParseFailure
from ..position import BaseNavigationPosition, Wgs84Position
from ..route import RouteCharacteristics
from ..transfer import CompactCalendar, format_double, parse_double
from .base import BEGIN_OF_LINE, END_OF_LINE, POSITION, LineBasedFormat

logger = logging.getLogger(__name__)

SEPARATOR = " "
DATE_FORMAT = "%d.%m.%y %H:%M:%S"
# Written for positions without time; day 0 never parses back
TIME_SENTINEL = "00.00.00 00:00:00"
ELEVATION_SENTINEL = 0.0
FRACTION_DIGITS = 7

LINE_PATTERN = re.compile(
    BEGIN_OF_LINE
    + f"({POSITION}){SEPARATOR}({POSITION}){SEPARATOR}({POSITION}){SEPARATOR}"
    + r"(\d\d\.\d\d\.\d\d)"
    + SEPARATOR
    + r"(\d\d:\d\d:\d\d)"
    + END_OF_LINE
)


def parse_date_and_time(date: str, time: str) -> CompactCalendar:
    """
    Parse the date and time groups of a line.

    Raises:
        FieldParseFailure: If the joined text is no valid calendar instant
    """
    text = f"{date} {time}"
    try:
        return CompactCalendar.parse(text, DATE_FORMAT)
    except ValueError as e:
        raise FieldParseFailure(f"Could not parse date '{text}': {e}") from e


class MagicMaps2GoFormat(LineBasedFormat):
    """Plain text tracks exchanged with the MagicMaps2Go app."""

    extension = ".txt"
    display_name = "MagicMaps2Go"
    encoding = "ascii"
    route_characteristics = RouteCharacteristics.TRACK
    supported_characteristics = (RouteCharacteristics.TRACK,)

    def is_position(self, line: str) -> bool:
        return LINE_PATTERN.match(line) is not None

    def parse_position(
        self, line: str, start_date: Optional[CompactCalendar] = None
    ) -> Wgs84Position:
        self._require_position(line)
        match = LINE_PATTERN.match(line)
        latitude, longitude, elevation, date, time = match.groups()

        try:
            calendar = parse_date_and_time(date, time)
        except FieldParseFailure as e:
            logger.error(f"{e}; using no time for '{line}'")
            calendar = None

        return Wgs84Position(
            longitude=parse_double(longitude),
            latitude=parse_double(latitude),
            elevation=parse_double(elevation),
            time=calendar,
        )

    def write_position(
        self,
        position: BaseNavigationPosition,
        writer: TextIO,
        index: int,
        is_first_position: bool,
    ) -> None:
        latitude = format_double(position.latitude, FRACTION_DIGITS)
        longitude = format_double(position.longitude, FRACTION_DIGITS)
        elevation = format_double(
            position.elevation
            if position.elevation is not None
            else ELEVATION_SENTINEL,
            FRACTION_DIGITS,
        )
        time = (
            position.time.format(DATE_FORMAT)
            if position.time is not None
            else TIME_SENTINEL
        )
        writer.write(SEPARATOR.join((latitude, longitude, elevation, time)) + "\n")
