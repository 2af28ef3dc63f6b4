#!/usr/bin/env python3
"""
OziExplorer track (.plt) and waypoint (.wpt) files.

Both carry a fixed block of header lines followed by comma separated
position lines. Altitudes are in feet with -777 meaning "none", times are
Delphi day numbers (days since 1899-12-30) with 0 meaning "none", and
commas inside text are stored as character 209.
"""

from typing import List, Optional, TextIO, Tuple
import logging
import re

from ..errors import GrammarMismatch
from ..position import BaseNavigationPosition, Wgs84Position
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, format_double, parse_double, single_line, trim
from .base import BEGIN_OF_LINE, END_OF_LINE, POSITION, LineBasedFormat

logger = logging.getLogger(__name__)

FEET_PER_METER = 1 / 0.3048
NO_ALTITUDE = -777.0
NO_DAYS = "0"
# Day number of 1970-01-01
DAYS_AT_EPOCH = 25569
MILLIS_PER_DAY = 24 * 60 * 60 * 1000
COMMA_REPLACEMENT = chr(209)
MONTHS = "Jan Feb Mar Apr May Jun Jul Aug Sep Oct Nov Dec".split()

_NUMBER = r"-?\d+(?:\.\d+)?"
_DAYS = r"\d+(?:\.\d+)?"

TRACK_PATTERN = re.compile(
    BEGIN_OF_LINE
    + rf"({POSITION})\s*,\s*({POSITION})\s*,\s*[01]\s*,\s*({_NUMBER})\s*,"
    + rf"\s*({_DAYS})?\s*,([^,]*),([^,]*)"
    + END_OF_LINE
)
WAYPOINT_PATTERN = re.compile(
    BEGIN_OF_LINE
    + rf"\d+\s*,([^,]*),\s*({POSITION})\s*,\s*({POSITION})\s*,\s*({_DAYS})?\s*,"
    + r"(?:[^,]*,){5}([^,]*),(?:[^,]*,){3}"
    + rf"\s*({_NUMBER})?\s*(?:,[^,]*)*"
    + END_OF_LINE
)


def escape(text: Optional[str]) -> str:
    return single_line(text).replace(",", COMMA_REPLACEMENT)


def unescape(text: Optional[str]) -> Optional[str]:
    text = trim(text)
    return text.replace(COMMA_REPLACEMENT, ",") if text is not None else None


def parse_days(text: Optional[str]) -> Optional[CompactCalendar]:
    """Convert a Delphi day number to a calendar; 0 means no time."""
    days = parse_double(text)
    if days is None or days == 0.0:
        return None
    return CompactCalendar.from_millis(round((days - DAYS_AT_EPOCH) * MILLIS_PER_DAY))


def format_days(time: Optional[CompactCalendar]) -> str:
    if time is None:
        return NO_DAYS
    return format_double(DAYS_AT_EPOCH + time.millis / MILLIS_PER_DAY, 7)


def parse_altitude(text: Optional[str]) -> Optional[float]:
    feet = parse_double(text)
    if feet is None or feet == NO_ALTITUDE:
        return None
    return feet / FEET_PER_METER


def format_altitude(elevation: Optional[float]) -> str:
    if elevation is None:
        return format_double(NO_ALTITUDE, 1)
    return format_double(elevation * FEET_PER_METER, 1)


def format_date_and_time(time: Optional[CompactCalendar]) -> Tuple[str, str]:
    """Human readable date and time columns, independent of the host locale."""
    if time is None:
        return "", ""
    value = time.datetime
    date = f"{value.day:02d}-{MONTHS[value.month - 1]}-{value.year % 100:02d}"
    return date, value.strftime("%H:%M:%S")


class OziExplorerFormat(LineBasedFormat):
    """Shared header handling of the OziExplorer text files."""

    encoding = "latin-1"
    header_line_count = 0
    first_header_line = ""

    def read_header(
        self, lines: List[str]
    ) -> Tuple[Optional[str], Optional[List[str]], List[str]]:
        if len(lines) < self.header_line_count or not lines[0].strip().startswith(
            self.first_header_line
        ):
            raise GrammarMismatch(f"{self.display_name}: missing file header")
        header = lines[: self.header_line_count]
        return self.parse_name(header), None, lines[self.header_line_count :]

    def parse_name(self, header: List[str]) -> Optional[str]:
        return None


class OziExplorerTrackFormat(OziExplorerFormat):
    """OziExplorer track point files."""

    extension = ".plt"
    display_name = "OziExplorer Track"
    route_characteristics = RouteCharacteristics.TRACK
    supported_characteristics = (RouteCharacteristics.TRACK,)
    header_line_count = 6
    first_header_line = "OziExplorer Track Point File"

    def parse_name(self, header: List[str]) -> Optional[str]:
        fields = header[4].split(",")
        return unescape(fields[3]) if len(fields) > 3 else None

    def write_header(self, route: BaseRoute, writer: TextIO) -> None:
        writer.write("OziExplorer Track Point File Version 2.1\n")
        writer.write("WGS 84\n")
        writer.write("Altitude is in Feet\n")
        writer.write("Reserved 3\n")
        writer.write(f"0,2,255,{escape(route.name)},0,0,2,8421376\n")
        count = sum(1 for position in route.positions if position.has_coordinates())
        writer.write(f"{count}\n")

    def is_position(self, line: str) -> bool:
        return TRACK_PATTERN.match(line) is not None

    def parse_position(
        self, line: str, start_date: Optional[CompactCalendar] = None
    ) -> Wgs84Position:
        self._require_position(line)
        latitude, longitude, altitude, days, _, _ = TRACK_PATTERN.match(line).groups()
        return Wgs84Position(
            longitude=parse_double(longitude),
            latitude=parse_double(latitude),
            elevation=parse_altitude(altitude),
            time=parse_days(days),
        )

    def write_position(
        self,
        position: BaseNavigationPosition,
        writer: TextIO,
        index: int,
        is_first_position: bool,
    ) -> None:
        date, time = format_date_and_time(position.time)
        # A 1 in the third column starts a new track segment
        segment = "1" if is_first_position else "0"
        writer.write(
            ",".join(
                (
                    format_double(position.latitude, 7),
                    format_double(position.longitude, 7),
                    segment,
                    format_altitude(position.elevation),
                    format_days(position.time),
                    date,
                    time,
                )
            )
            + "\n"
        )


class OziExplorerWaypointFormat(OziExplorerFormat):
    """OziExplorer waypoint files."""

    extension = ".wpt"
    display_name = "OziExplorer Waypoint"
    route_characteristics = RouteCharacteristics.WAYPOINTS
    supported_characteristics = (RouteCharacteristics.WAYPOINTS,)
    header_line_count = 4
    first_header_line = "OziExplorer Waypoint File"

    def write_header(self, route: BaseRoute, writer: TextIO) -> None:
        writer.write("OziExplorer Waypoint File Version 1.1\n")
        writer.write("WGS 84\n")
        writer.write("Reserved 2\n")
        writer.write("Reserved 3\n")

    def is_position(self, line: str) -> bool:
        return WAYPOINT_PATTERN.match(line) is not None

    def parse_position(
        self, line: str, start_date: Optional[CompactCalendar] = None
    ) -> Wgs84Position:
        self._require_position(line)
        name, latitude, longitude, days, description, altitude = (
            WAYPOINT_PATTERN.match(line).groups()
        )
        return Wgs84Position(
            longitude=parse_double(longitude),
            latitude=parse_double(latitude),
            elevation=parse_altitude(altitude),
            time=parse_days(days),
            comment=unescape(description) or unescape(name),
        )

    def write_position(
        self,
        position: BaseNavigationPosition,
        writer: TextIO,
        index: int,
        is_first_position: bool,
    ) -> None:
        comment = escape(position.comment)
        writer.write(
            ",".join(
                (
                    str(index + 1),
                    comment,
                    format_double(position.latitude, 6),
                    format_double(position.longitude, 6),
                    format_days(position.time),
                    "0",
                    "1",
                    "3",
                    "0",
                    "65535",
                    comment,
                    "0",
                    "0",
                    "0",
                    format_altitude(position.elevation),
                )
            )
            + "\n"
        )
