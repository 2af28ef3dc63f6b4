#!/usr/bin/env python3
"""
NMEA 0183 log format.

Every position is written as a $GPGGA sentence (fix data: elevation,
satellites, hdop) followed by a $GPRMC sentence (date, speed, heading).
When reading, a GGA and an RMC sentence describing the same fix are merged
into one position.
"""

from dataclasses import dataclass, replace
from functools import reduce
from typing import List, Optional, TextIO, TYPE_CHECKING
import logging
import re

from ..errors import FieldParseFailure, GrammarMismatch
from ..position import BaseNavigationPosition
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, format_double, parse_double, parse_int
from .base import BEGIN_OF_LINE, END_OF_LINE, LineBasedFormat, PositionFamily

if TYPE_CHECKING:
    from .gpx import GpxPosition

logger = logging.getLogger(__name__)

KILOMETERS_PER_HOUR_PER_KNOT = 1.852
MILLIS_PER_DAY = 24 * 60 * 60 * 1000

_TIME = r"(\d{6}(?:\.\d+)?)?"
_COORDINATE = r"(\d+\.\d+)?"
_NUMBER = r"(-?\d+(?:\.\d+)?)?"
_CHECKSUM = r"\*([0-9A-Fa-f]{2})"

GGA_PATTERN = re.compile(
    BEGIN_OF_LINE
    + r"\$(G[PN]GGA),"
    + _TIME
    + ","
    + _COORDINATE
    + r",([NS])?,"
    + _COORDINATE
    + r",([EW])?,"
    + r"\d?,"
    + r"(\d+)?,"
    + _NUMBER
    + ","
    + _NUMBER
    + r",M?,[^*]*"
    + _CHECKSUM
    + END_OF_LINE
)
RMC_PATTERN = re.compile(
    BEGIN_OF_LINE
    + r"\$(G[PN]RMC),"
    + _TIME
    + r",[AV]?,"
    + _COORDINATE
    + r",([NS])?,"
    + _COORDINATE
    + r",([EW])?,"
    + _NUMBER
    + ","
    + _NUMBER
    + r",(\d{6})?,[^*]*"
    + _CHECKSUM
    + END_OF_LINE
)
_COORDINATE_PATTERN = re.compile(r"^(\d+)(\d\d\.\d+)$")


def calculate_checksum(sentence: str) -> int:
    """XOR of all characters between '$' and '*'."""
    body = sentence.strip()
    if body.startswith("$"):
        body = body[1:]
    body = body.split("*", 1)[0]
    return reduce(lambda checksum, char: checksum ^ ord(char), body, 0)


def has_valid_checksum(sentence: str) -> bool:
    if "*" not in sentence:
        return False
    expected = sentence.strip().rsplit("*", 1)[1]
    try:
        return int(expected, 16) == calculate_checksum(sentence)
    except ValueError:
        return False


def parse_coordinate(
    value: Optional[str], hemisphere: Optional[str]
) -> Optional[float]:
    """
    Parse an NMEA coordinate (DDMM.MMMM or DDDMM.MMMM) to decimal degrees.

    Examples:
        "4807.0380", "N" -> 48.1173
        "01131.0000", "W" -> -11.516666...
    """
    if not value or not hemisphere:
        return None
    match = _COORDINATE_PATTERN.match(value)
    if match is None:
        return None
    degrees = int(match.group(1))
    minutes = float(match.group(2))
    result = degrees + minutes / 60.0
    return -result if hemisphere in ("S", "W") else result


def format_coordinate(value: float, degree_digits: int) -> str:
    """Format decimal degrees as DDMM.MMMM with four minute decimals."""
    ten_thousandths = int(round(abs(value) * 60 * 10000))
    degrees, minutes = divmod(ten_thousandths, 60 * 10000)
    return f"{degrees:0{degree_digits}d}{minutes // 10000:02d}.{minutes % 10000:04d}"


def parse_time_of_day(value: Optional[str]) -> Optional[int]:
    """Milliseconds since midnight for an hhmmss(.sss) field."""
    if not value:
        return None
    hours = int(value[0:2])
    minutes = int(value[2:4])
    seconds = float(value[4:])
    if hours > 23 or minutes > 59 or seconds >= 60:
        raise FieldParseFailure(f"Invalid NMEA time '{value}'")
    return (hours * 3600 + minutes * 60) * 1000 + int(round(seconds * 1000))


def parse_date(value: str) -> CompactCalendar:
    try:
        return CompactCalendar.parse(value, "%d%m%y")
    except ValueError as e:
        raise FieldParseFailure(f"Invalid NMEA date '{value}': {e}") from e


def start_of_day(calendar: Optional[CompactCalendar]) -> CompactCalendar:
    if calendar is None:
        return CompactCalendar.from_millis(0)
    return CompactCalendar.from_millis(
        calendar.millis - calendar.millis % MILLIS_PER_DAY
    )


def format_time(calendar: Optional[CompactCalendar]) -> str:
    if calendar is None:
        return ""
    value = calendar.datetime
    return value.strftime("%H%M%S") + f".{value.microsecond // 1000:03d}"


def format_date(calendar: Optional[CompactCalendar]) -> str:
    if calendar is None:
        return ""
    return calendar.format("%d%m%y")


def with_checksum(sentence: str) -> str:
    return f"${sentence}*{calculate_checksum(sentence):02X}"


@dataclass(frozen=True)
class NmeaPosition(BaseNavigationPosition):
    """A fix from a GPS receiver log; speed in km/h, heading in degrees."""

    heading: Optional[float] = None
    satellites: Optional[int] = None
    hdop: Optional[float] = None

    def as_nmea_position(self) -> "NmeaPosition":
        return replace(self, comment=None)

    def as_gpx_position(self) -> "GpxPosition":
        from .gpx import GpxPosition

        return GpxPosition(
            longitude=self.longitude,
            latitude=self.latitude,
            elevation=self.elevation,
            speed=self.speed,
            time=self.time,
            comment=self.comment,
            heading=self.heading,
            satellites=self.satellites,
            hdop=self.hdop,
        )


class NmeaRoute(BaseRoute):
    position_class = NmeaPosition


def _first_present(first, second):
    return first if first is not None else second


def _is_same_fix(first: NmeaPosition, second: NmeaPosition) -> bool:
    """Coordinates and time of day agree; a GGA has no date to compare."""
    if first.longitude != second.longitude or first.latitude != second.latitude:
        return False
    if first.time is None or second.time is None:
        return first.time is None and second.time is None
    return (
        first.time.millis % MILLIS_PER_DAY == second.time.millis % MILLIS_PER_DAY
    )


class NmeaFormat(LineBasedFormat):
    """NMEA 0183 sentences as logged by GPS receivers."""

    extension = ".nmea"
    display_name = "NMEA 0183 Sentences"
    encoding = "ascii"
    position_family = PositionFamily.NMEA
    route_characteristics = RouteCharacteristics.TRACK
    supported_characteristics = (RouteCharacteristics.TRACK,)
    route_class = NmeaRoute

    def is_position(self, line: str) -> bool:
        if GGA_PATTERN.match(line) is None and RMC_PATTERN.match(line) is None:
            return False
        return has_valid_checksum(line)

    def is_ignorable(self, line: str) -> bool:
        return line.strip().startswith("$")

    def parse_position(
        self, line: str, start_date: Optional[CompactCalendar] = None
    ) -> NmeaPosition:
        """
        Parse a GGA or RMC sentence.

        GGA sentences carry no date; their time of day is placed on the day
        of start_date, or on 1970-01-01 without one.
        """
        self._require_position(line)
        gga = GGA_PATTERN.match(line)
        if gga is not None:
            return self._parse_gga(gga, start_date, line)
        return self._parse_rmc(RMC_PATTERN.match(line), start_date, line)

    def _parse_time(
        self,
        time: Optional[str],
        date: Optional[CompactCalendar],
        line: str,
    ) -> Optional[CompactCalendar]:
        try:
            millis = parse_time_of_day(time)
        except FieldParseFailure as e:
            logger.error(f"{e}; using no time for '{line}'")
            return None
        if millis is None:
            return None
        return start_of_day(date).add_millis(millis)

    def _parse_gga(self, match, start_date, line) -> NmeaPosition:
        time, latitude, north_south, longitude, east_west = match.group(2, 3, 4, 5, 6)
        satellites, hdop, elevation = match.group(7, 8, 9)
        return NmeaPosition(
            longitude=parse_coordinate(longitude, east_west),
            latitude=parse_coordinate(latitude, north_south),
            elevation=parse_double(elevation),
            time=self._parse_time(time, start_date, line),
            satellites=parse_int(satellites),
            hdop=parse_double(hdop),
        )

    def _parse_rmc(self, match, start_date, line) -> NmeaPosition:
        time, latitude, north_south, longitude, east_west = match.group(2, 3, 4, 5, 6)
        knots, heading, date = match.group(7, 8, 9)
        day = start_date
        if date:
            try:
                day = parse_date(date)
            except FieldParseFailure as e:
                logger.error(f"{e}; using start date for '{line}'")
        knots = parse_double(knots)
        return NmeaPosition(
            longitude=parse_coordinate(longitude, east_west),
            latitude=parse_coordinate(latitude, north_south),
            speed=knots * KILOMETERS_PER_HOUR_PER_KNOT if knots is not None else None,
            time=self._parse_time(time, day, line),
            heading=parse_double(heading),
        )

    def _read_lines(self, lines, name, description, start_date) -> BaseRoute:
        positions: List[NmeaPosition] = []
        current_date = start_date
        unpaired_is_rmc: Optional[bool] = None
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            if not self.is_position(line):
                if not self.is_ignorable(line):
                    raise GrammarMismatch(
                        f"{self.display_name}: line {line_number} does not match: {line!r}"
                    )
                logger.debug(f"Skipping NMEA sentence in line {line_number}: {line!r}")
                continue

            position = self.parse_position(line, current_date)
            is_rmc = RMC_PATTERN.match(line) is not None
            if is_rmc and position.time is not None:
                current_date = position.time
            # A GGA and an RMC sentence in a row describe one fix, never more
            if (
                unpaired_is_rmc is not None
                and unpaired_is_rmc != is_rmc
                and _is_same_fix(positions[-1], position)
            ):
                positions[-1] = self._merge(positions[-1], position)
                unpaired_is_rmc = None
            else:
                positions.append(position)
                unpaired_is_rmc = is_rmc

        if not positions:
            raise GrammarMismatch(f"{self.display_name}: no positions found")
        return self.create_route(
            self.route_characteristics, name, description, positions
        )

    def _merge(self, first: NmeaPosition, second: NmeaPosition) -> NmeaPosition:
        # The later sentence wins for time so an RMC date replaces a guessed one
        return NmeaPosition(
            longitude=first.longitude,
            latitude=first.latitude,
            elevation=_first_present(first.elevation, second.elevation),
            speed=_first_present(first.speed, second.speed),
            time=_first_present(second.time, first.time),
            heading=_first_present(first.heading, second.heading),
            satellites=_first_present(first.satellites, second.satellites),
            hdop=_first_present(first.hdop, second.hdop),
        )

    def write_position(
        self,
        position: BaseNavigationPosition,
        writer: TextIO,
        index: int,
        is_first_position: bool,
    ) -> None:
        nmea = position.as_nmea_position()
        latitude = format_coordinate(nmea.latitude, 2)
        north_south = "S" if nmea.latitude < 0 else "N"
        longitude = format_coordinate(nmea.longitude, 3)
        east_west = "W" if nmea.longitude < 0 else "E"
        time = format_time(nmea.time)

        satellites = ""
        if nmea.satellites is not None and nmea.satellites >= 0:
            satellites = f"{nmea.satellites:02d}"
        gga = ",".join(
            (
                "GPGGA",
                time,
                latitude,
                north_south,
                longitude,
                east_west,
                "1",
                satellites,
                format_double(nmea.hdop, 1),
                format_double(nmea.elevation, 1),
                "M",
                "",
                "M",
                "",
                "",
            )
        )
        knots = None
        if nmea.speed is not None:
            knots = nmea.speed / KILOMETERS_PER_HOUR_PER_KNOT
        rmc = ",".join(
            (
                "GPRMC",
                time,
                "A",
                latitude,
                north_south,
                longitude,
                east_west,
                format_double(knots, 1),
                format_double(nmea.heading, 1),
                format_date(nmea.time),
                "",
                "",
            )
        )
        writer.write(with_checksum(gga) + "\n")
        writer.write(with_checksum(rmc) + "\n")
