#!/usr/bin/env python3
"""
Format strategies: the shared contract of every dialect plus the machinery
for line-based and XML-based grammars.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import BinaryIO, Iterable, Iterator, List, Optional, TextIO, Tuple
import io
import logging
import xml.etree.ElementTree as ET
import gpxpy.gpx
import gpxpy.gpxfield

from ..errors import FieldParseFailure, GrammarMismatch, InvalidArgument
from ..position import BaseNavigationPosition
from ..route import BaseRoute, RouteCharacteristics, Wgs84Route
from ..transfer import CompactCalendar, trim

logger = logging.getLogger(__name__)

# Shared line grammar tokens
BEGIN_OF_LINE = r"^\s*"
END_OF_LINE = r"\s*$"
POSITION = r"[-+]?\d+\.\d+"


class PositionFamily(Enum):
    """Native position representation of a format."""

    WGS84 = "wgs84"
    NMEA = "nmea"
    TOMTOM = "tomtom"
    BCR = "bcr"
    GPX = "gpx"
    KML = "kml"


class NavigationFormat(ABC):
    """
    A stateless strategy describing one file dialect.

    Instances carry no per-route state, so two instances of the same class
    are interchangeable and compare equal.
    """

    extension = ""
    display_name = ""
    encoding = "utf-8"
    line_separator = "\r\n"
    position_family = PositionFamily.WGS84
    route_characteristics = RouteCharacteristics.TRACK
    supported_characteristics: Tuple[RouteCharacteristics, ...] = (
        RouteCharacteristics.TRACK,
    )
    supports_reading = True
    supports_writing = True
    route_class = Wgs84Route

    @property
    def name(self) -> str:
        return f"{self.display_name} (*{self.extension})"

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def supports(self, characteristics: RouteCharacteristics) -> bool:
        return characteristics in self.supported_characteristics

    def create_route(
        self,
        characteristics: RouteCharacteristics,
        name: Optional[str] = None,
        description: Optional[Iterable[str]] = None,
        positions: Optional[Iterable[BaseNavigationPosition]] = None,
    ) -> BaseRoute:
        return self.route_class(self, characteristics, name, description, positions)

    @abstractmethod
    def read(
        self, data: bytes, start_date: Optional[CompactCalendar] = None
    ) -> List[BaseRoute]:
        """
        Parse a document into routes.

        Args:
            data: Raw file content
            start_date: Date used for formats that only record times of day

        Returns:
            The routes found, never empty

        Raises:
            GrammarMismatch: If the document is not in this format
        """

    @abstractmethod
    def write(self, route: BaseRoute, sink: BinaryIO) -> None:
        """Serialize a route to a binary sink."""

    def to_bytes(self, route: BaseRoute) -> bytes:
        buffer = io.BytesIO()
        self.write(route, buffer)
        return buffer.getvalue()

    def _decode(self, data: bytes) -> str:
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise GrammarMismatch(f"{self.name}: not {self.encoding} text: {e}")

    @contextmanager
    def _text_writer(self, sink: BinaryIO) -> Iterator[TextIO]:
        """Wrap a binary sink for text output without closing it afterwards."""
        writer = io.TextIOWrapper(
            sink, encoding=self.encoding, errors="replace", newline=self.line_separator
        )
        try:
            yield writer
        finally:
            writer.flush()
            writer.detach()

    def _writable_positions(self, route: BaseRoute) -> List[BaseNavigationPosition]:
        positions = []
        for index, position in enumerate(route.positions):
            if position.has_coordinates():
                positions.append(position)
            else:
                logger.warning(
                    f"{self.display_name}: skipping position {index} without coordinates"
                )
        return positions


class LineBasedFormat(NavigationFormat):
    """
    A format with one position per line, optionally framed by header lines.

    Subclasses supply the line grammar through is_position, parse_position
    and write_position.
    """

    @abstractmethod
    def is_position(self, line: str) -> bool:
        """True iff the whole line matches the position grammar."""

    @abstractmethod
    def parse_position(
        self, line: str, start_date: Optional[CompactCalendar] = None
    ) -> BaseNavigationPosition:
        """
        Parse a position line.

        Raises:
            InvalidArgument: If the line does not match the position grammar
        """

    @abstractmethod
    def write_position(
        self,
        position: BaseNavigationPosition,
        writer: TextIO,
        index: int,
        is_first_position: bool,
    ) -> None:
        """Emit exactly one line for a position."""

    def is_ignorable(self, line: str) -> bool:
        """True for non-position lines the grammar tolerates between positions."""
        return False

    def read_header(
        self, lines: List[str]
    ) -> Tuple[Optional[str], Optional[List[str]], List[str]]:
        """
        Consume framing lines before the positions.

        Returns:
            Tuple of (name, description, remaining lines)

        Raises:
            GrammarMismatch: If the header does not match
        """
        return None, None, lines

    def write_header(self, route: BaseRoute, writer: TextIO) -> None:
        pass

    def read(
        self, data: bytes, start_date: Optional[CompactCalendar] = None
    ) -> List[BaseRoute]:
        lines = self._decode(data).splitlines()
        name, description, lines = self.read_header(lines)
        return [self._read_lines(lines, name, description, start_date)]

    def _read_lines(
        self,
        lines: List[str],
        name: Optional[str],
        description: Optional[List[str]],
        start_date: Optional[CompactCalendar],
    ) -> BaseRoute:
        positions = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            if self.is_position(line):
                positions.append(self.parse_position(line, start_date))
            elif self.is_ignorable(line):
                logger.debug(f"{self.display_name}: ignoring line {line_number}")
            else:
                raise GrammarMismatch(
                    f"{self.display_name}: line {line_number} does not match: {line!r}"
                )
        if not positions:
            raise GrammarMismatch(f"{self.display_name}: no positions found")
        return self.create_route(
            self.route_characteristics, name, description, positions
        )

    def write(self, route: BaseRoute, sink: BinaryIO) -> None:
        positions = self._writable_positions(route)
        with self._text_writer(sink) as writer:
            self.write_header(route, writer)
            self.write_positions(positions, writer)

    def write_positions(
        self, positions: List[BaseNavigationPosition], writer: TextIO
    ) -> None:
        for index, position in enumerate(positions):
            self.write_position(position, writer, index, index == 0)

    def _require_position(self, line: str) -> None:
        if not self.is_position(line):
            raise InvalidArgument(f"'{line}' does not match {self.display_name}")


def parse_xml_time(text: Optional[str]) -> Optional[CompactCalendar]:
    """
    Parse an ISO-8601 timestamp as found in GPX <time> and KML <when>.

    Raises:
        FieldParseFailure: If the text is no ISO-8601 timestamp
    """
    text = trim(text)
    if text is None:
        return None
    try:
        value = gpxpy.gpxfield.parse_time(text)
    except (gpxpy.gpx.GPXException, ValueError) as e:
        raise FieldParseFailure(f"Invalid time '{text}': {e}") from e
    return CompactCalendar.from_datetime(value)


def format_xml_time(time: CompactCalendar) -> str:
    value = time.datetime
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond // 1000:03d}"
    return text + "Z"


class XmlNavigationFormat(NavigationFormat):
    """A format bound to an XML document; recognition is a full parse."""

    encoding = "utf-8"
    namespace = ""
    root_tag = ""

    def qualify(self, tag: str) -> str:
        """ElementTree name of a tag in this format's namespace."""
        if not self.namespace:
            return tag
        return f"{{{self.namespace}}}{tag}"

    def _parse_xml(self, data: bytes) -> ET.Element:
        """
        Parse a document and check its root element.

        Raises:
            GrammarMismatch: If the data is no XML or has another root element
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise GrammarMismatch(f"{self.display_name}: not an XML document: {e}")
        if root.tag != self.qualify(self.root_tag):
            raise GrammarMismatch(
                f"{self.display_name}: unexpected root element {root.tag}"
            )
        return root

    def _child_text(self, element: ET.Element, tag: str) -> Optional[str]:
        child = element.find(self.qualify(tag))
        if child is None or child.text is None:
            return None
        return child.text

    def _write_xml(self, root: ET.Element, sink: BinaryIO) -> None:
        ET.indent(root)
        sink.write(b'<?xml version="1.0" encoding="UTF-8"?>\n')
        sink.write(ET.tostring(root, encoding=self.encoding))
        sink.write(b"\n")
