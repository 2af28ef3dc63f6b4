#!/usr/bin/env python3
"""
Google Earth KML 2.2.

Waypoints are written as Point placemarks, routes as a LineString and
tracks as a gx:Track with one <when> and one <gx:coord> per position.
"""

from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple
import logging
import xml.etree.ElementTree as ET

from ..errors import FieldParseFailure, GrammarMismatch
from ..position import BaseNavigationPosition
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, format_double, parse_double, trim
from .base import (
    PositionFamily,
    XmlNavigationFormat,
    format_xml_time,
    parse_xml_time,
)

logger = logging.getLogger(__name__)

KML_22_NAMESPACE = "http://www.opengis.net/kml/2.2"
GX_NAMESPACE = "http://www.google.com/kml/ext/2.2"
FRACTION_DIGITS = 7


@dataclass(frozen=True)
class KmlPosition(BaseNavigationPosition):
    """A KML coordinate; KML has no place for speed."""

    pass


class KmlRoute(BaseRoute):
    position_class = KmlPosition


def parse_coordinates(
    text: Optional[str], separator: Optional[str] = ","
) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    """Split 'lon,lat[,ele]' into numbers; missing parts are None."""
    parts = (text or "").strip().split(separator)
    values = [parse_double(part) for part in parts[:3]]
    values += [None] * (3 - len(values))
    return values[0], values[1], values[2]


def format_coordinates(position: BaseNavigationPosition, separator: str = ",") -> str:
    values = [
        format_double(position.longitude, FRACTION_DIGITS),
        format_double(position.latitude, FRACTION_DIGITS),
    ]
    if position.elevation is not None:
        values.append(format_double(position.elevation, FRACTION_DIGITS))
    return separator.join(values)


def _split_description(text: Optional[str]) -> Optional[List[str]]:
    if text is None or not text.strip():
        return None
    return text.split("\n")


class Kml22Format(XmlNavigationFormat):
    """Google Earth 5 and later."""

    extension = ".kml"
    display_name = "Google Earth 5 (KML 2.2)"
    namespace = KML_22_NAMESPACE
    root_tag = "kml"
    position_family = PositionFamily.KML
    route_characteristics = RouteCharacteristics.TRACK
    supported_characteristics = (
        RouteCharacteristics.WAYPOINTS,
        RouteCharacteristics.ROUTE,
        RouteCharacteristics.TRACK,
    )
    route_class = KmlRoute

    def qualify_gx(self, tag: str) -> str:
        return f"{{{GX_NAMESPACE}}}{tag}"

    def _parse_time(self, text: Optional[str]) -> Optional[CompactCalendar]:
        try:
            return parse_xml_time(text)
        except FieldParseFailure as e:
            logger.error(f"{e}; using no time")
            return None

    def read(
        self, data: bytes, start_date: Optional[CompactCalendar] = None
    ) -> List[BaseRoute]:
        root = self._parse_xml(data)
        document = root.find(self.qualify("Document"))
        container = document if document is not None else root
        routes = []
        waypoints = []

        for placemark in root.iter(self.qualify("Placemark")):
            name = trim(self._child_text(placemark, "name"))
            description = _split_description(
                self._child_text(placemark, "description")
            )
            point = placemark.find(self.qualify("Point"))
            if point is not None:
                waypoints.append(self._parse_point(placemark, point, name))
            for line_string in placemark.iter(self.qualify("LineString")):
                routes.append(
                    self.create_route(
                        RouteCharacteristics.ROUTE,
                        name,
                        description,
                        self._parse_line_string(line_string),
                    )
                )
            for track in placemark.iter(self.qualify_gx("Track")):
                routes.append(
                    self.create_route(
                        RouteCharacteristics.TRACK,
                        name,
                        description,
                        self._parse_track(track),
                    )
                )

        if waypoints:
            routes.insert(
                0,
                self.create_route(
                    RouteCharacteristics.WAYPOINTS,
                    trim(self._child_text(container, "name")),
                    _split_description(self._child_text(container, "description")),
                    waypoints,
                ),
            )
        if not routes:
            raise GrammarMismatch(f"{self.display_name}: no placemarks found")
        return routes

    def _parse_point(
        self, placemark: ET.Element, point: ET.Element, name: Optional[str]
    ) -> KmlPosition:
        longitude, latitude, elevation = parse_coordinates(
            self._child_text(point, "coordinates")
        )
        time = None
        time_stamp = placemark.find(self.qualify("TimeStamp"))
        if time_stamp is not None:
            time = self._parse_time(self._child_text(time_stamp, "when"))
        return KmlPosition(
            longitude=longitude,
            latitude=latitude,
            elevation=elevation,
            time=time,
            comment=name,
        )

    def _parse_line_string(self, line_string: ET.Element) -> List[KmlPosition]:
        text = self._child_text(line_string, "coordinates") or ""
        positions = []
        for coordinates in text.split():
            longitude, latitude, elevation = parse_coordinates(coordinates)
            positions.append(
                KmlPosition(longitude=longitude, latitude=latitude, elevation=elevation)
            )
        return positions

    def _parse_track(self, track: ET.Element) -> List[KmlPosition]:
        times = [
            self._parse_time(when.text) for when in track.findall(self.qualify("when"))
        ]
        coordinates = [
            parse_coordinates(coord.text, None)
            for coord in track.findall(self.qualify_gx("coord"))
        ]
        if len(times) != len(coordinates):
            logger.warning(
                f"gx:Track has {len(times)} times for {len(coordinates)} coordinates"
            )
        times += [None] * (len(coordinates) - len(times))
        return [
            KmlPosition(
                longitude=longitude,
                latitude=latitude,
                elevation=elevation,
                time=time,
            )
            for (longitude, latitude, elevation), time in zip(coordinates, times)
        ]

    def write(self, route: BaseRoute, sink: BinaryIO) -> None:
        positions = [
            position.as_kml_position() for position in self._writable_positions(route)
        ]
        description = "\n".join(route.description) if route.description else None
        root = ET.Element("kml", {"xmlns": KML_22_NAMESPACE, "xmlns:gx": GX_NAMESPACE})
        document = ET.SubElement(root, "Document")
        if route.name is not None:
            ET.SubElement(document, "name").text = route.name

        if route.characteristics == RouteCharacteristics.WAYPOINTS:
            if description is not None:
                ET.SubElement(document, "description").text = description
            for position in positions:
                self._write_point(document, position)
        else:
            placemark = ET.SubElement(document, "Placemark")
            if route.name is not None:
                ET.SubElement(placemark, "name").text = route.name
            if description is not None:
                ET.SubElement(placemark, "description").text = description
            if route.characteristics == RouteCharacteristics.ROUTE:
                self._write_line_string(placemark, positions)
            else:
                self._write_track(placemark, positions)

        self._write_xml(root, sink)

    def _write_point(self, document: ET.Element, position: KmlPosition) -> None:
        placemark = ET.SubElement(document, "Placemark")
        if position.comment is not None:
            ET.SubElement(placemark, "name").text = position.comment
        if position.time is not None:
            time_stamp = ET.SubElement(placemark, "TimeStamp")
            ET.SubElement(time_stamp, "when").text = format_xml_time(position.time)
        point = ET.SubElement(placemark, "Point")
        ET.SubElement(point, "coordinates").text = format_coordinates(position)

    def _write_line_string(
        self, placemark: ET.Element, positions: List[KmlPosition]
    ) -> None:
        line_string = ET.SubElement(placemark, "LineString")
        ET.SubElement(line_string, "tessellate").text = "1"
        ET.SubElement(line_string, "coordinates").text = " ".join(
            format_coordinates(position) for position in positions
        )

    def _write_track(self, placemark: ET.Element, positions: List[KmlPosition]) -> None:
        track = ET.SubElement(placemark, "gx:Track")
        for position in positions:
            when = ET.SubElement(track, "when")
            if position.time is not None:
                when.text = format_xml_time(position.time)
        for position in positions:
            ET.SubElement(track, "gx:coord").text = format_coordinates(position, " ")
