#!/usr/bin/env python3
"""
MagicMaps project (.ikt) format.

An XML project file whose map layer holds path objects. Every path becomes
one route with the path's name and description; its points carry nothing
but WGS84 coordinates:

    <Root>
      <Header><Format>MagicMaps_Projektdatei_Data</Format></Header>
      <Body>
        <MapLayer>
          <GeoObjects>
            <GeoObject>
              <Name>Tour</Name>
              <Path><Point X="13.3115464" Y="52.4135141"/></Path>
            </GeoObject>
          </GeoObjects>
        </MapLayer>
      </Body>
    </Root>
"""

from typing import BinaryIO, List, Optional
import logging
import xml.etree.ElementTree as ET

from ..errors import GrammarMismatch
from ..position import Wgs84Position
from ..route import BaseRoute, RouteCharacteristics
from ..transfer import CompactCalendar, format_double, parse_double, trim
from .base import PositionFamily, XmlNavigationFormat

logger = logging.getLogger(__name__)

FORMAT_VALUE = "MagicMaps_Projektdatei_Data"
CREATOR = "routeconv"
FRACTION_DIGITS = 7


def _split_description(text: Optional[str]) -> Optional[List[str]]:
    if text is None or not text.strip():
        return None
    return text.split("\n")


class MagicMapsIktFormat(XmlNavigationFormat):
    """Routes planned in MagicMaps project files."""

    extension = ".ikt"
    display_name = "MagicMaps Project"
    root_tag = "Root"
    position_family = PositionFamily.WGS84
    route_characteristics = RouteCharacteristics.ROUTE
    supported_characteristics = (RouteCharacteristics.ROUTE,)

    def read(
        self, data: bytes, start_date: Optional[CompactCalendar] = None
    ) -> List[BaseRoute]:
        root = self._parse_xml(data)
        header = root.find("Header")
        if header is None or trim(self._child_text(header, "Format")) != FORMAT_VALUE:
            raise GrammarMismatch(f"{self.display_name}: no {FORMAT_VALUE} header")

        routes = []
        for geo_object in root.iter("GeoObject"):
            positions = [
                Wgs84Position(
                    longitude=parse_double(point.get("X")),
                    latitude=parse_double(point.get("Y")),
                )
                for path in geo_object.findall("Path")
                for point in path.findall("Point")
            ]
            if not positions:
                logger.debug(f"{self.display_name}: skipping object without points")
                continue
            routes.append(
                self.create_route(
                    self.route_characteristics,
                    trim(self._child_text(geo_object, "Name")),
                    _split_description(self._child_text(geo_object, "Description")),
                    positions,
                )
            )

        if not routes:
            raise GrammarMismatch(f"{self.display_name}: no paths found")
        return routes

    def write(self, route: BaseRoute, sink: BinaryIO) -> None:
        positions = [
            position.as_wgs84_position()
            for position in self._writable_positions(route)
        ]
        root = ET.Element("Root")
        header = ET.SubElement(root, "Header")
        ET.SubElement(header, "Format").text = FORMAT_VALUE
        ET.SubElement(header, "CreatorApplication").text = CREATOR

        map_layer = ET.SubElement(ET.SubElement(root, "Body"), "MapLayer")
        geo_object = ET.SubElement(ET.SubElement(map_layer, "GeoObjects"), "GeoObject")
        if route.name is not None:
            ET.SubElement(geo_object, "Name").text = route.name
        if route.description:
            ET.SubElement(geo_object, "Description").text = "\n".join(
                route.description
            )
        path = ET.SubElement(geo_object, "Path")
        for position in positions:
            ET.SubElement(
                path,
                "Point",
                {
                    "X": format_double(position.longitude, FRACTION_DIGITS),
                    "Y": format_double(position.latitude, FRACTION_DIGITS),
                },
            )

        self._write_xml(root, sink)
