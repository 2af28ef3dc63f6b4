#!/usr/bin/env python3
"""
Registry of the supported formats and the auto-detecting entry points.

The registry is built once at import time and never changes afterwards.
"""

from typing import BinaryIO, List, Optional, Tuple
import logging
import os

from ..errors import GrammarMismatch, UnsupportedConversion
from ..route import BaseRoute
from ..transfer import CompactCalendar
from .base import (
    LineBasedFormat,
    NavigationFormat,
    PositionFamily,
    XmlNavigationFormat,
)
from .bcr import BcrFormat
from .gpx import Gpx10Format, Gpx11Format
from .ikt import MagicMapsIktFormat
from .kml import Kml22Format
from .magicmaps import MagicMaps2GoFormat
from .nmea import NmeaFormat
from .ozi import OziExplorerTrackFormat, OziExplorerWaypointFormat
from .tomtom import TomTomRouteFormat

logger = logging.getLogger(__name__)

# Order matters for auto-detection: stricter grammars come first
FORMATS: Tuple[NavigationFormat, ...] = (
    Gpx11Format(),
    Gpx10Format(),
    Kml22Format(),
    MagicMapsIktFormat(),
    NmeaFormat(),
    OziExplorerTrackFormat(),
    OziExplorerWaypointFormat(),
    TomTomRouteFormat(),
    MagicMaps2GoFormat(),
    BcrFormat(),
)


def get_format(name: str) -> NavigationFormat:
    """
    Look up a format by class name, display name or extension.

    Args:
        name: e.g. "Gpx11Format", "MagicMaps2Go" or ".itn"

    Raises:
        KeyError: If no format matches
    """
    wanted = name.strip().lower()
    for navigation_format in FORMATS:
        if wanted in (
            type(navigation_format).__name__.lower(),
            navigation_format.display_name.lower(),
            navigation_format.name.lower(),
        ):
            return navigation_format
    for navigation_format in FORMATS:
        if wanted in (navigation_format.extension, navigation_format.extension[1:]):
            return navigation_format
    raise KeyError(f"Unknown format: {name}")


def _candidates(filename: Optional[str]) -> List[NavigationFormat]:
    """Formats whose extension matches the filename go first."""
    if filename is None:
        return list(FORMATS)
    extension = os.path.splitext(filename)[1].lower()
    matching = [f for f in FORMATS if f.extension == extension]
    others = [f for f in FORMATS if f.extension != extension]
    return matching + others


def read_routes(
    data: bytes,
    filename: Optional[str] = None,
    start_date: Optional[CompactCalendar] = None,
) -> List[BaseRoute]:
    """
    Parse a document in any supported format.

    Args:
        data: Raw file content
        filename: Optional name used to try the matching formats first
        start_date: Date for formats that only record times of day

    Returns:
        The routes of the first format whose grammar matches

    Raises:
        GrammarMismatch: If no registered format matches
    """
    for navigation_format in _candidates(filename):
        if not navigation_format.supports_reading:
            continue
        try:
            routes = navigation_format.read(data, start_date)
        except GrammarMismatch as e:
            logger.debug(f"Not {navigation_format.name}: {e}")
            continue
        logger.info(
            f"Read {len(routes)} routes as {navigation_format.name}"
            + (f" from {filename}" if filename else "")
        )
        return routes
    raise GrammarMismatch(
        f"No supported format matches {filename if filename else 'the data'}"
    )


def write_route(
    route: BaseRoute, target_format: NavigationFormat, sink: BinaryIO
) -> BaseRoute:
    """
    Convert a route to a format and write it.

    Returns:
        The converted route that was written

    Raises:
        UnsupportedConversion: If the format cannot represent the route
    """
    from ..conversion import convert  # Local import to avoid circular imports

    if not target_format.supports_writing:
        raise UnsupportedConversion(f"{target_format.name} cannot be written")
    converted = convert(route, target_format)
    target_format.write(converted, sink)
    return converted


__all__ = [
    "FORMATS",
    "get_format",
    "read_routes",
    "write_route",
    "NavigationFormat",
    "LineBasedFormat",
    "XmlNavigationFormat",
    "PositionFamily",
    "BcrFormat",
    "Gpx10Format",
    "Gpx11Format",
    "Kml22Format",
    "MagicMaps2GoFormat",
    "MagicMapsIktFormat",
    "NmeaFormat",
    "OziExplorerTrackFormat",
    "OziExplorerWaypointFormat",
    "TomTomRouteFormat",
]
