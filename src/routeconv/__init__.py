#!/usr/bin/env python3
"""
Routeconv - A GPS route, track and waypoint format converter.

This package reads routes in a range of vendor file formats, converts them
between the formats' position models and writes them back out.
"""
import importlib.metadata

__version__ = importlib.metadata.version("routeconv")

# Import main classes for public API
from .errors import (
    FieldParseFailure,
    GrammarMismatch,
    InvalidArgument,
    NavigationFormatError,
    PositionIndexError,
    UnsupportedConversion,
)
from .position import BaseNavigationPosition, Wgs84Position
from .route import BaseRoute, RouteCharacteristics, Wgs84Route
from .transfer import CompactCalendar
from .formats import FORMATS, NavigationFormat, get_format, read_routes, write_route
from .conversion import convert

__all__ = [
    "FieldParseFailure",
    "GrammarMismatch",
    "InvalidArgument",
    "NavigationFormatError",
    "PositionIndexError",
    "UnsupportedConversion",
    "BaseNavigationPosition",
    "Wgs84Position",
    "BaseRoute",
    "RouteCharacteristics",
    "Wgs84Route",
    "CompactCalendar",
    "FORMATS",
    "NavigationFormat",
    "get_format",
    "read_routes",
    "write_route",
    "convert",
]
