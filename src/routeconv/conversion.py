#!/usr/bin/env python3
"""
Any-to-any route conversion.

Each position type knows how to project itself into every position family
(the ``as_*_position`` methods), so converting a route means picking the
projection for the target's family, mapping every position through it and
choosing the nearest route characteristic the target supports.
"""

from typing import Dict, Tuple
import logging

from .errors import UnsupportedConversion
from .formats.base import NavigationFormat, PositionFamily
from .position import BaseNavigationPosition
from .route import BaseRoute, RouteCharacteristics

logger = logging.getLogger(__name__)

PROJECTIONS: Dict[PositionFamily, str] = {
    PositionFamily.WGS84: "as_wgs84_position",
    PositionFamily.NMEA: "as_nmea_position",
    PositionFamily.TOMTOM: "as_tomtom_position",
    PositionFamily.BCR: "as_bcr_position",
    PositionFamily.GPX: "as_gpx_position",
    PositionFamily.KML: "as_kml_position",
}

# First supported entry wins
CHARACTERISTICS_FALLBACK: Dict[
    RouteCharacteristics, Tuple[RouteCharacteristics, ...]
] = {
    RouteCharacteristics.TRACK: (
        RouteCharacteristics.TRACK,
        RouteCharacteristics.ROUTE,
        RouteCharacteristics.WAYPOINTS,
    ),
    RouteCharacteristics.ROUTE: (
        RouteCharacteristics.ROUTE,
        RouteCharacteristics.TRACK,
        RouteCharacteristics.WAYPOINTS,
    ),
    RouteCharacteristics.WAYPOINTS: (
        RouteCharacteristics.WAYPOINTS,
        RouteCharacteristics.ROUTE,
        RouteCharacteristics.TRACK,
    ),
}


def target_characteristics(
    characteristics: RouteCharacteristics, target_format: NavigationFormat
) -> RouteCharacteristics:
    """
    Choose the characteristic a route gets in the target format.

    Raises:
        UnsupportedConversion: If the target supports no characteristic at all
    """
    for candidate in CHARACTERISTICS_FALLBACK[characteristics]:
        if target_format.supports(candidate):
            return candidate
    raise UnsupportedConversion(
        f"{target_format.name} supports no route characteristics"
    )


def convert_position(
    position: BaseNavigationPosition, family: PositionFamily
) -> BaseNavigationPosition:
    """
    Project a position into a position family.

    Raises:
        UnsupportedConversion: If no projection exists for the family
    """
    method = PROJECTIONS.get(family)
    if method is None:
        raise UnsupportedConversion(f"No projection to {family}")
    return getattr(position, method)()


def convert(route: BaseRoute, target_format: NavigationFormat) -> BaseRoute:
    """
    Build a route typed for another format.

    The source route and its positions are left untouched; the result shares
    no mutable state with them.

    Args:
        route: Route to convert
        target_format: Format the result is bound to

    Returns:
        A new route of the target format's route class

    Raises:
        UnsupportedConversion: If the target cannot be written or has no
            projection for its position family
    """
    if not target_format.supports_writing:
        raise UnsupportedConversion(f"{target_format.name} cannot be written")

    characteristics = target_characteristics(route.characteristics, target_format)
    if characteristics != route.characteristics:
        logger.info(
            f"{target_format.name} has no {route.characteristics.value}, "
            f"converting to {characteristics.value}"
        )

    positions = [
        convert_position(position, target_format.position_family)
        for position in route.positions
    ]
    source = route.format.name if route.format is not None else type(route).__name__
    logger.debug(
        f"Converted {len(positions)} positions from {source} to {target_format.name}"
    )
    return target_format.create_route(
        characteristics, route.name, route.description, positions
    )
