#!/usr/bin/env python3
"""
Geodesic helpers for positions and position lists.

Distances and bearings are computed on the WGS84 ellipsoid with pyproj;
bounding boxes come from Shapely.
"""

from typing import List, Optional, Tuple
from shapely.geometry import MultiPoint
import pyproj

# Geod objects are safe to share for reading
_WGS84_GEOD = pyproj.Geod(ellps="WGS84")


def calculate_distance(
    longitude1: float, latitude1: float, longitude2: float, latitude2: float
) -> float:
    """
    Calculate the geodesic distance between two coordinates.

    Returns:
        Distance in meters
    """
    _, _, distance = _WGS84_GEOD.inv(longitude1, latitude1, longitude2, latitude2)
    return distance


def calculate_bearing(
    longitude1: float, latitude1: float, longitude2: float, latitude2: float
) -> float:
    """
    Calculate the initial bearing from the first to the second coordinate.

    Returns:
        Bearing in degrees, normalized to [0, 360)
    """
    forward_azimuth, _, _ = _WGS84_GEOD.inv(
        longitude1, latitude1, longitude2, latitude2
    )
    bearing = forward_azimuth % 360.0
    return 0.0 if bearing == 360.0 else bearing


def calculate_length(coord_tuples: List[Tuple[float, float]]) -> float:
    """
    Calculate the length of a polyline along the ellipsoid.

    Args:
        coord_tuples: List of (longitude, latitude) tuples

    Returns:
        Length in meters, 0.0 for fewer than two coordinates
    """
    if len(coord_tuples) < 2:
        return 0.0
    longitudes = [coord[0] for coord in coord_tuples]
    latitudes = [coord[1] for coord in coord_tuples]
    return _WGS84_GEOD.line_length(longitudes, latitudes)


def calculate_bounds(
    coord_tuples: List[Tuple[float, float]],
) -> Optional[Tuple[float, float, float, float]]:
    """
    Calculate the bounding box of a set of coordinates.

    Args:
        coord_tuples: List of (longitude, latitude) tuples

    Returns:
        Tuple of (south, west, north, east) in decimal degrees, or None
        if there are no coordinates
    """
    if not coord_tuples:
        return None
    west, south, east, north = MultiPoint(coord_tuples).bounds
    return (south, west, north, east)


def calculate_center(
    coord_tuples: List[Tuple[float, float]],
) -> Optional[Tuple[float, float]]:
    """
    Calculate the center of the bounding box of a set of coordinates.

    Returns:
        Tuple of (longitude, latitude), or None if there are no coordinates
    """
    bounds = calculate_bounds(coord_tuples)
    if bounds is None:
        return None
    south, west, north, east = bounds
    return ((west + east) / 2.0, (south + north) / 2.0)
