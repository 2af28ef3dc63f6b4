#!/usr/bin/env python3
"""
Helpers over lists of positions: centering, speed complementing, numbered
position comments and the predicates that decide whether a field may be
overwritten with derived data.

All functions are pure; routes passed in are never modified.
"""

from enum import Enum
from typing import Iterable, Optional
import logging
import re

from .errors import PositionIndexError
from .geometry import calculate_center
from .position import BaseNavigationPosition
from .route import BaseRoute
from .transfer import is_empty, trim

logger = logging.getLogger(__name__)

POSITION_DESCRIPTION = "Position"


class NumberPattern(Enum):
    """How the number and the description of a numbered comment combine."""

    DESCRIPTION_ONLY = "description"
    NUMBER_ONLY = "number"
    NUMBER_DIRECTLY_FOLLOWED_BY_DESCRIPTION = "number-description"
    NUMBER_SPACE_THEN_DESCRIPTION = "number-space-description"
    DESCRIPTION_SPACE_THEN_NUMBER = "description-space-number"


_POSITION_COMMENT_PATTERN = re.compile(rf"^{POSITION_DESCRIPTION} \d+$")


def format_numbered_position(
    number: int,
    description: str = POSITION_DESCRIPTION,
    pattern: NumberPattern = NumberPattern.DESCRIPTION_SPACE_THEN_NUMBER,
) -> str:
    """
    Build the comment of a numbered position.

    Args:
        number: Position number, usually one-based
        description: Text that goes with the number
        pattern: Layout of number and description

    Returns:
        e.g. "Position 3" for the default pattern
    """
    if pattern == NumberPattern.DESCRIPTION_ONLY:
        return description
    if pattern == NumberPattern.NUMBER_ONLY:
        return str(number)
    if pattern == NumberPattern.NUMBER_DIRECTLY_FOLLOWED_BY_DESCRIPTION:
        return f"{number}{description}"
    if pattern == NumberPattern.NUMBER_SPACE_THEN_DESCRIPTION:
        return f"{number} {description}"
    return f"{description} {number}"


def is_position_comment(comment: Optional[str]) -> bool:
    """True for comments generated by format_numbered_position's default."""
    text = trim(comment)
    return text is not None and _POSITION_COMMENT_PATTERN.match(text) is not None


def needs_elevation(position: BaseNavigationPosition) -> bool:
    return is_empty(position.elevation)


def needs_speed(position: BaseNavigationPosition) -> bool:
    return is_empty(position.speed)


def needs_comment(position: BaseNavigationPosition) -> bool:
    """Absent, blank and auto-numbered comments may be replaced."""
    return trim(position.comment) is None or is_position_comment(position.comment)


def center(
    positions: Iterable[BaseNavigationPosition],
) -> Optional[BaseNavigationPosition]:
    """
    Center of the bounding box of the positions that have coordinates.

    Returns:
        A position of the first position's type holding only the center
        coordinates, or None if no position has coordinates
    """
    located = [position for position in positions if position.has_coordinates()]
    if not located:
        return None
    longitude, latitude = calculate_center(
        [(position.longitude, position.latitude) for position in located]
    )
    return type(located[0])(longitude=longitude, latitude=latitude)


def complement_speeds(route: BaseRoute) -> BaseRoute:
    """
    Fill in missing speeds from the distance and time to the predecessor.

    Positions that already carry a speed, the first position and positions
    whose speed cannot be derived keep what they have.

    Returns:
        A new route of the same format and type
    """
    positions = list(route.positions)
    complemented = 0
    for index in range(1, len(positions)):
        position = positions[index]
        if not needs_speed(position):
            continue
        speed = position.calculate_speed(route.positions[index - 1])
        if speed is not None:
            positions[index] = position.with_speed(speed)
            complemented += 1
    logger.debug(f"Complemented {complemented} of {len(positions)} speeds")
    return type(route)(
        route.format, route.characteristics, route.name, route.description, positions
    )


def insert_center_position(
    route: BaseRoute,
    index: int,
    pattern: NumberPattern = NumberPattern.DESCRIPTION_SPACE_THEN_NUMBER,
) -> BaseRoute:
    """
    Insert a new position after the given one, halfway to its successor.

    The new position takes the next free number as comment, e.g.
    "Position 5" for a route of four positions.

    Args:
        route: Route to start from
        index: Index of the position the new one follows
        pattern: Layout of the generated comment

    Returns:
        A new route with one more position

    Raises:
        PositionIndexError: If index has no successor in the route
        ValueError: If either neighbour has no coordinates
    """
    count = route.get_position_count()
    if not 0 <= index < count - 1:
        raise PositionIndexError(f"Position {index} has no successor in {count}")
    first = route.get_position(index)
    second = route.get_position(index + 1)
    if not (first.has_coordinates() and second.has_coordinates()):
        raise ValueError(f"Positions {index} and {index + 1} need coordinates")
    comment = format_numbered_position(count + 1, pattern=pattern)
    position = center([first, second]).with_comment(comment)
    result = type(route)(
        route.format,
        route.characteristics,
        route.name,
        route.description,
        route.positions,
    )
    result.add(index + 1, position)
    return result
