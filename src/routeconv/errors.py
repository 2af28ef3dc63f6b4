#!/usr/bin/env python3
"""
Exceptions raised while reading, writing and converting routes.
"""


class NavigationFormatError(Exception):
    """Base class for all route conversion errors."""

    pass


class GrammarMismatch(NavigationFormatError):
    """Raised when a line or document does not match a format's grammar."""

    pass


class FieldParseFailure(NavigationFormatError, ValueError):
    """Raised when a single field cannot be parsed; recovered by the reader."""

    pass


class InvalidArgument(NavigationFormatError, ValueError):
    """Raised when a caller breaks an operation's contract."""

    pass


class PositionIndexError(InvalidArgument, IndexError):
    """Raised when a position index lies outside the route."""

    pass


class UnsupportedConversion(NavigationFormatError):
    """Raised when a target format cannot represent a route at all."""

    pass
