import argparse
from dataclasses import dataclass
from typing import Optional

from .transfer import CompactCalendar


@dataclass
class RouteconvConfig:
    """Configuration for the routeconv CLI."""

    log_level: str = "WARNING"
    target_format: Optional[str] = None
    route_index: int = 0
    complement_speeds: bool = False
    start_date: Optional[CompactCalendar] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RouteconvConfig":
        """
        Build a configuration from parsed command line arguments.

        Raises:
            ValueError: If --start-date is not a YYYY-MM-DD date
        """
        start_date = None
        if args.start_date is not None:
            start_date = CompactCalendar.parse(args.start_date, "%Y-%m-%d")
        return cls(
            log_level=args.log_level,
            target_format=args.format,
            route_index=args.route,
            complement_speeds=args.complement_speeds,
            start_date=start_date,
        )
