#!/usr/bin/env python3
"""
Route converter command line tool.
Reads a GPS route, track or waypoint file in any supported format, picks one
of its routes and writes it in another format.
"""

from typing import List, Optional
import argparse
import logging
import os
import sys

from . import __version__
from .catalog import use_default_collation
from .config import RouteconvConfig
from .errors import GrammarMismatch, NavigationFormatError
from .file_utils import generate_output_filename
from .formats import FORMATS, NavigationFormat, get_format, read_routes, write_route
from .positions import complement_speeds
from .route import BaseRoute

# Configure logging
logger = logging.getLogger("routeconv")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Convert GPS routes, tracks and waypoints between file formats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="File to convert",
    )
    parser.add_argument(
        "output",
        type=str,
        nargs="?",
        default=None,
        help="Output file (default: auto-generated based on input filename)",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=None,
        help="Target format by name or extension (default: from the output "
        "filename, else the input's format)",
    )
    parser.add_argument(
        "--route",
        type=int,
        default=0,
        help="Index of the route to convert if the file holds several (default: 0)",
    )
    parser.add_argument(
        "--complement-speeds",
        action="store_true",
        help="Derive missing speeds from the distance and time to the predecessor",
    )
    parser.add_argument(
        "--start-date",
        type=str,
        default=None,
        help="Date (YYYY-MM-DD) for formats that only record times of day",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print the routes found in the file instead of converting",
    )
    parser.add_argument(
        "--list-formats",
        action="store_true",
        help="Print the supported formats and exit",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"routeconv {__version__}",
    )
    return parser


def setup_logging(config: RouteconvConfig) -> None:
    """Setup logging configuration."""
    level = getattr(logging, config.log_level)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    # Create console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)


def determine_target_format(
    format_arg: Optional[str], output_arg: Optional[str], source: BaseRoute
) -> NavigationFormat:
    """
    Determine the format to write.

    Raises:
        KeyError: If the named format or output extension is unknown
    """
    if format_arg is not None:
        return get_format(format_arg)
    if output_arg is not None:
        extension = os.path.splitext(output_arg)[1]
        if extension:
            return get_format(extension)
    return source.format


def determine_output_filename(
    input_filename: str, output_arg: Optional[str], extension: str
) -> str:
    """
    Determine the output filename to use.

    Args:
        input_filename: Path to the input file
        output_arg: Output argument (None if not specified)
        extension: Extension of the target format

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        # User specified an output filename explicitly
        return output_arg

    # Auto-generate based on input filename
    try:
        return generate_output_filename(input_filename, extension)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def print_formats() -> None:
    for navigation_format in FORMATS:
        characteristics = ", ".join(
            c.value for c in navigation_format.supported_characteristics
        )
        print(
            f"{type(navigation_format).__name__:28} {navigation_format.name} [{characteristics}]"
        )


def print_routes(routes: List[BaseRoute]) -> None:
    for index, route in enumerate(routes):
        name = route.name if route.name is not None else "(unnamed)"
        print(
            f"{index}: {name} - {route.characteristics.value}, "
            f"{len(route)} positions, {route.get_length() / 1000:.2f} km"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parses command-line arguments, reads the input file, and writes the
    selected route in the target format.

    Returns:
        Process exit code
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.list_formats:
        print_formats()
        return 0

    if not args.filename:
        parser.print_help()
        return 1

    try:
        config = RouteconvConfig.from_args(args)
    except ValueError as e:
        setup_logging(RouteconvConfig(log_level=args.log_level))
        logger.error(f"Invalid start date: {e}")
        return 1

    # Setup logging
    setup_logging(config)
    use_default_collation()

    # Load and parse the input file
    try:
        with open(args.filename, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {args.filename}")
        return 1
    except PermissionError:
        logger.error(f"Cannot read file (permission denied): {args.filename}")
        return 1

    try:
        routes = read_routes(data, args.filename, config.start_date)
    except GrammarMismatch as e:
        logger.error(f"Unsupported file: {e}")
        return 1

    if args.info:
        print_routes(routes)
        return 0

    if not 0 <= config.route_index < len(routes):
        logger.error(
            f"Route {config.route_index} not found, the file holds {len(routes)} routes"
        )
        return 1
    route = routes[config.route_index]
    logger.info(f"Selected route {route!r}")

    if config.complement_speeds:
        route = complement_speeds(route)

    try:
        target_format = determine_target_format(
            config.target_format, args.output, route
        )
    except KeyError as e:
        logger.error(f"{e.args[0]}; see --list-formats")
        return 1
    if not target_format.supports_writing:
        logger.error(f"{target_format.name} cannot be written")
        return 1

    # Determine output filename
    try:
        output_filename = determine_output_filename(
            args.filename, args.output, target_format.extension
        )
        logger.debug(f"Output filename: {output_filename}")
    except (RuntimeError, ValueError):
        return 1

    try:
        with open(output_filename, "wb") as f:
            converted = write_route(route, target_format, f)
    except NavigationFormatError as e:
        logger.error(f"Failed to convert to {target_format.name}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot write {output_filename}: {e}")
        return 1

    logger.info(
        f"Wrote {len(converted)} positions as {target_format.name} to {output_filename}"
    )
    print(output_filename)
    return 0


if __name__ == "__main__":
    sys.exit(main())
