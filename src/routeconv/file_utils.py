#!/usr/bin/env python3
"""
Filename utilities for generating output filenames.
"""

import os
import logging

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100


def _reserve(candidate: str) -> bool:
    """
    Create an empty file exclusively.

    Returns:
        True if the file was created, False if it already exists

    Raises:
        ValueError: If the file cannot be created for another reason
    """
    try:
        with open(candidate, "x"):
            pass
        return True
    except FileExistsError:
        return False
    except OSError as e:
        logger.error(f"Cannot create file {candidate}: {e}")
        raise ValueError(f"Cannot create file: {e}")


def generate_output_filename(input_filename: str, extension: str) -> str:
    """
    Generates an output filename next to the input and reserves it by
    creating an empty file.

    Strategy:
    1. Drop the input's extension and append " converted" plus the target
       format's extension
    2. If that file exists, try " (1)", " (2)", etc. before the extension
    3. Stop after MAX_ATTEMPTS numbered candidates

    Args:
        input_filename: Path to the file being converted
        extension: Extension of the target format, with leading dot

    Returns:
        Output filename that has been created as an empty file

    Raises:
        RuntimeError: If no available filename is found
        ValueError: If a filename cannot be created (e.g., due to permissions
            or an invalid name detected by the OS)
    """
    input_dir = os.path.dirname(input_filename)
    stem = os.path.splitext(os.path.basename(input_filename))[0]
    base_output = os.path.join(input_dir, stem + " converted")

    candidate = base_output + extension
    if _reserve(candidate):
        return candidate

    for i in range(1, MAX_ATTEMPTS + 1):
        candidate = f"{base_output} ({i}){extension}"
        if _reserve(candidate):
            return candidate

    logger.error(
        f"Could not find an available filename after {MAX_ATTEMPTS} attempts. "
        f"Please clean up your output directory or name the output explicitly."
    )
    raise RuntimeError(f"No available filename found after {MAX_ATTEMPTS} attempts")
