#!/usr/bin/env python3
"""
Ordering of catalog entries by name.
"""

from typing import Iterable, List, Protocol
import locale
import logging

logger = logging.getLogger(__name__)

# Sort name of entries whose name cannot be read
PLACEHOLDER_NAME = "?"


class NamedEntry(Protocol):
    def get_name(self) -> str:
        """May raise OSError when the name has to be fetched."""


def use_default_collation() -> None:
    """
    Collate names by the user's locale from the environment.

    Python processes start in the C locale, which orders by code point, so
    applications call this once at startup before sorting catalog entries.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Cannot use the default collation, keeping the current one: {e}")


class CategoryComparator:
    """
    Compares catalog entries by the collation of their names in the current
    locale (LC_COLLATE, see use_default_collation).

    Entries whose name lookup fails compare as PLACEHOLDER_NAME, so a single
    unreadable entry never aborts a sort.
    """

    def get_name(self, entry: NamedEntry) -> str:
        try:
            return entry.get_name()
        except OSError as e:
            logger.warning(f"Cannot read name of {entry!r}: {e}")
            return PLACEHOLDER_NAME

    def sort_key(self, entry: NamedEntry) -> str:
        return locale.strxfrm(self.get_name(entry))

    def compare(self, first: NamedEntry, second: NamedEntry) -> int:
        """
        Returns:
            A negative number, zero or a positive number as the first entry
            sorts before, together with or after the second
        """
        first_key = self.sort_key(first)
        second_key = self.sort_key(second)
        return (first_key > second_key) - (first_key < second_key)

    def sort(self, entries: Iterable[NamedEntry]) -> List[NamedEntry]:
        return sorted(entries, key=self.sort_key)
