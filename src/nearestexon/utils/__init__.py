"""Utility functions for NearestExon.

- Variant location parsing and formatting
- Logging configuration

Example:
    >>> from nearestexon.utils.regions import parse_location
    >>> variant = parse_location("chr1:1000-1000")
"""

from nearestexon.utils.regions import (
    VariantPoint,
    format_location,
    parse_location,
)

__all__ = [
    "VariantPoint",
    "format_location",
    "parse_location",
]
