"""Variant location parsing and formatting.

Coordinate conventions:
    - Locations are 1-based inclusive throughout (VCF/GFF3 convention)
    - Location strings: seqid:start-end, or seqid:pos for a single base

Example:
    >>> from nearestexon.utils.regions import parse_location
    >>> variant = parse_location("chr1:1000")
    >>> variant.location
    'chr1:1000-1000'
"""

from __future__ import annotations

import re
from typing import NamedTuple


class VariantPoint(NamedTuple):
    """A variant position with its contig.

    Attributes:
        seqid: Chromosome/contig name.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
    """

    seqid: str
    start: int
    end: int

    def __str__(self) -> str:
        return self.location

    @property
    def location(self) -> str:
        """Location string used as a cache key."""
        return format_location(self.seqid, self.start, self.end)

    @property
    def length(self) -> int:
        """Number of reference bases covered."""
        return self.end - self.start + 1

    def overlaps(self, start: int, end: int) -> bool:
        """Check if the variant overlaps a 1-based inclusive interval."""
        return self.start <= end and start <= self.end


# Handles: chr1:1000, chr1:1000-2000, chr1:1,000-2,000, scaffold_1:5..10
_LOCATION_PATTERN = re.compile(r"^(.+):([\d,]+)(?:(?:-|\.\.)([\d,]+))?$")


def parse_location(location: str) -> VariantPoint:
    """Parse a location string into a VariantPoint.

    Supported formats:
        chr1:1000           (single base)
        chr1:1000-1005      (1-based, inclusive)
        chr1:1000..1005     (GFF style)

    Args:
        location: Location string.

    Returns:
        VariantPoint with 1-based inclusive coordinates.

    Raises:
        ValueError: If the format or coordinates are invalid.
    """
    match = _LOCATION_PATTERN.match(location.strip())
    if not match:
        raise ValueError(
            f"Invalid location format: '{location}'. "
            "Expected format: seqid:pos or seqid:start-end (e.g., chr1:1000)"
        )

    seqid = match.group(1)
    start = int(match.group(2).replace(",", ""))
    end = int(match.group(3).replace(",", "")) if match.group(3) else start

    if start < 1:
        raise ValueError(f"Start position must be >= 1, got {start}")
    if end < start:
        raise ValueError(f"End must be >= start: {start}-{end}")

    return VariantPoint(seqid, start, end)


def format_location(seqid: str, start: int, end: int) -> str:
    """Format coordinates as a ``seqid:start-end`` location string.

    Example:
        >>> format_location("chr1", 1000, 1000)
        'chr1:1000-1000'
    """
    return f"{seqid}:{start}-{end}"
