"""Nearest exon boundary evaluation.

This module finds the exon boundary (start or end coordinate) closest to a
variant position. Every exon gets a single record holding its nearer
boundary; the global minimum across all exons is bounded above by the
configured maximum range, and every exon tied at that minimum is reported.

Key components:
- BoundaryKind: Which boundary of an exon is nearest
- ExonInterval: Exon with stable identifier and inclusive coordinates
- BoundaryDistance: Per-exon nearest boundary record
- NearestBoundary: One reported (exon, distance, kind) result
- evaluate_boundaries: Per-exon distances and global minimum
- select_nearest: Exons tied at the global minimum
- format_nearest: Serialize results for output

Example:
    >>> exons = [ExonInterval("E1", 900, 1050), ExonInterval("E2", 500, 995)]
    >>> record, minimum = evaluate_boundaries(1000, exons, max_range=10000)
    >>> minimum
    5
    >>> format_nearest(select_nearest(record, minimum))
    'E2|5|end'
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, NamedTuple

import attrs

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

RESULT_JOINER = ","


# =============================================================================
# Enums
# =============================================================================


class BoundaryKind(Enum):
    """Which exon boundary is nearest to the variant."""

    START = "start"
    END = "end"
    START_END = "start_end"  # Equidistant from both boundaries

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Data Structures
# =============================================================================


def _end_not_before_start(instance: ExonInterval, attribute: attrs.Attribute, value: int) -> None:
    if value < instance.start:
        raise ValueError(
            f"Exon {instance.exon_id} end ({value}) must be >= start ({instance.start})"
        )


@attrs.frozen
class ExonInterval:
    """An exon with a stable identifier.

    Attributes:
        exon_id: Stable exon identifier.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
    """

    exon_id: str
    start: int
    end: int = attrs.field(validator=_end_not_before_start)

    @property
    def length(self) -> int:
        """Exon length in base pairs."""
        return self.end - self.start + 1

    def overlaps(self, start: int, end: int) -> bool:
        """Check if the exon overlaps a 1-based inclusive interval."""
        return self.start <= end and start <= self.end

    def distance_to(self, start: int, end: int) -> int:
        """Gap between the exon and an interval (0 when they overlap)."""
        if self.overlaps(start, end):
            return 0
        if end < self.start:
            return self.start - end
        return start - self.end


@attrs.frozen
class BoundaryDistance:
    """Nearest boundary of one exon.

    Attributes:
        distance: Distance in bp from the variant to the nearer boundary.
        kind: Which boundary that is.
    """

    distance: int
    kind: BoundaryKind


class NearestBoundary(NamedTuple):
    """An exon whose boundary lies at the minimum distance.

    Attributes:
        exon_id: Stable exon identifier.
        distance: Distance in bp to the boundary.
        kind: Which boundary of the exon.
    """

    exon_id: str
    distance: int
    kind: BoundaryKind

    def format(self, separator: str = "|") -> str:
        """Format as ``ID<sep>distance<sep>kind``."""
        return separator.join((self.exon_id, str(self.distance), self.kind.value))


DistanceRecord = dict[str, BoundaryDistance]


# =============================================================================
# Evaluation
# =============================================================================


def nearest_boundary(point: int, exon: ExonInterval) -> BoundaryDistance:
    """Get the nearer boundary of a single exon.

    Args:
        point: Variant position.
        exon: Exon to measure against.

    Returns:
        BoundaryDistance for the exon. Equal distances give START_END.
    """
    start_dist = abs(point - exon.start)
    end_dist = abs(point - exon.end)

    if start_dist < end_dist:
        return BoundaryDistance(start_dist, BoundaryKind.START)
    if start_dist > end_dist:
        return BoundaryDistance(end_dist, BoundaryKind.END)
    return BoundaryDistance(start_dist, BoundaryKind.START_END)


def evaluate_boundaries(
    point: int,
    exons: Iterable[ExonInterval],
    max_range: int,
) -> tuple[DistanceRecord, int]:
    """Compute the nearest boundary of every exon and the global minimum.

    Every exon is recorded, including those farther away than the current
    minimum. The minimum starts at ``max_range`` and only decreases. When
    an exon id appears more than once, the smaller distance is kept.

    Args:
        point: Variant position.
        exons: Candidate exons.
        max_range: Upper bound for the global minimum.

    Returns:
        Tuple of (exon_id -> BoundaryDistance, global minimum distance).
    """
    record: DistanceRecord = {}
    minimum = max_range

    for exon in exons:
        boundary = nearest_boundary(point, exon)

        previous = record.get(exon.exon_id)
        if previous is None or boundary.distance < previous.distance:
            record[exon.exon_id] = boundary

        if boundary.distance < minimum:
            minimum = boundary.distance

    logger.debug(f"Evaluated {len(record)} exons at {point}: minimum distance {minimum}")
    return record, minimum


# =============================================================================
# Selection
# =============================================================================


def select_nearest(record: DistanceRecord, global_min: int) -> list[NearestBoundary]:
    """Select the exons whose nearest boundary equals the global minimum.

    Exons at any other distance are dropped. When no exon reached the
    minimum exactly (e.g. every exon lies beyond the maximum range) the
    result is empty.

    Args:
        record: Per-exon nearest boundaries from evaluate_boundaries.
        global_min: Global minimum distance from evaluate_boundaries.

    Returns:
        List of NearestBoundary, one per tied exon, in record order.
    """
    return [
        NearestBoundary(exon_id, global_min, boundary.kind)
        for exon_id, boundary in record.items()
        if boundary.distance == global_min
    ]


def format_nearest(results: Iterable[NearestBoundary], separator: str = "|") -> str | None:
    """Serialize results as ``ID<sep>dist<sep>kind[,ID<sep>dist<sep>kind...]``.

    Args:
        results: Selected nearest boundaries.
        separator: Field separator within one result.

    Returns:
        Serialized string, or None when there are no results.
    """
    formatted = [result.format(separator) for result in results]
    return RESULT_JOINER.join(formatted) if formatted else None


def find_nearest_boundaries(
    point: int,
    exons: Iterable[ExonInterval],
    max_range: int,
) -> list[NearestBoundary]:
    """Evaluate exons and select the nearest tied boundaries in one step."""
    record, minimum = evaluate_boundaries(point, exons, max_range)
    return select_nearest(record, minimum)
