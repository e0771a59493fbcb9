"""Core nearest exon boundary logic.

- Boundary distance evaluation and tie selection
- Per-session result caching
- Location- and transcript-keyed annotators

Example:
    >>> from nearestexon.core import NearestExonAnnotator, QueryCache
"""

from nearestexon.core.boundaries import (
    BoundaryDistance,
    BoundaryKind,
    ExonInterval,
    NearestBoundary,
    evaluate_boundaries,
    find_nearest_boundaries,
    format_nearest,
    select_nearest,
)
from nearestexon.core.cache import CacheStats, QueryCache
from nearestexon.core.annotator import (
    JunctionScope,
    NearestExonAnnotator,
    NearestJunctionAnnotator,
)

__all__: list[str] = [
    # Boundary evaluation
    "BoundaryDistance",
    "BoundaryKind",
    "ExonInterval",
    "NearestBoundary",
    "evaluate_boundaries",
    "find_nearest_boundaries",
    "format_nearest",
    "select_nearest",
    # Caching
    "CacheStats",
    "QueryCache",
    # Annotators
    "JunctionScope",
    "NearestExonAnnotator",
    "NearestJunctionAnnotator",
]
