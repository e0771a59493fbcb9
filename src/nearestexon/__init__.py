"""NearestExon: find the exon junction boundary nearest to a variant.

NearestExon reports the exon start or end coordinate closest to a variant
position. More than one boundary is reported when boundaries are
equidistant. Results are memoized per location or per transcript for the
lifetime of a session.

Example:
    >>> from nearestexon import ExonInterval, evaluate_boundaries, select_nearest
    >>> record, nearest = evaluate_boundaries(1000, [ExonInterval("E1", 900, 1100)], 10000)
    >>> select_nearest(record, nearest)
    [NearestBoundary(exon_id='E1', distance=100, kind=<BoundaryKind.START_END: 'start_end'>)]

Modules:
    core: Boundary distance evaluation, result selection, caching, annotators
    io: Exon sources (GFF3) and variant input (VCF)
    config: Explicit configuration objects
    utils: Location parsing and logging
"""

from nearestexon.core.boundaries import (
    BoundaryDistance,
    BoundaryKind,
    ExonInterval,
    NearestBoundary,
    evaluate_boundaries,
    format_nearest,
    select_nearest,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BoundaryDistance",
    "BoundaryKind",
    "ExonInterval",
    "NearestBoundary",
    "evaluate_boundaries",
    "format_nearest",
    "select_nearest",
]
