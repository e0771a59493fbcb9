"""Tests for nearest exon boundary evaluation and selection.

Tests cover:
- ExonInterval construction and distance helpers
- Per-exon boundary choice (start, end, start_end)
- Global minimum bounded by the maximum range
- Tie selection across exons
- Result serialization
"""

import pytest

from nearestexon.core.boundaries import (
    BoundaryDistance,
    BoundaryKind,
    ExonInterval,
    NearestBoundary,
    evaluate_boundaries,
    find_nearest_boundaries,
    format_nearest,
    nearest_boundary,
    select_nearest,
)


# =============================================================================
# Data Structure Tests
# =============================================================================


class TestExonInterval:
    """Tests for ExonInterval."""

    def test_creation(self) -> None:
        """Create an exon."""
        exon = ExonInterval("E1", 100, 200)
        assert exon.exon_id == "E1"
        assert exon.start == 100
        assert exon.end == 200
        assert exon.length == 101

    def test_single_base_exon(self) -> None:
        """Start equal to end is allowed."""
        exon = ExonInterval("E1", 100, 100)
        assert exon.length == 1

    def test_end_before_start_rejected(self) -> None:
        """End before start raises ValueError."""
        with pytest.raises(ValueError, match="must be >= start"):
            ExonInterval("E1", 200, 100)

    def test_immutable(self) -> None:
        """Exons cannot be modified."""
        exon = ExonInterval("E1", 100, 200)
        with pytest.raises(AttributeError):
            exon.start = 50  # type: ignore[misc]

    def test_distance_to(self) -> None:
        """Gap to an interval is zero on overlap."""
        exon = ExonInterval("E1", 100, 200)
        assert exon.distance_to(150, 150) == 0
        assert exon.distance_to(200, 210) == 0
        assert exon.distance_to(50, 60) == 40
        assert exon.distance_to(250, 250) == 50


class TestNearestBoundary:
    """Tests for NearestBoundary formatting."""

    def test_format_default_separator(self) -> None:
        result = NearestBoundary("E2", 5, BoundaryKind.END)
        assert result.format() == "E2|5|end"

    def test_format_vcf_separator(self) -> None:
        result = NearestBoundary("E1", 100, BoundaryKind.START_END)
        assert result.format("+") == "E1+100+start_end"


# =============================================================================
# Per-exon Boundary Tests
# =============================================================================


class TestNearestBoundaryOfExon:
    """Tests for the per-exon boundary choice."""

    def test_start_is_nearer(self) -> None:
        """Point closer to the start reports start."""
        boundary = nearest_boundary(110, ExonInterval("E1", 100, 200))
        assert boundary == BoundaryDistance(10, BoundaryKind.START)

    def test_end_is_nearer(self) -> None:
        """Point closer to the end reports end."""
        boundary = nearest_boundary(1000, ExonInterval("E1", 900, 1050))
        assert boundary == BoundaryDistance(50, BoundaryKind.END)

    def test_equidistant_is_start_end(self) -> None:
        """Equal distances collapse to a single start_end record."""
        boundary = nearest_boundary(1000, ExonInterval("E1", 900, 1100))
        assert boundary == BoundaryDistance(100, BoundaryKind.START_END)

    def test_point_upstream_of_exon(self) -> None:
        """Distances are absolute for points outside the exon."""
        boundary = nearest_boundary(50, ExonInterval("E1", 100, 200))
        assert boundary == BoundaryDistance(50, BoundaryKind.START)

    def test_point_on_boundary(self) -> None:
        """A point on a boundary has distance zero."""
        boundary = nearest_boundary(200, ExonInterval("E1", 100, 200))
        assert boundary == BoundaryDistance(0, BoundaryKind.END)

    def test_single_base_exon_is_start_end(self) -> None:
        """Start and end coincide, so they are always equidistant."""
        boundary = nearest_boundary(150, ExonInterval("E1", 100, 100))
        assert boundary.kind is BoundaryKind.START_END
        assert boundary.distance == 50


# =============================================================================
# Evaluation Tests
# =============================================================================


class TestEvaluateBoundaries:
    """Tests for evaluate_boundaries."""

    def test_concrete_scenario(self, overlapping_exons) -> None:
        """E1 end at 50 bp, E2 end at 5 bp; minimum is 5."""
        record, minimum = evaluate_boundaries(1000, overlapping_exons, 10000)

        assert record["E1"] == BoundaryDistance(50, BoundaryKind.END)
        assert record["E2"] == BoundaryDistance(5, BoundaryKind.END)
        assert minimum == 5

    def test_every_exon_is_recorded(self) -> None:
        """Exons farther than the current minimum are still recorded."""
        exons = [ExonInterval("NEAR", 995, 2000), ExonInterval("FAR", 5000, 6000)]
        record, minimum = evaluate_boundaries(1000, exons, 10000)

        assert set(record) == {"NEAR", "FAR"}
        assert record["FAR"].distance == 4000
        assert minimum == 5

    def test_empty_input(self) -> None:
        """No exons gives an empty record and the maximum range."""
        record, minimum = evaluate_boundaries(1000, [], 10000)
        assert record == {}
        assert minimum == 10000

    def test_minimum_bounded_by_max_range(self) -> None:
        """Distances beyond max_range leave the minimum at max_range."""
        record, minimum = evaluate_boundaries(1000, [ExonInterval("E1", 50000, 60000)], 100)
        assert record["E1"].distance == 49000
        assert minimum == 100

    def test_minimum_matches_smallest_recorded(self) -> None:
        """Minimum is min(max_range, smallest per-exon distance)."""
        exons = [
            ExonInterval("A", 100, 200),
            ExonInterval("B", 1200, 1300),
            ExonInterval("C", 700, 990),
        ]
        record, minimum = evaluate_boundaries(1000, exons, 10000)
        assert minimum == min(10000, *(b.distance for b in record.values()))
        assert minimum == 10

    def test_minimum_never_negative(self) -> None:
        """Distances are absolute values."""
        _, minimum = evaluate_boundaries(100, [ExonInterval("E1", 100, 100)], 10)
        assert minimum == 0

    def test_duplicate_exon_keeps_smaller_distance(self) -> None:
        """The same exon id seen twice keeps its smaller distance."""
        exons = [ExonInterval("E1", 500, 600), ExonInterval("E1", 990, 1500)]
        record, minimum = evaluate_boundaries(1000, exons, 10000)
        assert record["E1"] == BoundaryDistance(10, BoundaryKind.START)
        assert minimum == 10

    def test_accepts_iterator(self, overlapping_exons) -> None:
        """Exons may be given as any iterable."""
        record, minimum = evaluate_boundaries(1000, iter(overlapping_exons), 10000)
        assert len(record) == 2
        assert minimum == 5


# =============================================================================
# Selection Tests
# =============================================================================


class TestSelectNearest:
    """Tests for select_nearest."""

    def test_concrete_scenario(self, overlapping_exons) -> None:
        """Only E2 lies at the minimum."""
        record, minimum = evaluate_boundaries(1000, overlapping_exons, 10000)
        assert select_nearest(record, minimum) == [
            NearestBoundary("E2", 5, BoundaryKind.END)
        ]

    def test_tie_within_exon(self) -> None:
        """Equidistant boundaries of one exon report start_end."""
        record, minimum = evaluate_boundaries(1000, [ExonInterval("E1", 900, 1100)], 10000)
        assert select_nearest(record, minimum) == [
            NearestBoundary("E1", 100, BoundaryKind.START_END)
        ]

    def test_tie_across_exons(self) -> None:
        """Every exon at the minimum is reported."""
        exons = [
            ExonInterval("UP", 500, 990),
            ExonInterval("DOWN", 1010, 1500),
            ExonInterval("FAR", 3000, 4000),
        ]
        record, minimum = evaluate_boundaries(1000, exons, 10000)
        results = select_nearest(record, minimum)

        assert minimum == 10
        assert sorted(results) == sorted([
            NearestBoundary("UP", 10, BoundaryKind.END),
            NearestBoundary("DOWN", 10, BoundaryKind.START),
        ])

    def test_out_of_range_is_empty(self) -> None:
        """No exon reaches the max_range sentinel exactly."""
        record, minimum = evaluate_boundaries(1000, [ExonInterval("E1", 50000, 60000)], 100)
        assert select_nearest(record, minimum) == []

    def test_exon_exactly_at_max_range(self) -> None:
        """An exon exactly max_range away is reported."""
        record, minimum = evaluate_boundaries(1000, [ExonInterval("E1", 1100, 2000)], 100)
        assert select_nearest(record, minimum) == [
            NearestBoundary("E1", 100, BoundaryKind.START)
        ]

    def test_empty_record(self) -> None:
        assert select_nearest({}, 10000) == []

    def test_membership_matches_minimum(self) -> None:
        """An exon is selected iff its recorded distance equals the minimum."""
        exons = [ExonInterval(f"E{i}", 1000 + 7 * i, 1000 + 7 * i + 3) for i in range(1, 6)]
        exons.append(ExonInterval("TIE", 993, 993))
        record, minimum = evaluate_boundaries(1000, exons, 10000)
        selected = {r.exon_id for r in select_nearest(record, minimum)}

        expected = {eid for eid, b in record.items() if b.distance == minimum}
        assert selected == expected == {"E1", "TIE"}


# =============================================================================
# Serialization Tests
# =============================================================================


class TestFormatNearest:
    """Tests for format_nearest."""

    def test_single_result(self) -> None:
        results = [NearestBoundary("E2", 5, BoundaryKind.END)]
        assert format_nearest(results) == "E2|5|end"

    def test_multiple_results_joined_with_comma(self) -> None:
        results = [
            NearestBoundary("UP", 10, BoundaryKind.END),
            NearestBoundary("DOWN", 10, BoundaryKind.START),
        ]
        assert format_nearest(results, "+") == "UP+10+end,DOWN+10+start"

    def test_empty_is_none(self) -> None:
        assert format_nearest([]) is None

    def test_find_nearest_boundaries(self, overlapping_exons) -> None:
        """Evaluation and selection in one call."""
        results = find_nearest_boundaries(1000, overlapping_exons, 10000)
        assert format_nearest(results, "|") == "E2|5|end"
