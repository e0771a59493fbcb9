"""Variant annotators reporting the nearest exon boundary.

Two annotators share the boundary evaluation core and differ in where the
candidate exons come from:

- NearestExonAnnotator: exons found by outward search around the variant,
  results cached per variant location.
- NearestJunctionAnnotator: exons of a transcript overlapping the variant,
  results cached per transcript stable ID.

Example:
    >>> from nearestexon.config import NearestExonConfig
    >>> from nearestexon.io.sources import load_exon_source
    >>> from nearestexon.utils.regions import parse_location
    >>> source = load_exon_source("annotations.gff3")
    >>> annotator = NearestExonAnnotator(source, NearestExonConfig(limit=3))
    >>> annotator.run(parse_location("chr1:1000"))
    {'NearestExon': 'E2|5|end'}
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from nearestexon.config import NearestExonConfig
from nearestexon.core.boundaries import NearestBoundary, find_nearest_boundaries
from nearestexon.core.cache import QueryCache
from nearestexon.io.sources import ExonSourceUnavailableError

if TYPE_CHECKING:
    from nearestexon.io.sources import ExonSource
    from nearestexon.utils.regions import VariantPoint

logger = logging.getLogger(__name__)

HEADER_FIELDS = ("ExonID", "distance", "start/end")


class JunctionScope(Enum):
    """Which exons of a transcript are measured in junction mode."""

    TRANSCRIPT = "transcript"  # Every exon of the transcript
    EXON = "exon"  # Only the exon overlapping the variant


class _BaseAnnotator:
    """Shared configuration, cache and header handling."""

    field_name = ""
    description = ""

    def __init__(
        self,
        source: ExonSource | None,
        config: NearestExonConfig | None = None,
        cache: QueryCache | None = None,
    ) -> None:
        """Initialize the annotator.

        Args:
            source: Exon source used for lookups.
            config: Query configuration. Defaults are used if None.
            cache: Result cache. A new session cache using the configured
                separator is created if None.
        """
        self.source = source
        self.config = config or NearestExonConfig()
        self.cache = cache if cache is not None else QueryCache(separator=self.config.separator)

    def header_info(self) -> dict[str, str]:
        """Describe the output field.

        Returns:
            Mapping of field name to its format description.
        """
        header = f"{self.description}. Format:" + self.config.separator.join(HEADER_FIELDS)
        return {self.field_name: header}

    def _require_source(self) -> ExonSource:
        if self.source is None:
            raise ExonSourceUnavailableError(
                f"{self.field_name}: no exon source available for lookup"
            )
        return self.source

    def _as_output(self, value: str | None) -> dict[str, str]:
        return {self.field_name: value} if value else {}


class NearestExonAnnotator(_BaseAnnotator):
    """Report the nearest exon boundary among exons around a variant.

    Candidate exons come from an outward search limited by ``limit`` and
    ``max_range``. Results are cached per variant location.
    """

    field_name = "NearestExon"
    description = "Nearest Exon"

    def run(self, variant: VariantPoint) -> dict[str, str]:
        """Annotate one variant.

        Args:
            variant: Variant position.

        Returns:
            ``{"NearestExon": "ID|dist|kind[,...]"}`` or ``{}`` when no
            exon boundary lies within range.

        Raises:
            ExonSourceUnavailableError: If no exon source is configured.
        """
        value = self.cache.lookup_or_compute(
            variant.location,
            lambda: self._compute(variant),
        )
        return self._as_output(value)

    def _compute(self, variant: VariantPoint) -> list[NearestBoundary]:
        source = self._require_source()
        hits = source.fetch_all_by_outward_search(
            variant.seqid,
            variant.start,
            variant.end,
            limit=self.config.limit,
            range=self.config.range,
            max_range=self.config.max_range,
        )
        exons = [hit.exon for hit in hits]
        return find_nearest_boundaries(variant.start, exons, self.config.max_range)


class NearestJunctionAnnotator(_BaseAnnotator):
    """Report the nearest exon junction boundary within a transcript.

    Results are cached per transcript stable ID, so within one session the
    first variant seen on a transcript determines the result for every
    later variant on that transcript.

    Attributes:
        scope: TRANSCRIPT measures every exon of the transcript; EXON
            measures only the exon the variant falls in, and reports nothing
            for variants outside exons.
    """

    field_name = "NearestExonJB"
    description = "Nearest Exon Junction Boundary"

    def __init__(
        self,
        source: ExonSource | None,
        config: NearestExonConfig | None = None,
        cache: QueryCache | None = None,
        scope: JunctionScope | str = JunctionScope.TRANSCRIPT,
    ) -> None:
        super().__init__(source, config, cache)
        self.scope = JunctionScope(scope)

    def run(
        self,
        variant: VariantPoint,
        transcript_id: str,
        exon_number: str | None = None,
    ) -> dict[str, str]:
        """Annotate one variant against one transcript.

        Args:
            variant: Variant position.
            transcript_id: Stable ID of the transcript. When the ID is
                shared by transcripts on several scaffolds, the one on the
                variant's scaffold is used.
            exon_number: ``k/n`` descriptor of the exon overlapping the
                variant. Computed from the transcript if None.

        Returns:
            ``{"NearestExonJB": "ID|dist|kind[,...]"}`` or ``{}``.

        Raises:
            ExonSourceUnavailableError: If no exon source is configured.
            TranscriptNotFoundError: If the transcript is unknown.
            ValueError: If the exon number is malformed or out of range.
        """
        value = self.cache.lookup_or_compute(
            transcript_id,
            lambda: self._compute(variant, transcript_id, exon_number),
        )
        return self._as_output(value)

    def _compute(
        self,
        variant: VariantPoint,
        transcript_id: str,
        exon_number: str | None,
    ) -> list[NearestBoundary]:
        transcript = self._require_source().get_transcript(transcript_id, seqid=variant.seqid)

        if self.scope is JunctionScope.TRANSCRIPT:
            exons = transcript.exons
        else:
            if exon_number is None:
                exon_number = transcript.exon_number(variant.start, variant.end)
            if exon_number is None:
                logger.debug(f"{variant.location} is not within an exon of {transcript_id}")
                return []
            exons = [transcript.exons[parse_exon_number(exon_number, transcript.n_exons) - 1]]

        return find_nearest_boundaries(variant.start, exons, self.config.max_range)


def parse_exon_number(exon_number: str, n_exons: int) -> int:
    """Parse a ``k/n`` exon number descriptor.

    Args:
        exon_number: Descriptor such as "3/10".
        n_exons: Number of exons in the transcript.

    Returns:
        One-based exon index ``k``.

    Raises:
        ValueError: If the descriptor is malformed or out of range.
    """
    index, _, _total = exon_number.partition("/")
    try:
        k = int(index)
    except ValueError:
        raise ValueError(f"Invalid exon number: '{exon_number}'") from None
    if not 1 <= k <= n_exons:
        raise ValueError(f"Exon number {exon_number} out of range for {n_exons} exons")
    return k
