"""Exon lookup for nearest boundary queries.

An ExonSource answers the two questions the annotators ask:

- Transcript lookup: the ordered exons of a transcript
- Outward search: exons around a variant, searching an expanding window
  from an initial range up to a maximum range until enough are found

Example:
    >>> from nearestexon.io.sources import load_exon_source
    >>> source = load_exon_source("annotations.gff3")
    >>> hits = source.fetch_all_by_outward_search("chr1", 1000, 1000, limit=3)
    >>> [hit.exon.exon_id for hit in hits]
    ['E2', 'E1', 'E5']
"""

from __future__ import annotations

import bisect
import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterable, NamedTuple

from nearestexon.config import DEFAULT_LIMIT, DEFAULT_MAX_RANGE, DEFAULT_RANGE
from nearestexon.core.boundaries import ExonInterval
from nearestexon.io.gff import GFF3Parser, TranscriptModel, strip_id_prefix

logger = logging.getLogger(__name__)


class ExonSourceUnavailableError(RuntimeError):
    """Raised when exon annotation cannot be reached or read."""

    pass


class TranscriptNotFoundError(LookupError):
    """Raised when a transcript is not present in the exon source."""

    pass


class OutwardHit(NamedTuple):
    """An exon found by outward search.

    Attributes:
        exon: The exon interval.
        distance: Gap in bp between exon and variant (0 if overlapping),
            the rank by which hits are ordered.
    """

    exon: ExonInterval
    distance: int


class ExonSource:
    """In-memory index of transcripts and exons.

    Exons shared between transcripts are indexed once per stable ID.

    Attributes:
        transcript_count: Number of indexed transcripts.
        exon_count: Number of distinct exons.
    """

    def __init__(self, transcripts: Iterable[TranscriptModel]) -> None:
        """Build the index.

        Each transcript is indexed under its stable ID and its GFF3 ID, both
        with any "transcript:" prefix removed.

        Args:
            transcripts: Transcripts with their exons.
        """
        self._transcripts: dict[str, list[TranscriptModel]] = defaultdict(list)
        self._transcripts_by_seqid: dict[str, list[TranscriptModel]] = defaultdict(list)
        n_transcripts = 0

        exons_by_seqid: dict[str, dict[str, ExonInterval]] = defaultdict(dict)
        for transcript in transcripts:
            n_transcripts += 1
            duplicates = [
                t for t in self._transcripts.get(transcript.transcript_id, [])
                if t.transcript_id == transcript.transcript_id
            ]
            if duplicates:
                others = ", ".join(t.seqid for t in duplicates)
                logger.warning(
                    f"Transcript {transcript.transcript_id} on {transcript.seqid} "
                    f"duplicates an ID already seen on {others}"
                )
            keys = {transcript.transcript_id, strip_id_prefix(transcript.gff_id)} - {""}
            for key in keys:
                self._transcripts[key].append(transcript)
            self._transcripts_by_seqid[transcript.seqid].append(transcript)
            for exon in transcript.exons:
                exons_by_seqid[transcript.seqid].setdefault(exon.exon_id, exon)
        self._n_transcripts = n_transcripts

        # Per seqid: exons sorted by start, their starts, and the longest exon
        self._exons: dict[str, list[ExonInterval]] = {}
        self._starts: dict[str, list[int]] = {}
        self._max_length: dict[str, int] = {}
        for seqid, by_id in exons_by_seqid.items():
            ordered = sorted(by_id.values(), key=lambda e: (e.start, e.end, e.exon_id))
            self._exons[seqid] = ordered
            self._starts[seqid] = [e.start for e in ordered]
            self._max_length[seqid] = max(e.length for e in ordered)

        logger.debug(
            f"Indexed {self.transcript_count} transcripts, {self.exon_count} exons"
        )

    @property
    def transcript_count(self) -> int:
        """Number of indexed transcripts."""
        return self._n_transcripts

    @property
    def exon_count(self) -> int:
        """Number of distinct exons."""
        return sum(len(exons) for exons in self._exons.values())

    # -------------------------------------------------------------------------
    # Transcript lookup
    # -------------------------------------------------------------------------

    def get_transcript(self, transcript_id: str, seqid: str | None = None) -> TranscriptModel:
        """Get a transcript with its ordered exons.

        Args:
            transcript_id: Stable ID or GFF3 ID, with or without a
                "transcript:" prefix.
            seqid: Preferred scaffold when several transcripts share the ID.

        Returns:
            The TranscriptModel.

        Raises:
            TranscriptNotFoundError: If the transcript is unknown.
        """
        candidates = self._transcripts.get(strip_id_prefix(transcript_id))
        if not candidates:
            raise TranscriptNotFoundError(f"Transcript not found: {transcript_id}")
        if seqid is not None:
            for transcript in candidates:
                if transcript.seqid == seqid:
                    return transcript
        return candidates[0]

    def transcripts_overlapping(self, seqid: str, start: int, end: int) -> list[TranscriptModel]:
        """Get transcripts whose span overlaps an interval.

        Args:
            seqid: Scaffold name.
            start: Start position (1-based, inclusive).
            end: End position (1-based, inclusive).

        Returns:
            Overlapping transcripts in file order.
        """
        return [t for t in self._transcripts_by_seqid.get(seqid, []) if t.overlaps(start, end)]

    # -------------------------------------------------------------------------
    # Outward search
    # -------------------------------------------------------------------------

    def exons_in_window(self, seqid: str, start: int, end: int) -> list[ExonInterval]:
        """Get exons overlapping a window.

        Args:
            seqid: Scaffold name.
            start: Window start (1-based, inclusive).
            end: Window end (1-based, inclusive).

        Returns:
            Overlapping exons sorted by start.
        """
        exons = self._exons.get(seqid)
        if not exons:
            return []

        starts = self._starts[seqid]
        lo = bisect.bisect_left(starts, start - self._max_length[seqid] + 1)
        hi = bisect.bisect_right(starts, end)
        return [exon for exon in exons[lo:hi] if exon.overlaps(start, end)]

    def fetch_all_by_outward_search(
        self,
        seqid: str,
        start: int,
        end: int,
        limit: int = DEFAULT_LIMIT,
        range: int = DEFAULT_RANGE,
        max_range: int = DEFAULT_MAX_RANGE,
    ) -> list[OutwardHit]:
        """Find exons near a variant by widening the search window.

        Searches ``range`` bp either side of the variant; while fewer than
        ``limit`` exons are found, the window is doubled, up to ``max_range``.

        Args:
            seqid: Scaffold name.
            start: Variant start (1-based, inclusive).
            end: Variant end (1-based, inclusive).
            limit: Maximum number of exons to return.
            range: Initial search range in bp.
            max_range: Maximum search range in bp.

        Returns:
            Up to ``limit`` hits ordered by distance, then position.
        """
        if limit < 1:
            return []

        search_range = min(range, max_range)
        while True:
            exons = self.exons_in_window(seqid, start - search_range, end + search_range)
            if len(exons) >= limit or search_range >= max_range:
                break
            search_range = min(max(search_range * 2, 1), max_range)

        hits = [OutwardHit(exon, exon.distance_to(start, end)) for exon in exons]
        hits.sort(key=lambda hit: (hit.distance, hit.exon.start, hit.exon.exon_id))

        logger.debug(
            f"Outward search at {seqid}:{start}-{end} found {len(hits)} exons "
            f"within {search_range} bp"
        )
        return hits[:limit]


def load_exon_source(gff_path: Path | str) -> ExonSource:
    """Build an ExonSource from a GFF3 annotation file.

    Args:
        gff_path: Path to GFF3 file (optionally gzipped).

    Returns:
        Indexed ExonSource.

    Raises:
        ExonSourceUnavailableError: If the file is missing or unreadable.
    """
    try:
        parser = GFF3Parser(gff_path)
        return ExonSource(parser.iter_transcripts())
    except (OSError, UnicodeDecodeError) as e:
        raise ExonSourceUnavailableError(f"Could not read exon annotation: {e}") from e
