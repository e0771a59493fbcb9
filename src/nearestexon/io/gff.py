"""GFF3 annotation parsing.

Reads transcripts and their exons from a GFF3 file (plain or gzipped),
such as the Ensembl GFF3 releases. Any feature referenced as the Parent of
an exon is treated as a transcript, so mRNA, lnc_RNA, pseudogenic
transcripts and the like are all picked up.

Coordinates are kept exactly as written in the file (1-based, inclusive).

Example:
    >>> from nearestexon.io.gff import GFF3Parser
    >>> parser = GFF3Parser("Homo_sapiens.GRCh38.gff3.gz")
    >>> for transcript in parser.iter_transcripts():
    ...     print(transcript.transcript_id, transcript.n_exons)
"""

from __future__ import annotations

import gzip
import logging
from collections import defaultdict
from pathlib import Path
from typing import IO, Any, Iterator

import attrs

from nearestexon.core.boundaries import ExonInterval

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF3 column indices
COL_SEQID = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_SCORE = 5
COL_STRAND = 6
COL_PHASE = 7
COL_ATTRIBUTES = 8

FEATURE_EXON = "exon"

# Ensembl prefixes IDs with the feature class
TRANSCRIPT_ID_PREFIX = "transcript:"


# =============================================================================
# Data Models
# =============================================================================


@attrs.define(slots=True)
class TranscriptModel:
    """A transcript with its exons in transcript order.

    Attributes:
        transcript_id: Stable transcript identifier.
        seqid: Scaffold/chromosome name.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        strand: Strand (+ or -).
        parent_gene: Parent gene ID.
        exons: Exons ordered 5' to 3' along the transcript.
        attributes: Additional attributes from GFF3.
        gff_id: GFF3 ID of the transcript feature, when read from a file.
    """

    transcript_id: str
    seqid: str
    start: int
    end: int
    strand: str = "+"
    parent_gene: str = ""
    exons: list[ExonInterval] = attrs.Factory(list)
    attributes: dict[str, str] = attrs.Factory(dict)
    gff_id: str = ""

    @property
    def n_exons(self) -> int:
        """Number of exons."""
        return len(self.exons)

    def overlaps(self, start: int, end: int) -> bool:
        """Check if the transcript span overlaps an interval."""
        return self.start <= end and start <= self.end

    def exon_number(self, start: int, end: int) -> str | None:
        """Get the ``k/n`` number of the exon overlapping an interval.

        Args:
            start: Interval start (1-based, inclusive).
            end: Interval end (1-based, inclusive).

        Returns:
            One-based exon number and exon count, e.g. "3/10", or None
            when the interval does not touch any exon.
        """
        for number, exon in enumerate(self.exons, 1):
            if exon.overlaps(start, end):
                return f"{number}/{self.n_exons}"
        return None


# =============================================================================
# Attribute Parsing
# =============================================================================


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse GFF3 attribute string into dictionary.

    Args:
        attr_string: Semicolon-separated key=value pairs.

    Returns:
        Dictionary of attribute key-value pairs.
    """
    attributes: dict[str, str] = {}
    if not attr_string or attr_string == ".":
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item:
            continue

        if "=" in item:
            key, value = item.split("=", 1)
            # URL decode
            value = value.replace("%3B", ";").replace("%3D", "=").replace("%26", "&")
            value = value.replace("%2C", ",")
            attributes[key] = value

    return attributes


def strip_id_prefix(feature_id: str) -> str:
    """Remove an Ensembl ``transcript:`` prefix from an ID."""
    if feature_id.startswith(TRANSCRIPT_ID_PREFIX):
        return feature_id[len(TRANSCRIPT_ID_PREFIX) :]
    return feature_id


# =============================================================================
# GFF3 Parser
# =============================================================================


class GFF3Parser:
    """Parse a GFF3 file into transcripts with ordered exons.

    Attributes:
        path: Path to the GFF3 file.

    Example:
        >>> parser = GFF3Parser("annotations.gff3")
        >>> transcripts = {t.transcript_id: t for t in parser.iter_transcripts()}
        >>> transcripts["ENST00000456328"].exon_number(12000, 12000)
        '1/3'
    """

    def __init__(self, gff_path: Path | str) -> None:
        """Initialize the parser.

        Args:
            gff_path: Path to GFF3 file (optionally gzipped).

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        self.path = Path(gff_path)
        if not self.path.exists():
            raise FileNotFoundError(f"GFF3 file not found: {self.path}")

        self._transcripts: dict[str, TranscriptModel] | None = None

    def _open(self) -> IO[str]:
        if self.path.suffix == ".gz":
            return gzip.open(self.path, "rt")
        return open(self.path)

    def _parse_line(self, line: str) -> dict[str, Any] | None:
        """Parse a single GFF3 line.

        Args:
            line: Raw GFF3 line.

        Returns:
            Parsed feature dictionary or None for comments/empty.
        """
        line = line.strip()
        if not line or line.startswith("#"):
            return None

        parts = line.split("\t")
        if len(parts) < 9:
            logger.warning(f"Malformed GFF3 line (expected 9 columns): {line[:50]}...")
            return None

        try:
            feature = {
                "seqid": parts[COL_SEQID],
                "source": parts[COL_SOURCE],
                "type": parts[COL_TYPE],
                "start": int(parts[COL_START]),
                "end": int(parts[COL_END]),
                "strand": parts[COL_STRAND] if parts[COL_STRAND] in ("+", "-") else "+",
                "attributes": parse_attributes(parts[COL_ATTRIBUTES]),
            }
            return feature

        except (ValueError, IndexError) as e:
            logger.warning(f"Error parsing GFF3 line: {e}")
            return None

    def _build_transcripts(self) -> dict[str, TranscriptModel]:
        """Build transcript models from the GFF3 file."""
        parent_features: dict[str, dict] = {}
        exon_features: dict[str, list[dict]] = defaultdict(list)

        with self._open() as f:
            for line in f:
                feature = self._parse_line(line)
                if feature is None:
                    continue

                attrs_ = feature["attributes"]
                if feature["type"] == FEATURE_EXON:
                    parent = attrs_.get("Parent", "")
                    for parent_id in parent.split(","):
                        if parent_id:
                            exon_features[parent_id].append(feature)
                elif "ID" in attrs_:
                    parent_features[attrs_["ID"]] = feature

        transcripts: dict[str, TranscriptModel] = {}
        for parent_id, exons in exon_features.items():
            tf = parent_features.get(parent_id)
            if tf is None:
                logger.warning(f"Exons reference unknown parent: {parent_id}")
                continue

            transcript_id = tf["attributes"].get("transcript_id", strip_id_prefix(parent_id))
            ordered = self._order_exons(transcript_id, tf["strand"], exons)
            if not ordered:
                continue
            transcripts[parent_id] = TranscriptModel(
                transcript_id=transcript_id,
                seqid=tf["seqid"],
                start=tf["start"],
                end=tf["end"],
                strand=tf["strand"],
                parent_gene=tf["attributes"].get("Parent", ""),
                exons=ordered,
                attributes=tf["attributes"],
                gff_id=parent_id,
            )

        logger.info(f"Parsed {len(transcripts)} transcripts from {self.path.name}")
        return transcripts

    @staticmethod
    def _order_exons(
        transcript_id: str,
        strand: str,
        features: list[dict],
    ) -> list[ExonInterval]:
        """Order exon features 5' to 3' and convert to ExonInterval.

        The Ensembl ``rank`` attribute is used when every exon carries one;
        otherwise exons are sorted by position and reversed on the minus
        strand. Exons ending before they start are logged and skipped.
        """
        valid = []
        for feature in features:
            if feature["end"] < feature["start"]:
                logger.warning(
                    f"Skipping exon of {transcript_id} with end before start: "
                    f"{feature['seqid']}:{feature['start']}-{feature['end']}"
                )
                continue
            valid.append(feature)
        features = valid

        ranks = [f["attributes"].get("rank") for f in features]
        if all(rank is not None and rank.isdigit() for rank in ranks):
            ordered = sorted(features, key=lambda f: int(f["attributes"]["rank"]))
        else:
            ordered = sorted(features, key=lambda f: (f["start"], f["end"]))
            if strand == "-":
                ordered.reverse()

        exons = []
        for number, feature in enumerate(ordered, 1):
            attrs_ = feature["attributes"]
            exon_id = (
                attrs_.get("exon_id")
                or attrs_.get("ID")
                or attrs_.get("Name")
                or f"{transcript_id}.exon{number}"
            )
            exons.append(ExonInterval(exon_id, feature["start"], feature["end"]))
        return exons

    def _ensure_parsed(self) -> None:
        if self._transcripts is None:
            self._transcripts = self._build_transcripts()

    def iter_transcripts(self) -> Iterator[TranscriptModel]:
        """Iterate over transcripts.

        Yields:
            TranscriptModel objects.
        """
        self._ensure_parsed()
        assert self._transcripts is not None
        yield from self._transcripts.values()

