"""Input handlers for NearestExon.

- GFF3: transcript and exon annotation
- Exon sources: transcript lookup and outward exon search
- VCF: variant positions

Example:
    >>> from nearestexon.io import load_exon_source, read_variants
    >>> source = load_exon_source("annotations.gff3")
    >>> variants = list(read_variants("variants.vcf"))
"""

from nearestexon.io.gff import GFF3Parser, TranscriptModel
from nearestexon.io.sources import (
    ExonSource,
    ExonSourceUnavailableError,
    OutwardHit,
    TranscriptNotFoundError,
    load_exon_source,
)
from nearestexon.io.vcf import read_variants

__all__: list[str] = [
    "ExonSource",
    "ExonSourceUnavailableError",
    "GFF3Parser",
    "OutwardHit",
    "TranscriptModel",
    "TranscriptNotFoundError",
    "load_exon_source",
    "read_variants",
]
