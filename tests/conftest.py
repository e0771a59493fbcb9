"""Pytest configuration and shared fixtures for NearestExon tests.

Fixtures are organized by category:

- Exon fixtures: Exon lists for boundary evaluation
- Annotation fixtures: Synthetic GFF3 files and exon sources
"""

from pathlib import Path

import pytest

from nearestexon.core.boundaries import ExonInterval
from nearestexon.io.sources import ExonSource, load_exon_source


# =============================================================================
# Exon Fixtures
# =============================================================================


@pytest.fixture
def overlapping_exons() -> list[ExonInterval]:
    """Two exons near position 1000; E2's end is 5 bp away."""
    return [
        ExonInterval("E1", 900, 1050),
        ExonInterval("E2", 500, 995),
    ]


# =============================================================================
# Annotation Fixtures
# =============================================================================

# Layout on chr1 (1-based, inclusive):
#   T1 (+): T1E1 100-300, T1E2 500-995, T1E3 2000-3000 (rank attributes)
#   T2 (-): T2E1 4000-5000, T2E2 900-1050 (no rank, ordered by strand)
#   T3 (+): T1E2 500-995 (exon shared with T1)
# chr2:
#   T4 (+): X1 10000-10200 (exon ID only, no exon_id)
SYNTHETIC_GFF3 = """\
##gff-version 3
##sequence-region chr1 1 10000
chr1\ttest\tgene\t100\t5000\t.\t+\t.\tID=gene:G1;gene_id=G1
chr1\ttest\tmRNA\t100\t3000\t.\t+\t.\tID=transcript:T1;Parent=gene:G1;transcript_id=T1
chr1\ttest\texon\t100\t300\t.\t+\t.\tParent=transcript:T1;exon_id=T1E1;rank=1
chr1\ttest\texon\t500\t995\t.\t+\t.\tParent=transcript:T1;exon_id=T1E2;rank=2
chr1\ttest\texon\t2000\t3000\t.\t+\t.\tParent=transcript:T1;exon_id=T1E3;rank=3
chr1\ttest\tlnc_RNA\t900\t5000\t.\t-\t.\tID=T2;Parent=gene:G1
chr1\ttest\texon\t900\t1050\t.\t-\t.\tParent=T2;exon_id=T2E2
chr1\ttest\texon\t4000\t5000\t.\t-\t.\tParent=T2;exon_id=T2E1
chr1\ttest\tmRNA\t500\t995\t.\t+\t.\tID=transcript:T3;Parent=gene:G1;transcript_id=T3
chr1\ttest\texon\t500\t995\t.\t+\t.\tParent=transcript:T3;exon_id=T1E2;rank=1
chr2\ttest\tgene\t10000\t10200\t.\t+\t.\tID=gene:G2
chr2\ttest\tmRNA\t10000\t10200\t.\t+\t.\tID=T4;Parent=gene:G2
chr2\ttest\texon\t10000\t10200\t.\t+\t.\tID=X1;Parent=T4
"""


@pytest.fixture
def synthetic_gff_text() -> str:
    """Raw text of the synthetic GFF3 annotation."""
    return SYNTHETIC_GFF3


@pytest.fixture
def synthetic_gff(tmp_path: Path, synthetic_gff_text: str) -> Path:
    """Write the synthetic GFF3 annotation to a temporary file."""
    gff_path = tmp_path / "annotation.gff3"
    gff_path.write_text(synthetic_gff_text)
    return gff_path


@pytest.fixture
def exon_source(synthetic_gff: Path) -> ExonSource:
    """ExonSource built from the synthetic annotation."""
    return load_exon_source(synthetic_gff)
