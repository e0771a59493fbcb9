"""Variant input from VCF/BCF files.

Example:
    >>> from nearestexon.io.vcf import read_variants
    >>> for variant in read_variants("variants.vcf.gz"):
    ...     print(variant.location)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pysam

from nearestexon.utils.regions import VariantPoint

logger = logging.getLogger(__name__)


def read_variants(vcf_path: Path | str) -> Iterator[VariantPoint]:
    """Iterate over variant positions in a VCF/BCF file.

    ``start`` is the VCF POS and ``end`` the last reference base, both
    1-based inclusive.

    Args:
        vcf_path: Path to a VCF, bgzipped VCF or BCF file.

    Yields:
        VariantPoint for each record.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    path = Path(vcf_path)
    if not path.exists():
        raise FileNotFoundError(f"VCF file not found: {path}")

    n_records = 0
    with pysam.VariantFile(str(path)) as vcf:
        for record in vcf:
            n_records += 1
            yield VariantPoint(record.chrom, record.pos, max(record.stop, record.pos))

    logger.info(f"Read {n_records} variants from {path.name}")
