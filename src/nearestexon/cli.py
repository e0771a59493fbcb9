"""Command-line interface for NearestExon.

This module provides the main entry point for the nearestexon CLI tool.
It uses Click to define commands for the two query modes.

Commands:
    nearest: Nearest exon boundary among exons found around each variant
    junction: Nearest exon junction boundary within overlapping transcripts

Example:
    $ nearestexon --help
    $ nearestexon nearest --gff genes.gff3 --vcf variants.vcf -o nearest.tsv
    $ nearestexon nearest --gff genes.gff3 -l chr1:1000 -p limit=3 -p max_range=50000
    $ nearestexon junction --gff genes.gff3 --vcf variants.vcf --scope exon
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator, Optional, TextIO

import click
from rich.console import Console

from nearestexon.config import OUTPUT_FORMATS, NearestExonConfig
from nearestexon.core.annotator import (
    JunctionScope,
    NearestExonAnnotator,
    NearestJunctionAnnotator,
)
from nearestexon.core.cache import QueryCache
from nearestexon.io.sources import load_exon_source
from nearestexon.io.vcf import read_variants
from nearestexon.utils.logging import ProgressLogger, Timer, get_logger, setup_logging
from nearestexon.utils.regions import VariantPoint, parse_location

# Status messages go to stderr so stdout carries only the table
console = Console(stderr=True)

logger = get_logger(__name__)

NO_VALUE = "-"


@click.group()
@click.version_option(prog_name="nearestexon")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Write debug log to this file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, log_file: Optional[Path]) -> None:
    """NearestExon: report the exon boundary nearest to each variant.

    More than one boundary is reported when boundaries are equidistant.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    verbosity = 0 if quiet else (2 if verbose else 1)
    setup_logging(verbosity=verbosity, log_file=log_file)


# =============================================================================
# Shared options
# =============================================================================


def _query_options(func: Callable) -> Callable:
    """Options shared by the nearest and junction commands."""
    options = [
        click.option(
            "--gff",
            "gff_path",
            type=click.Path(path_type=Path),
            required=True,
            help="GFF3 annotation with transcripts and exons (may be gzipped).",
        ),
        click.option(
            "--vcf",
            "vcf_path",
            type=click.Path(exists=True, path_type=Path),
            help="VCF/BCF file of variants.",
        ),
        click.option(
            "-l",
            "--location",
            "locations",
            type=str,
            multiple=True,
            help="Variant location (chr:pos or chr:start-end). Repeatable.",
        ),
        click.option(
            "-p",
            "--param",
            "params",
            type=str,
            multiple=True,
            help="Query parameter as key=value (limit, range, max_range). Repeatable.",
        ),
        click.option(
            "-c",
            "--config",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            help="TOML configuration file.",
        ),
        click.option(
            "--output-format",
            type=click.Choice(OUTPUT_FORMATS),
            default=None,
            help="Consumer format; 'vcf' uses '+' as the field separator (default: tab).",
        ),
        click.option(
            "--max-cache-entries",
            type=click.IntRange(min=1),
            default=None,
            help="Evict least-recently-used results beyond this many keys.",
        ),
        click.option(
            "-o",
            "--output",
            type=click.Path(path_type=Path),
            help="Output TSV file (default: stdout).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(
    params: tuple[str, ...],
    config_path: Optional[Path],
    output_format: Optional[str],
) -> NearestExonConfig:
    base = NearestExonConfig.load(config_path)
    return NearestExonConfig.from_params(params, output_format=output_format, base=base)


def _iter_variants(
    vcf_path: Optional[Path],
    locations: tuple[str, ...],
) -> Iterator[VariantPoint]:
    for location in locations:
        yield parse_location(location)
    if vcf_path is not None:
        yield from read_variants(vcf_path)


def _write_header(out: TextIO, header_info: dict[str, str], field_name: str) -> None:
    for name, description in header_info.items():
        out.write(f"## {name}: {description}\n")
    out.write(f"#Location\tFeature\t{field_name}\n")


def _print_summary(n_variants: int, n_annotated: int, cache: QueryCache, output: Optional[Path]) -> None:
    console.print("")
    console.print("[bold]Summary:[/bold]")
    console.print(f"  Variants:        {n_variants:,}")
    console.print(f"  With result:     {n_annotated:,}")
    console.print(f"  Cache entries:   {len(cache):,}")
    console.print(f"  Cache hits:      {cache.stats.hits:,}")
    if output is not None:
        console.print(f"[green]Wrote results:[/green] {output}")


# =============================================================================
# nearest command
# =============================================================================


@main.command("nearest")
@_query_options
@click.pass_context
def nearest(
    ctx: click.Context,
    gff_path: Path,
    vcf_path: Optional[Path],
    locations: tuple[str, ...],
    params: tuple[str, ...],
    config_path: Optional[Path],
    output_format: Optional[str],
    max_cache_entries: Optional[int],
    output: Optional[Path],
) -> None:
    """Report the nearest exon boundary among exons around each variant.

    Exons are found by searching outward from the variant, starting at
    'range' bp and widening up to 'max_range' bp until 'limit' exons are
    found.

    \b
    Output column format:
        ExonID|distance|start/end[,ExonID|distance|start/end...]

    \b
    Examples:
        $ nearestexon nearest --gff genes.gff3 --vcf variants.vcf -o out.tsv
        $ nearestexon nearest --gff genes.gff3 -l chr1:1000 -p limit=3
    """
    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    try:
        if not vcf_path and not locations:
            raise click.UsageError("Provide --vcf and/or at least one --location")

        config = _build_config(params, config_path, output_format)
        cache = QueryCache(separator=config.separator, max_entries=max_cache_entries)

        if not quiet:
            console.print(f"[blue]Annotation:[/blue] {gff_path}")
            console.print(
                f"[blue]Search:[/blue] limit={config.limit} range={config.range} "
                f"max_range={config.max_range}"
            )

        source = load_exon_source(gff_path)
        annotator = NearestExonAnnotator(source, config, cache)

        n_variants = 0
        n_annotated = 0
        progress = ProgressLogger(logger, description="Variants")

        with Timer("Annotation", logger), click.open_file(str(output or "-"), "w") as out:
            _write_header(out, annotator.header_info(), annotator.field_name)
            for variant in _iter_variants(vcf_path, locations):
                result = annotator.run(variant)
                value = result.get(annotator.field_name, NO_VALUE)
                out.write(f"{variant.location}\t{NO_VALUE}\t{value}\n")
                n_variants += 1
                n_annotated += bool(result)
                progress.update()
        progress.finish()

        if not quiet:
            _print_summary(n_variants, n_annotated, cache, output)

    except click.UsageError:
        raise
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)


# =============================================================================
# junction command
# =============================================================================


@main.command("junction")
@_query_options
@click.option(
    "-t",
    "--transcript",
    "transcripts",
    type=str,
    multiple=True,
    help="Transcript stable ID to query (default: all overlapping). Repeatable.",
)
@click.option(
    "--scope",
    type=click.Choice([s.value for s in JunctionScope]),
    default=JunctionScope.TRANSCRIPT.value,
    show_default=True,
    help="Measure every exon of the transcript, or only the exon containing the variant.",
)
@click.pass_context
def junction(
    ctx: click.Context,
    gff_path: Path,
    vcf_path: Optional[Path],
    locations: tuple[str, ...],
    params: tuple[str, ...],
    config_path: Optional[Path],
    output_format: Optional[str],
    max_cache_entries: Optional[int],
    output: Optional[Path],
    transcripts: tuple[str, ...],
    scope: str,
) -> None:
    """Report the nearest exon junction boundary within each transcript.

    Each variant is compared with the exons of every transcript it
    overlaps (or the transcripts given with --transcript). Results are
    cached per transcript for the whole run.

    \b
    Examples:
        $ nearestexon junction --gff genes.gff3 --vcf variants.vcf
        $ nearestexon junction --gff genes.gff3 -l 1:12000 -t ENST00000456328 --scope exon
    """
    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    try:
        if not vcf_path and not locations:
            raise click.UsageError("Provide --vcf and/or at least one --location")

        config = _build_config(params, config_path, output_format)
        cache = QueryCache(separator=config.separator, max_entries=max_cache_entries)

        if not quiet:
            console.print(f"[blue]Annotation:[/blue] {gff_path}")
            console.print(f"[blue]Scope:[/blue] {scope} (max_range={config.max_range})")

        source = load_exon_source(gff_path)
        annotator = NearestJunctionAnnotator(source, config, cache, scope=scope)

        n_variants = 0
        n_annotated = 0
        progress = ProgressLogger(logger, description="Variants")

        with Timer("Annotation", logger), click.open_file(str(output or "-"), "w") as out:
            _write_header(out, annotator.header_info(), annotator.field_name)
            for variant in _iter_variants(vcf_path, locations):
                if transcripts:
                    transcript_ids = list(transcripts)
                else:
                    transcript_ids = [
                        t.transcript_id
                        for t in source.transcripts_overlapping(
                            variant.seqid, variant.start, variant.end
                        )
                    ]

                if not transcript_ids:
                    out.write(f"{variant.location}\t{NO_VALUE}\t{NO_VALUE}\n")

                annotated = False
                for transcript_id in transcript_ids:
                    result = annotator.run(variant, transcript_id)
                    value = result.get(annotator.field_name, NO_VALUE)
                    out.write(f"{variant.location}\t{transcript_id}\t{value}\n")
                    annotated = annotated or bool(result)

                n_variants += 1
                n_annotated += annotated
                progress.update()
        progress.finish()

        if not quiet:
            _print_summary(n_variants, n_annotated, cache, output)

    except click.UsageError:
        raise
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
