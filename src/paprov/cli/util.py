"""
Utility CLI commands.

General-purpose dataset tools:
  keep-ind   - Keep selected individuals
  subsample  - Subsample loci
  convert    - Export to STRUCTURE format
"""

import click
from pathlib import Path
from typing import Optional

from paprov.cli.utils import (
    AliasedGroup,
    echo_success,
    echo_error,
    echo_info,
    parse_id_list,
)


@click.group(cls=AliasedGroup)
@click.pass_context
def util(ctx: click.Context) -> None:
    """
    Utility tools for genotype datasets.

    \b
    Available commands:
      keep-ind   - Remove all but the listed individuals
      subsample  - Keep n loci, at random or by AvgPIC
      convert    - Export to STRUCTURE format
    """
    pass


@util.command("keep-ind")
@click.option(
    "-i", "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Genotype TSV or VCF file.",
)
@click.option(
    "-o", "--output",
    required=True,
    type=click.Path(path_type=Path),
    help="Output genotype TSV file.",
)
@click.option(
    "--ids",
    type=str,
    help="Comma-separated individual labels to keep.",
)
@click.option(
    "--ids_file",
    type=click.Path(exists=True, path_type=Path),
    help="File with one individual label per line.",
)
@click.option(
    "--popmap",
    type=click.Path(exists=True, path_type=Path),
    help="Two-column sample/population map.",
)
@click.option(
    "--loc_metrics",
    type=click.Path(exists=True, path_type=Path),
    help="Locus metrics TSV, one row per locus.",
)
@click.option(
    "--recalc/--no_recalc",
    default=False,
    help="Recalculate locus metrics (default: no).",
)
@click.option(
    "--mono_rm/--no_mono_rm",
    default=False,
    help="Remove resulting monomorphic loci (default: no).",
)
@click.option(
    "--verbosity",
    default=2,
    type=int,
    help="0 silent, 1 begin/end, 2 progress, 3 summary (default: 2).",
)
@click.pass_context
def keep_ind(
    ctx: click.Context,
    input_path: Path,
    output: Path,
    ids: Optional[str],
    ids_file: Optional[Path],
    popmap: Optional[Path],
    loc_metrics: Optional[Path],
    recalc: bool,
    mono_rm: bool,
    verbosity: int,
) -> None:
    """
    Remove all but the specified individuals.

    Listed individuals that are not in the dataset are ignored with a warning.
    """
    from paprov.core.reporter import Reporter
    from paprov.util.keep import read_id_list, run_keep

    ind_list = parse_id_list(ids)
    if ids_file:
        id_result = read_id_list(ids_file)
        if id_result.is_err():
            echo_error(id_result.unwrap_err())
            raise SystemExit(1)
        ind_list.extend(id_result.unwrap())

    if not ind_list:
        echo_error("No individuals listed to keep (use --ids or --ids_file)")
        raise SystemExit(1)

    quiet = (ctx.obj or {}).get("quiet", False)
    result = run_keep(
        input_path=input_path,
        output_path=output,
        ind_list=ind_list,
        popmap_path=popmap,
        loc_metrics_path=loc_metrics,
        recalc=recalc,
        mono_rm=mono_rm,
        reporter=Reporter(verbosity=0 if quiet else verbosity),
    )

    if result.is_err():
        echo_error(f"Keep failed: {result.unwrap_err()}")
        raise SystemExit(1)

    stats = result.unwrap()
    echo_success(
        f"Kept {stats['kept_individuals']} of {stats['input_individuals']} individuals, "
        f"{stats['kept_loci']} loci"
    )
    echo_info(f"Output: {stats['output_file']}")


@util.command()
@click.option(
    "-i", "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Genotype TSV or VCF file.",
)
@click.option(
    "-o", "--output",
    required=True,
    type=click.Path(path_type=Path),
    help="Output genotype TSV file.",
)
@click.option(
    "-n", "--number",
    required=True,
    type=int,
    help="Number of loci to keep.",
)
@click.option(
    "--method",
    type=click.Choice(["random", "avgpic"], case_sensitive=False),
    default="random",
    help="Selection method (default: random).",
)
@click.option(
    "--seed",
    default=42,
    type=int,
    help="Random seed (default: 42).",
)
@click.option(
    "--popmap",
    type=click.Path(exists=True, path_type=Path),
    help="Two-column sample/population map.",
)
@click.option(
    "--loc_metrics",
    type=click.Path(exists=True, path_type=Path),
    help="Locus metrics TSV with an AvgPIC column (for --method avgpic).",
)
def subsample(
    input_path: Path,
    output: Path,
    number: int,
    method: str,
    seed: int,
    popmap: Optional[Path],
    loc_metrics: Optional[Path],
) -> None:
    """
    Subsample loci from a genotype dataset.

    \b
    Methods:
      random  - n loci chosen at random
      avgpic  - top n loci ranked on the AvgPIC locus metric
    """
    from paprov.util.subsample import run_subsample

    result = run_subsample(
        input_path=input_path,
        output_path=output,
        n=number,
        method=method,
        seed=seed,
        popmap_path=popmap,
        loc_metrics_path=loc_metrics,
    )

    if result.is_err():
        echo_error(f"Subsampling failed: {result.unwrap_err()}")
        raise SystemExit(1)

    stats = result.unwrap()
    echo_success(f"Subsampled {stats['input_loci']} → {stats['output_loci']} loci ({stats['method']})")
    echo_info(f"Output: {stats['output_file']}")


@util.command()
@click.option(
    "-i", "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Genotype TSV or VCF file.",
)
@click.option(
    "-o", "--output",
    required=True,
    type=click.Path(path_type=Path),
    help="Output STRUCTURE file.",
)
@click.option(
    "--popmap",
    type=click.Path(exists=True, path_type=Path),
    help="Two-column sample/population map.",
)
@click.option(
    "--pop_column/--no_pop_column",
    default=True,
    help="Add a population column before the genotypes (default: yes).",
)
@click.option(
    "--ploidy",
    default=2,
    type=int,
    help="Ploidy (default: 2).",
)
@click.option(
    "--marker_names/--no_marker_names",
    default=True,
    help="Write a header line of locus names (default: yes).",
)
def convert(
    input_path: Path,
    output: Path,
    popmap: Optional[Path],
    pop_column: bool,
    ploidy: int,
    marker_names: bool,
) -> None:
    """
    Convert a genotype dataset to STRUCTURE format.

    Each individual is written on as many rows as its ploidy; alleles are
    coded 1 (reference) and 2 (alternate), missing data as -9.
    """
    from paprov.util.convert import run_convert

    result = run_convert(
        input_path=input_path,
        output_path=output,
        popmap_path=popmap,
        add_pop=pop_column,
        ploidy=ploidy,
        export_marker_names=marker_names,
    )

    if result.is_err():
        echo_error(f"Conversion failed: {result.unwrap_err()}")
        raise SystemExit(1)

    stats = result.unwrap()
    echo_success(f"Wrote {stats['individuals']} individuals x {stats['loci']} loci")
    echo_info(f"Output: {stats['output_file']}")
