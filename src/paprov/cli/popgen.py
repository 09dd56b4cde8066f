"""
POPGEN CLI commands.

  report-pa  - Private-allele screen of candidate source populations
"""

import click
from click.core import ParameterSource
from pathlib import Path
from typing import Optional

from paprov.cli.utils import (
    AliasedGroup,
    echo_success,
    echo_error,
    echo_info,
    echo_warning,
    format_number,
)


@click.group(cls=AliasedGroup)
@click.pass_context
def popgen(ctx: click.Context) -> None:
    """
    Population genetics commands.

    \b
    Example:
      paprov popgen report-pa -i genotypes.tsv --id UC_00146 -o results/uc146
    """
    pass


@popgen.command("report-pa")
@click.option(
    "-i", "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Genotype TSV (id, pop, loci...) or VCF file.",
)
@click.option(
    "-o", "--output",
    required=True,
    type=click.Path(path_type=Path),
    help="Output prefix for generated files.",
)
@click.option(
    "--id", "focal",
    type=str,
    help="Label of the focal individual of unknown provenance.",
)
@click.option(
    "--popmap",
    type=click.Path(exists=True, path_type=Path),
    help="Two-column sample/population map (required to label VCF samples).",
)
@click.option(
    "--loc_metrics",
    type=click.Path(exists=True, path_type=Path),
    help="Locus metrics TSV, one row per locus (TSV input only).",
)
@click.option(
    "--nmin",
    default=10,
    type=int,
    help="Minimum sample size of a target population (default: 10).",
)
@click.option(
    "--threshold",
    default=0,
    type=int,
    help="Keep populations with at most this many private-allele loci (default: 0).",
)
@click.option(
    "--verbosity",
    default=2,
    type=int,
    help="0 silent, 1 begin/end, 2 progress, 3 summary, 5 full report (default: 2).",
)
@click.option(
    "-t", "--threads",
    default=1,
    type=int,
    help="Number of threads for the locus scan (default: 1).",
)
@click.option(
    "--mono_rm/--no_mono_rm",
    default=True,
    help="Remove loci monomorphic in the retained dataset (default: enabled).",
)
@click.option(
    "--plot/--no_plot",
    default=False,
    help="Save a bar chart of private-allele counts (default: disabled).",
)
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file with run parameters; command-line options take precedence.",
)
@click.pass_context
def report_pa(
    ctx: click.Context,
    input_path: Path,
    output: Path,
    focal: Optional[str],
    popmap: Optional[Path],
    loc_metrics: Optional[Path],
    nmin: int,
    threshold: int,
    verbosity: int,
    threads: int,
    mono_rm: bool,
    plot: bool,
    config: Optional[Path],
) -> None:
    """
    Report private alleles of an individual of unknown provenance.

    A private allele is an allele carried by the focal individual but absent
    from a target population. Target populations smaller than --nmin are
    dropped; of the rest, those with more than --threshold private-allele
    loci are excluded as implausible sources.

    \b
    Output files:
      {output}.candidates.tsv  - Focal individual (pop "unknown") and retained populations
      {output}.pa_counts.tsv   - Loci with private alleles per population
      {output}.summary.txt     - Run summary
      {output}.pa_counts.png   - Bar chart (with --plot)
    """
    from paprov.core.config import ReportPaConfig, load_config
    from paprov.core.reporter import Reporter
    from paprov.popgen.report_pa import run_report_pa

    obj = ctx.obj or {}
    verbose = obj.get("verbose", False)

    settings = ReportPaConfig()
    if config:
        loaded = load_config(config).and_then(ReportPaConfig.from_mapping)
        if loaded.is_err():
            echo_error(loaded.unwrap_err())
            raise SystemExit(1)
        settings = loaded.unwrap()
        echo_info(f"Loaded parameters from {config}")

    # Only options actually given on the command line override the config file
    given = {
        "focal": focal, "nmin": nmin, "threshold": threshold,
        "verbosity": verbosity, "threads": threads, "mono_rm": mono_rm, "plot": plot,
    }
    settings = settings.override(**{
        name: value for name, value in given.items()
        if ctx.get_parameter_source(name) is not ParameterSource.DEFAULT
    })

    if not settings.focal:
        echo_error("A focal individual is required (--id or 'focal' in --config)")
        raise SystemExit(1)

    reporter = Reporter(verbosity=0 if obj.get("quiet") else settings.verbosity)

    result = run_report_pa(
        input_path=input_path,
        output_prefix=output,
        focal=settings.focal,
        nmin=settings.nmin,
        threshold=settings.threshold,
        popmap_path=popmap,
        loc_metrics_path=loc_metrics,
        threads=settings.threads,
        mono_rm=settings.mono_rm,
        plot=settings.plot,
        reporter=reporter,
        verbose=verbose,
    )

    if result.is_err():
        echo_error(f"Private-allele report failed: {result.unwrap_err()}")
        raise SystemExit(1)

    stats = result.unwrap()

    if obj.get("quiet"):
        return

    accepted = stats["accepted"]
    if accepted:
        echo_success(
            f"{len(accepted)} of {len(stats['retained'])} target populations "
            f"remain candidate sources: {', '.join(accepted)}"
        )
    else:
        echo_warning("No target population remains a candidate source")
    echo_info(
        f"Retained {format_number(stats['individuals_retained'])} individuals, "
        f"{format_number(stats['loci_retained'])} loci"
    )
    echo_info(f"Output: {stats['dataset_file']}")
