"""
Private-allele report for an individual of unknown provenance.

Runs the full screen:
  1. Check the dataset (monomorphic loci, focal individual present)
  2. Move the focal individual into population "unknown"
  3. Drop target populations smaller than ``nmin``
  4. Count loci with private alleles against each remaining population
  5. Keep populations with at most ``threshold`` such loci, together with
     the focal individual, and drop loci that became monomorphic

``report_private_alleles`` works on an in-memory store and raises on fatal
conditions; ``run_report_pa`` is the file-level entry point used by the CLI.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from paprov.core.errors import PaprovError
from paprov.core.genotypes import read_genotypes, write_genotype_tsv
from paprov.core.models import (
    CandidateSet,
    GenotypeStore,
    PrivateAlleleTally,
    RESERVED_LABEL,
)
from paprov.core.reporter import Reporter, NullReporter
from paprov.core.result import Result, Ok, Err
from paprov.popgen.candidates import (
    assemble_candidate_set,
    prepare_focal,
    resolve_threshold,
    select_candidates,
)
from paprov.popgen.monomorphs import find_monomorphs
from paprov.popgen.private_alleles import count_private_alleles
from paprov.popgen.size_filter import (
    PopulationPartition,
    partition_by_size,
    resolve_nmin,
)

logger = logging.getLogger(__name__)

FUNCTION_NAME = "report-pa"


@dataclass(frozen=True)
class ReportPaResult:
    """Everything a private-allele run produced."""
    candidates: CandidateSet
    tally: PrivateAlleleTally
    partition: PopulationPartition
    nmin: int
    threshold: int


def report_private_alleles(
    store: GenotypeStore,
    focal: str,
    nmin: int = 10,
    threshold: int = 0,
    reporter: Optional[Reporter] = None,
    threads: int = 1,
    mono_rm: bool = True,
) -> ReportPaResult:
    """
    Screen candidate source populations for a focal individual.

    Args:
        store: Genotype store with population labels
        focal: Label of the individual of unknown provenance
        nmin: Minimum target population size (non-positive -> 10)
        threshold: Maximum number of private-allele loci for a population
            to stay a candidate (negative -> 0)
        reporter: Receives progress and summary events
        threads: Worker threads for the locus scan
        mono_rm: Remove loci monomorphic in the retained dataset

    Returns:
        ReportPaResult

    Raises:
        InvalidFocalIndividual, DuplicateReservedLabel, AmbiguousFocalCount:
            before any counting starts
    """
    if reporter is None:
        reporter = NullReporter()

    reporter.start(FUNCTION_NAME)

    if store.default_populations:
        reporter.progress(
            "Population assignments not detected, individuals assigned to a "
            "single population labelled 'pop1'"
        )

    n_mono = int(find_monomorphs(store).sum())
    if n_mono:
        reporter.warning(
            f"Genotype data contains {n_mono} monomorphic loci", level=2, n_mono=n_mono
        )

    # Fatal checks come first so nothing is counted on bad input
    labeled = prepare_focal(store, focal)
    nmin = resolve_nmin(nmin, reporter)
    threshold = resolve_threshold(threshold, reporter)

    partition = partition_by_size(labeled, nmin=nmin, exclude=(RESERVED_LABEL,))
    reporter.progress(
        f"Retaining {len(partition.retained)} populations with sample size greater "
        f"than or equal to {nmin}: {' '.join(partition.retained)}",
        populations=list(partition.retained),
    )
    reporter.progress(
        f"Discarding {len(partition.discarded)} populations with sample size less "
        f"than {nmin}: {' '.join(partition.discarded)}",
        populations=list(partition.discarded),
    )
    if partition.small_but_retained:
        reporter.warning(
            f"Some retained populations have sample sizes less than "
            f"{partition.advisory_min}: {' '.join(partition.small_but_retained)}",
            populations=list(partition.small_but_retained),
        )
        reporter.warning("Substantial risk of private alleles arising as sampling error")

    reporter.progress(
        f"Assigning 1 unknown individual(s) to {len(partition.retained)} target populations"
    )

    tally = count_private_alleles(labeled, focal, partition.retained, threads=threads)

    reporter.summary(f"Unknown individual: {focal}")
    reporter.summary(f"Total number of SNP loci: {tally.n_loci}")
    reporter.summary("Table showing number of loci with private alleles")
    for count, pops in tally.grouped_by_count().items():
        reporter.summary(f"  {count} {' '.join(pops)}", count=count, populations=pops)

    accepted = select_candidates(tally, threshold)
    candidates = assemble_candidate_set(labeled, focal, accepted, mono_rm=mono_rm)

    if threshold == 0:
        qualifier = "zero loci with private alleles"
    else:
        qualifier = f"{threshold} or less loci with private alleles"
    reporter.progress(
        "Data retained for the unknown individual and remaining candidate source "
        f"populations ({qualifier}): {' '.join(candidates.dataset.populations)}",
        populations=list(candidates.populations),
    )

    reporter.complete(FUNCTION_NAME)

    return ReportPaResult(
        candidates=candidates,
        tally=tally,
        partition=partition,
        nmin=nmin,
        threshold=threshold,
    )


def plot_private_allele_counts(
    tally: PrivateAlleleTally,
    threshold: int,
    output_path: Path,
) -> Result[Path, str]:
    """
    Bar chart of private-allele loci per population with the threshold marked.

    Args:
        tally: Counts to plot
        threshold: Acceptance threshold (drawn as a dashed line)
        output_path: PNG file to write

    Returns:
        Ok(path) on success, Err(message) on failure
    """
    try:
        import matplotlib.pyplot as plt
        import seaborn as sns
    except ImportError:
        return Err("Plotting requires matplotlib and seaborn. Install with: pip install matplotlib seaborn")

    df = tally.to_frame()
    if df.empty:
        return Err("No candidate populations to plot")

    df["accepted"] = df["private_loci"] <= threshold

    fig, ax = plt.subplots(figsize=(max(6, 0.5 * len(df)), 5))
    sns.barplot(
        data=df, x="population", y="private_loci", hue="accepted",
        dodge=False, ax=ax,
    )
    ax.axhline(threshold, color="red", linestyle="--", label=f"Threshold: {threshold}")
    ax.set_xlabel("Target population")
    ax.set_ylabel("Loci with private alleles")
    ax.set_title(f"Private alleles of {tally.focal} ({tally.n_loci} loci)")
    ax.tick_params(axis="x", rotation=45)
    ax.legend()

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
    except OSError as e:
        return Err(f"Failed to save plot: {e}")
    finally:
        plt.close(fig)

    logger.info(f"Saved plot: {output_path}")
    return Ok(output_path)


def write_summary(result: ReportPaResult, path: Path) -> None:
    """Plain-text summary of a run."""
    tally = result.tally
    partition = result.partition
    with open(path, "w") as f:
        f.write("paprov Private Allele Summary\n")
        f.write("=" * 40 + "\n\n")
        f.write(f"Unknown individual: {tally.focal}\n")
        f.write(f"Total SNP loci: {tally.n_loci}\n")
        f.write(f"Minimum population size: {result.nmin}\n")
        f.write(f"Threshold: {result.threshold}\n\n")
        f.write(f"Retained populations: {' '.join(partition.retained)}\n")
        f.write(f"Discarded populations: {' '.join(partition.discarded)}\n")
        if partition.small_but_retained:
            f.write(
                f"Retained below {partition.advisory_min}: "
                f"{' '.join(partition.small_but_retained)}\n"
            )
        f.write("\nLoci with private alleles:\n")
        for count, pops in tally.grouped_by_count().items():
            f.write(f"  {count:>6}  {' '.join(pops)}\n")
        f.write(f"\nAccepted populations: {' '.join(result.candidates.populations)}\n")
        f.write(f"Individuals retained: {result.candidates.dataset.n_individuals}\n")
        f.write(f"Loci retained: {result.candidates.dataset.n_loci}\n")


def run_report_pa(
    input_path: Path,
    output_prefix: Path,
    focal: str,
    nmin: int = 10,
    threshold: int = 0,
    verbosity: int = 2,
    popmap_path: Optional[Path] = None,
    loc_metrics_path: Optional[Path] = None,
    threads: int = 1,
    mono_rm: bool = True,
    plot: bool = False,
    reporter: Optional[Reporter] = None,
    verbose: bool = False,
) -> Result[Dict[str, Any], str]:
    """
    Load genotypes, run the private-allele screen and write the outputs.

    Output files:
        {prefix}.candidates.tsv  - focal + accepted populations (genotype TSV)
        {prefix}.pa_counts.tsv   - private-allele tally per population
        {prefix}.summary.txt     - run summary
        {prefix}.pa_counts.png   - bar chart (with ``plot``)

    Returns:
        Result containing run statistics
    """
    if verbose:
        logger.setLevel(logging.DEBUG)

    if reporter is None:
        reporter = Reporter(verbosity=verbosity)

    logger.info(f"Starting private-allele report from {input_path}")

    load_result = read_genotypes(input_path, popmap_path, loc_metrics_path)
    if load_result.is_err():
        return Err(load_result.unwrap_err())
    store = load_result.unwrap()

    try:
        result = report_private_alleles(
            store, focal, nmin=nmin, threshold=threshold,
            reporter=reporter, threads=threads, mono_rm=mono_rm,
        )
    except PaprovError as e:
        return Err.from_exception(e)

    output_prefix = Path(output_prefix)
    output_prefix.parent.mkdir(parents=True, exist_ok=True)

    dataset_path = Path(str(output_prefix) + ".candidates.tsv")
    write_result = write_genotype_tsv(result.candidates.dataset, dataset_path)
    if write_result.is_err():
        return Err(write_result.unwrap_err())

    counts_path = Path(str(output_prefix) + ".pa_counts.tsv")
    summary_path = Path(str(output_prefix) + ".summary.txt")
    try:
        result.tally.to_frame().to_csv(counts_path, sep="\t", index=False)
        write_summary(result, summary_path)
    except OSError as e:
        return Err(f"Failed to write report: {e}")

    plot_files: List[str] = []
    if plot:
        plot_result = plot_private_allele_counts(
            result.tally, result.threshold, Path(str(output_prefix) + ".pa_counts.png")
        )
        if plot_result.is_ok():
            plot_files.append(str(plot_result.unwrap()))
        else:
            reporter.warning(plot_result.unwrap_err())

    stats = {
        "focal": focal,
        "n_loci": store.n_loci,
        "nmin": result.nmin,
        "threshold": result.threshold,
        "retained": list(result.partition.retained),
        "discarded": list(result.partition.discarded),
        "small_but_retained": list(result.partition.small_but_retained),
        "counts": dict(result.tally.counts),
        "accepted": list(result.candidates.populations),
        "individuals_retained": result.candidates.dataset.n_individuals,
        "loci_retained": result.candidates.dataset.n_loci,
        "dataset_file": str(dataset_path),
        "counts_file": str(counts_path),
        "summary_file": str(summary_path),
        "plot_files": plot_files,
        "warnings": reporter.warnings(),
    }

    logger.info(f"Private-allele report complete for {focal}")

    return Ok(stats)
