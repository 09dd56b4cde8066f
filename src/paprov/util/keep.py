"""
Keep selected individuals.

Removes every individual not on a list, optionally dropping loci that became
monomorphic and recalculating locus metrics.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from paprov.core.errors import EmptySelection, PaprovError
from paprov.core.genotypes import read_genotypes, write_genotype_tsv
from paprov.core.models import GenotypeStore
from paprov.core.reporter import Reporter, NullReporter
from paprov.core.result import Result, Ok, Err
from paprov.popgen.metrics import recalc_metrics
from paprov.popgen.monomorphs import filter_monomorphs

logger = logging.getLogger(__name__)


def keep_individuals(
    store: GenotypeStore,
    ind_list: Iterable[str],
    recalc: bool = False,
    mono_rm: bool = False,
    reporter: Optional[Reporter] = None,
) -> GenotypeStore:
    """
    Return a store holding only the listed individuals.

    Individuals not present in the store are reported and ignored.

    Raises:
        EmptySelection: none of the listed individuals is present
    """
    if reporter is None:
        reporter = NullReporter()

    requested = list(dict.fromkeys(ind_list))
    present = [ind for ind in requested if ind in store]
    for ind in requested:
        if ind not in store:
            reporter.warning(f"Listed individual {ind} not present in the dataset -- ignored")

    if not present:
        raise EmptySelection("No individuals listed to keep")

    reporter.progress(f"Deleting all but the listed individuals: {' '.join(present)}")
    kept = store.subset(individuals=present)

    if mono_rm:
        kept = filter_monomorphs(kept)
    if recalc:
        kept = recalc_metrics(kept)

    reporter.summary(f"No. of loci: {kept.n_loci}")
    reporter.summary(f"No. of individuals: {kept.n_individuals}")
    reporter.summary(f"No. of populations: {len(kept.populations)}")
    reporter.progress(
        "Locus metrics recalculated" if recalc else "Locus metrics not recalculated"
    )
    reporter.progress(
        "Resultant monomorphic loci deleted" if mono_rm
        else "Resultant monomorphic loci not deleted"
    )
    return kept


def read_id_list(path: Path) -> Result[List[str], str]:
    """Read one individual label per line (blank lines and '#' comments skipped)."""
    try:
        with open(path) as f:
            ids = [line.strip() for line in f]
    except OSError as e:
        return Err(f"Failed to read ID list: {e}")
    return Ok([i for i in ids if i and not i.startswith("#")])


def run_keep(
    input_path: Path,
    output_path: Path,
    ind_list: List[str],
    popmap_path: Optional[Path] = None,
    loc_metrics_path: Optional[Path] = None,
    recalc: bool = False,
    mono_rm: bool = False,
    reporter: Optional[Reporter] = None,
) -> Result[Dict[str, Any], str]:
    """Load a dataset, keep the listed individuals and save the result."""
    load_result = read_genotypes(input_path, popmap_path, loc_metrics_path)
    if load_result.is_err():
        return Err(load_result.unwrap_err())
    store = load_result.unwrap()

    try:
        kept = keep_individuals(store, ind_list, recalc=recalc, mono_rm=mono_rm,
                                reporter=reporter)
    except PaprovError as e:
        return Err.from_exception(e)

    write_result = write_genotype_tsv(kept, output_path)
    if write_result.is_err():
        return Err(write_result.unwrap_err())

    return Ok({
        "input_individuals": store.n_individuals,
        "kept_individuals": kept.n_individuals,
        "input_loci": store.n_loci,
        "kept_loci": kept.n_loci,
        "output_file": str(output_path),
    })
