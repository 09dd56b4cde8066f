"""
Private-allele counting.

A private allele is an allele carried by the focal individual at a locus but
absent from every non-missing call of a candidate population at that locus.
Unlike a fixed difference, a heterozygous focal individual may share one of
its alleles with the population and still carry a private one.

Decision per locus, with ``g`` the focal call:

    g = 0 (AA)  private when every population call is 2 (BB)
    g = 2 (BB)  private when every population call is 0 (AA)
    g = 1 (AB)  private when every population call is 0, or every call is 2

A population with no non-missing call at a locus satisfies "every call is X"
for any X, so such a locus always counts as private. Loci where the focal
call is missing are tallied separately and never count as private.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Sequence, Tuple

import numpy as np

from paprov.core.models import GenotypeStore, PrivateAlleleTally

logger = logging.getLogger(__name__)


def private_allele_mask(focal_row: np.ndarray, population_matrix: np.ndarray) -> np.ndarray:
    """
    Per-locus private-allele decision for one population.

    Args:
        focal_row: Focal calls, shape (n_loci,), NaN = missing
        population_matrix: Population calls, shape (n_members, n_loci)

    Returns:
        Boolean array of shape (n_loci,); always False where the focal call
        is missing
    """
    focal_row = np.asarray(focal_row, dtype=float)
    population_matrix = np.asarray(population_matrix, dtype=float)
    if population_matrix.ndim != 2 or population_matrix.shape[1] != focal_row.shape[0]:
        raise ValueError(
            f"Population matrix shape {population_matrix.shape} does not match "
            f"{focal_row.shape[0]} focal loci"
        )

    missing = np.isnan(population_matrix)
    all_aa = np.all((population_matrix == 0) | missing, axis=0)
    all_bb = np.all((population_matrix == 2) | missing, axis=0)

    return (
        ((focal_row == 0) & all_bb)
        | ((focal_row == 2) & all_aa)
        | ((focal_row == 1) & (all_aa | all_bb))
    )


def _count_population(
    focal_row: np.ndarray,
    population_matrix: np.ndarray,
) -> Tuple[int, int]:
    """Return (private loci, focal-missing loci) for one population."""
    n_missing = int(np.isnan(focal_row).sum())
    n_private = int(private_allele_mask(focal_row, population_matrix).sum())
    return n_private, n_missing


def count_private_alleles(
    store: GenotypeStore,
    focal: str,
    populations: Sequence[str],
    threads: int = 1,
) -> PrivateAlleleTally:
    """
    Count loci with private alleles of ``focal`` against each population.

    Populations are independent, so with ``threads > 1`` they are scattered
    over a thread pool; the tally is identical to the serial scan.

    Args:
        store: Genotype store (focal already relabeled)
        focal: Focal individual label
        populations: Candidate population labels, in output order
        threads: Number of worker threads

    Returns:
        PrivateAlleleTally keyed by population in the given order

    Raises:
        NotFound: focal individual absent from the store
    """
    focal_row = store.genotype_row(focal)
    matrices = {pop: store.population_matrix(pop) for pop in populations}

    logger.info(
        f"Scanning {store.n_loci} loci of {focal} against {len(populations)} populations"
    )

    results: Dict[str, Tuple[int, int]] = {}
    if threads <= 1 or len(populations) <= 1:
        for pop in populations:
            results[pop] = _count_population(focal_row, matrices[pop])
    else:
        with ThreadPoolExecutor(max_workers=threads) as executor:
            futures = {
                executor.submit(_count_population, focal_row, matrices[pop]): pop
                for pop in populations
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

    for pop in populations:
        logger.debug(f"  {pop}: {results[pop][0]} private, {results[pop][1]} missing")

    return PrivateAlleleTally(
        focal=focal,
        n_loci=store.n_loci,
        counts={pop: results[pop][0] for pop in populations},
        missing={pop: results[pop][1] for pop in populations},
    )
