"""
Locus metric recalculation.

Locus metrics supplied with a dataset go stale once individuals are removed.
These helpers recompute them from the current calls and store them in the
locus metrics table (created if absent). Frequencies are taken over the
individuals that could be scored at each locus.
"""

import logging
import warnings
from typing import Callable, Dict

import numpy as np
import pandas as pd

from paprov.core.models import GenotypeStore

logger = logging.getLogger(__name__)


def _metrics_frame(store: GenotypeStore) -> pd.DataFrame:
    metrics = store.loc_metrics
    if metrics is None:
        logger.debug("Locus metrics table does not exist, creating it")
        metrics = pd.DataFrame(index=range(store.n_loci))
    return metrics


def _column_mean(values: np.ndarray) -> np.ndarray:
    # all-missing loci give NaN without a RuntimeWarning
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=RuntimeWarning)
        return np.nanmean(values, axis=0)


def _with_metric(store: GenotypeStore, name: str, values: np.ndarray) -> GenotypeStore:
    metrics = _metrics_frame(store)
    metrics[name] = values
    return store.with_loc_metrics(metrics)


def _scored(matrix: np.ndarray, genotype: int) -> np.ndarray:
    """Indicator of ``genotype`` with NaN where the call is missing."""
    return np.where(np.isnan(matrix), np.nan, (matrix == genotype).astype(float))


def recalc_freqhomref(store: GenotypeStore) -> GenotypeStore:
    """Frequency of homozygous reference (0) calls per locus -> ``FreqHomRef``."""
    logger.info("Recalculating locus metric FreqHomRef")
    return _with_metric(store, "FreqHomRef", _column_mean(_scored(store.as_matrix(), 0)))


def recalc_freqhomsnp(store: GenotypeStore) -> GenotypeStore:
    """Frequency of homozygous alternate (2) calls per locus -> ``FreqHomSnp``."""
    logger.info("Recalculating locus metric FreqHomSnp")
    return _with_metric(store, "FreqHomSnp", _column_mean(_scored(store.as_matrix(), 2)))


def recalc_callrate(store: GenotypeStore) -> GenotypeStore:
    """Proportion of individuals with a non-missing call -> ``CallRate``."""
    logger.info("Recalculating locus metric CallRate")
    matrix = store.as_matrix()
    if matrix.shape[0] == 0:
        rate = np.full(store.n_loci, np.nan)
    else:
        rate = 1.0 - np.isnan(matrix).mean(axis=0)
    return _with_metric(store, "CallRate", rate)


def alternate_allele_frequency(store: GenotypeStore) -> np.ndarray:
    """Frequency of allele B per locus (mean call / 2)."""
    return _column_mean(store.as_matrix()) / 2.0


def recalc_maf(store: GenotypeStore) -> GenotypeStore:
    """
    Minor allele frequency per locus -> ``maf``.

    Also refreshes ``FreqHomRef`` and ``FreqHomSnp``.
    """
    store = recalc_freqhomsnp(recalc_freqhomref(store))
    logger.info("Recalculating minor allele frequency (maf)")
    alf = alternate_allele_frequency(store)
    return _with_metric(store, "maf", np.where(alf > 0.5, 1.0 - alf, alf))


RECALCULATORS: Dict[str, Callable[[GenotypeStore], GenotypeStore]] = {
    "CallRate": recalc_callrate,
    "maf": recalc_maf,
}


def recalc_metrics(store: GenotypeStore) -> GenotypeStore:
    """Recompute every supported locus metric."""
    for recalc in RECALCULATORS.values():
        store = recalc(store)
    return store
