"""
Monomorphic locus detection and removal.

A locus is monomorphic when only one allele is observed among the
non-missing calls: every call is 0 or every call is 2. Loci with no
non-missing calls at all carry no allele and are treated as monomorphic.
A locus where everyone is heterozygous still carries both alleles and is kept.
"""

import logging

import numpy as np

from paprov.core.models import GenotypeStore

logger = logging.getLogger(__name__)


def find_monomorphs(store: GenotypeStore) -> np.ndarray:
    """Boolean mask over loci, True where the locus is monomorphic."""
    matrix = store.as_matrix()
    # allele A is present in 0 and 1 calls, allele B in 1 and 2 calls
    has_a = np.any((matrix == 0) | (matrix == 1), axis=0)
    has_b = np.any((matrix == 1) | (matrix == 2), axis=0)
    return ~(has_a & has_b)


def filter_monomorphs(store: GenotypeStore) -> GenotypeStore:
    """
    Remove monomorphic loci (and their locus metrics rows).

    Returns the same store object when nothing needs removing.
    """
    mono = find_monomorphs(store)
    n_mono = int(mono.sum())
    if n_mono == 0:
        return store

    logger.info(f"Removing {n_mono} monomorphic loci of {store.n_loci}")
    return store.subset(loci=~mono)
