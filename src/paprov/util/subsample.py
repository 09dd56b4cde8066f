"""
Locus subsampling.

Two strategies:
  random  - n loci drawn at random
  avgpic  - the n most informative loci ranked on the ``AvgPIC`` locus metric

Both keep the selected loci in their original order.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from paprov.core.genotypes import read_genotypes, write_genotype_tsv
from paprov.core.models import GenotypeStore
from paprov.core.result import Result, Ok, Err

logger = logging.getLogger(__name__)

SUBSAMPLE_METHODS = ("random", "avgpic")
PIC_COLUMN = "AvgPIC"


def subsample_loci(
    store: GenotypeStore,
    n: int,
    method: str = "random",
    seed: int = 42,
) -> Result[GenotypeStore, str]:
    """
    Keep ``n`` loci of a store.

    Args:
        store: Input store
        n: Number of loci to keep (all loci when n >= number of loci)
        method: 'random' or 'avgpic' (case-insensitive)
        seed: Random seed for reproducibility

    Returns:
        Ok(store with at most n loci) or Err(message)
    """
    method = method.lower()
    if method not in SUBSAMPLE_METHODS:
        return Err(f"Method must be one of {SUBSAMPLE_METHODS}, got '{method}'")
    if n <= 0:
        return Err(f"Number of loci must be positive, got {n}")

    if method == "random":
        if n >= store.n_loci:
            logger.warning(f"Locus count ({store.n_loci}) <= target ({n}), returning all")
            return Ok(store)
        rng = np.random.default_rng(seed)
        chosen = rng.choice(store.n_loci, size=n, replace=False)
        logger.info(f"Random subsample: {store.n_loci} -> {n} loci")
        return Ok(store.subset(loci=sorted(int(k) for k in chosen)))

    metrics = store.loc_metrics
    if metrics is None or PIC_COLUMN not in metrics.columns:
        return Err(f"Locus metric '{PIC_COLUMN}' is required for method 'avgpic'")

    # stable sort keeps original order among ties
    order = np.argsort(-metrics[PIC_COLUMN].to_numpy(dtype=float), kind="stable")
    top = order[:n]
    logger.info(f"AvgPIC subsample: {store.n_loci} -> {len(top)} loci")
    return Ok(store.subset(loci=[int(k) for k in top]))


def run_subsample(
    input_path: Path,
    output_path: Path,
    n: int,
    method: str = "random",
    seed: int = 42,
    popmap_path: Optional[Path] = None,
    loc_metrics_path: Optional[Path] = None,
) -> Result[Dict[str, Any], str]:
    """Load a dataset, subsample its loci and save the result."""
    load_result = read_genotypes(input_path, popmap_path, loc_metrics_path)
    if load_result.is_err():
        return Err(load_result.unwrap_err())
    store = load_result.unwrap()

    result = subsample_loci(store, n, method=method, seed=seed)
    if result.is_err():
        return Err(result.unwrap_err())
    subsampled = result.unwrap()

    write_result = write_genotype_tsv(subsampled, output_path)
    if write_result.is_err():
        return Err(write_result.unwrap_err())

    return Ok({
        "input_loci": store.n_loci,
        "output_loci": subsampled.n_loci,
        "method": method.lower(),
        "output_file": str(output_path),
    })
