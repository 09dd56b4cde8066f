"""
Format conversion utilities.

Exports a genotype store to STRUCTURE input format (two-row layout: each
individual occupies ``ploidy`` rows, one allele per row).
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd

from paprov.core.genotypes import read_genotypes
from paprov.core.models import GenotypeStore
from paprov.core.result import Result, Ok, Err

logger = logging.getLogger(__name__)

STRUCTURE_MISSING = -9


def structure_alleles(matrix: np.ndarray, ploidy: int = 2) -> np.ndarray:
    """
    Expand calls into STRUCTURE allele codes.

    A call of ``g`` alternate alleles becomes ``ploidy - g`` copies of allele 1
    followed by ``g`` copies of allele 2; missing calls become -9.

    Returns:
        Integer array of shape (n_individuals * ploidy, n_loci)
    """
    n_ind, n_loci = matrix.shape
    out = np.empty((n_ind * ploidy, n_loci), dtype=int)
    missing = np.isnan(matrix)
    for copy in range(ploidy):
        codes = np.where(copy < ploidy - np.nan_to_num(matrix), 1, 2)
        out[copy::ploidy] = np.where(missing, STRUCTURE_MISSING, codes)
    return out


def to_structure(
    store: GenotypeStore,
    output_path: Path,
    ind_names: Optional[Sequence[str]] = None,
    add_columns: Optional[Union[Sequence[Any], pd.DataFrame]] = None,
    ploidy: int = 2,
    export_marker_names: bool = True,
) -> Result[Path, str]:
    """
    Write a store as a STRUCTURE file.

    Args:
        store: Genotype store
        output_path: Output file
        ind_names: Labels written in the first column (default: store labels)
        add_columns: Extra columns placed before the genotypes; a plain
            sequence becomes a single ``pop`` column
        ploidy: Ploidy of the calls
        export_marker_names: Write a header line of locus names

    Returns:
        Ok(path) on success, Err(message) on failure
    """
    n_ind = store.n_individuals

    if ind_names is None:
        ind_names = list(store.individuals)
    if len(ind_names) != n_ind:
        return Err(
            f"No. of individual names ({len(ind_names)}) and no. of individuals "
            f"({n_ind}) do not match"
        )

    if add_columns is not None and not isinstance(add_columns, pd.DataFrame):
        add_columns = pd.DataFrame({"pop": list(add_columns)})
    if add_columns is not None and len(add_columns) != n_ind:
        return Err(
            f"No. of rows in additional columns ({len(add_columns)}) and no. of "
            f"individuals ({n_ind}) do not match"
        )

    if isinstance(ploidy, bool) or not isinstance(ploidy, (int, np.integer)) or ploidy < 1:
        return Err(f"Ploidy must be a single positive integer, got {ploidy!r}")

    matrix = store.as_matrix()
    called = matrix[~np.isnan(matrix)]
    if called.size and called.max() > ploidy:
        return Err(f"Genotypes must only contain 0..{ploidy} and missing values")

    table = pd.DataFrame({"ind": np.repeat(list(ind_names), ploidy)})
    if add_columns is not None:
        for name in add_columns.columns:
            table[name] = np.repeat(add_columns[name].to_numpy(), ploidy)
    alleles = pd.DataFrame(structure_alleles(matrix, ploidy), columns=list(store.loci))
    table = pd.concat([table, alleles], axis=1)

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            if export_marker_names:
                f.write("\t".join(store.loci) + "\n")
            table.to_csv(f, sep="\t", header=False, index=False)
    except OSError as e:
        return Err(f"Failed to write STRUCTURE file: {e}")

    logger.info(f"STRUCTURE file saved as: {output_path}")
    return Ok(output_path)


def run_convert(
    input_path: Path,
    output_path: Path,
    popmap_path: Optional[Path] = None,
    add_pop: bool = True,
    ploidy: int = 2,
    export_marker_names: bool = True,
) -> Result[Dict[str, Any], str]:
    """Load a dataset and export it to STRUCTURE format."""
    load_result = read_genotypes(input_path, popmap_path)
    if load_result.is_err():
        return Err(load_result.unwrap_err())
    store = load_result.unwrap()

    add_columns = list(store.labels) if add_pop else None
    result = to_structure(
        store, output_path, add_columns=add_columns, ploidy=ploidy,
        export_marker_names=export_marker_names,
    )
    if result.is_err():
        return Err(result.unwrap_err())

    return Ok({
        "individuals": store.n_individuals,
        "loci": store.n_loci,
        "output_file": str(result.unwrap()),
    })
