"""
Test configuration and fixtures.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

import numpy as np

from paprov.core.models import GenotypeStore


NA = np.nan


def build_reference_store() -> GenotypeStore:
    """
    Focal individual FOC (alone in population 'Z') plus three targets:

        A  10 individuals  -> 1 locus with a private allele
        B  10 individuals  -> 0 loci with a private allele
        C   4 individuals  -> 3 loci with a private allele

    FOC calls: [0, 2, 1, missing]
    """
    rows = {"FOC": [0, 2, 1, NA]}
    labels = {"FOC": "Z"}

    for i in range(10):
        rows[f"A{i}"] = [0, 2, 0, 1]
        labels[f"A{i}"] = "A"
    for i in range(10):
        rows[f"B{i}"] = [i % 2, 2, (i + 1) % 2, 2 if i == 0 else 0]
        labels[f"B{i}"] = "B"
    for i in range(4):
        rows[f"C{i}"] = [2, 0, 2, 0]
        labels[f"C{i}"] = "C"

    individuals = list(rows)
    return GenotypeStore.from_array(
        [rows[ind] for ind in individuals],
        individuals=individuals,
        populations=[labels[ind] for ind in individuals],
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir)


@pytest.fixture
def reference_store():
    """Three target populations and one focal individual."""
    return build_reference_store()


@pytest.fixture
def small_store():
    """Two individuals, three loci, one missing call."""
    return GenotypeStore.from_array(
        [[0, 1, 2], [2, None, 1]],
        individuals=["ind1", "ind2"],
        loci=["snp1", "snp2", "snp3"],
        populations=["popA", "popB"],
    )


@pytest.fixture
def reference_tsv(temp_dir, reference_store):
    """Genotype TSV file of the reference store."""
    path = temp_dir / "genotypes.tsv"
    reference_store.to_frame().to_csv(path, sep="\t", na_rep="NA")
    return path
