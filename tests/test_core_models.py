"""
Tests for paprov.core.models module.
"""

import pytest
import numpy as np
import pandas as pd

from paprov.core.errors import InvalidGenotypes, LocusMetadataMismatch, NotFound
from paprov.core.models import (
    CandidateSet,
    DEFAULT_POPULATION,
    GenotypeStore,
    PrivateAlleleTally,
)


class TestGenotypeStore:
    """Tests for GenotypeStore construction and lookups."""

    def test_shape_and_labels(self, small_store):
        assert small_store.n_individuals == 2
        assert small_store.n_loci == 3
        assert small_store.individuals == ("ind1", "ind2")
        assert small_store.loci == ("snp1", "snp2", "snp3")
        assert small_store.populations == ["popA", "popB"]
        assert len(small_store) == 2
        assert "ind1" in small_store
        assert "ind9" not in small_store

    def test_genotype_lookup_by_name_and_position(self, small_store):
        assert small_store.genotype_of("ind1", "snp3") == 2
        assert small_store.genotype_of("ind1", 1) == 1
        assert small_store.genotype_of("ind2", "snp2") is None

    def test_unknown_keys_raise_not_found(self, small_store):
        with pytest.raises(NotFound):
            small_store.genotype_of("ghost", "snp1")
        with pytest.raises(NotFound):
            small_store.genotype_of("ind1", "snp99")
        with pytest.raises(NotFound):
            small_store.genotype_of("ind1", 3)

    def test_not_found_is_lookup_error(self, small_store):
        with pytest.raises(LookupError):
            small_store.population_of("ghost")

    def test_default_population(self):
        """Without labels every individual is placed in one population."""
        store = GenotypeStore.from_array([[0, 1], [2, 2]], individuals=["a", "b"])
        assert store.default_populations is True
        assert store.populations == [DEFAULT_POPULATION]
        assert store.loci == ("L1", "L2")

    def test_population_series_aligned_by_index(self):
        calls = pd.DataFrame([[0], [2]], index=["a", "b"], columns=["x"])
        store = GenotypeStore(calls, populations=pd.Series({"b": "P2", "a": "P1"}))
        assert store.population_of("a") == "P1"
        assert store.population_of("b") == "P2"

    def test_population_sizes(self, reference_store):
        sizes = reference_store.population_sizes()
        assert list(sizes.index) == ["A", "B", "C", "Z"]
        assert sizes["A"] == 10
        assert sizes["C"] == 4

    def test_individuals_of(self, reference_store):
        assert reference_store.individuals_of("C") == frozenset({"C0", "C1", "C2", "C3"})
        assert reference_store.individuals_of("nobody") == frozenset()

    def test_matrix_is_read_only(self, small_store):
        """Returned arrays are copies; the store itself cannot be modified."""
        matrix = small_store.as_matrix()
        matrix[0, 0] = 2
        assert small_store.genotype_of("ind1", "snp1") == 0


class TestGenotypeStoreValidation:
    """Tests for rejection of malformed genotype data."""

    def test_out_of_range_call(self):
        with pytest.raises(InvalidGenotypes, match="0, 1, 2"):
            GenotypeStore.from_array([[0, 3]], individuals=["a"])

    def test_fractional_call(self):
        with pytest.raises(InvalidGenotypes):
            GenotypeStore.from_array([[0.5, 1]], individuals=["a"])

    def test_duplicate_individuals(self):
        with pytest.raises(InvalidGenotypes, match="Duplicate"):
            GenotypeStore.from_array([[0], [1]], individuals=["a", "a"])

    def test_population_length_mismatch(self):
        with pytest.raises(InvalidGenotypes):
            GenotypeStore.from_array([[0], [1]], individuals=["a", "b"], populations=["P"])

    def test_loc_metrics_row_mismatch(self):
        metrics = pd.DataFrame({"AvgPIC": [0.1, 0.2, 0.3]})
        with pytest.raises(LocusMetadataMismatch) as excinfo:
            GenotypeStore.from_array([[0, 1]], individuals=["a"], loc_metrics=metrics)
        assert excinfo.value.n_loci == 2
        assert excinfo.value.n_rows == 3


class TestDerivedStores:
    """Tests for relabel, subset and export."""

    def test_relabel_returns_new_store(self, small_store):
        relabeled = small_store.relabel("ind1", "unknown")
        assert relabeled.population_of("ind1") == "unknown"
        assert small_store.population_of("ind1") == "popA"
        assert relabeled.populations == ["popB", "unknown"]

    def test_relabel_unknown_individual(self, small_store):
        with pytest.raises(NotFound):
            small_store.relabel("ghost", "unknown")

    def test_subset_preserves_order(self, small_store):
        sub = small_store.subset(individuals=["ind2", "ind1"], loci=["snp3", "snp1"])
        assert sub.individuals == ("ind1", "ind2")
        assert sub.loci == ("snp1", "snp3")
        assert sub.genotype_of("ind2", "snp3") == 1

    def test_subset_with_mask_carries_metrics(self):
        metrics = pd.DataFrame({"AvgPIC": [0.1, 0.2, 0.3]})
        store = GenotypeStore.from_array(
            [[0, 1, 2]], individuals=["a"], loc_metrics=metrics
        )
        sub = store.subset(loci=np.array([True, False, True]))
        assert sub.loci == ("L1", "L3")
        assert sub.loc_metrics["AvgPIC"].tolist() == [0.1, 0.3]

    def test_subset_mask_wrong_length(self, small_store):
        with pytest.raises(ValueError):
            small_store.subset(loci=np.array([True, False]))

    def test_to_frame(self, small_store):
        df = small_store.to_frame()
        assert list(df.columns) == ["pop", "snp1", "snp2", "snp3"]
        assert df.index.name == "id"
        assert df.loc["ind2", "snp2"] is pd.NA
        assert df.loc["ind1", "snp3"] == 2


class TestPrivateAlleleTally:
    """Tests for the tally record."""

    def test_grouped_by_count(self):
        tally = PrivateAlleleTally(
            focal="x", n_loci=5,
            counts={"P1": 2, "P2": 0, "P3": 2},
            missing={"P1": 1, "P2": 1, "P3": 1},
        )
        assert tally.grouped_by_count() == {0: ["P2"], 2: ["P1", "P3"]}
        assert tally.populations == ("P1", "P2", "P3")

    def test_counts_are_immutable(self):
        tally = PrivateAlleleTally(focal="x", n_loci=1, counts={"P": 0}, missing={"P": 0})
        with pytest.raises(TypeError):
            tally.counts["P"] = 5

    def test_mismatched_populations(self):
        with pytest.raises(ValueError):
            PrivateAlleleTally(focal="x", n_loci=1, counts={"P": 0}, missing={"Q": 0})

    def test_to_frame(self):
        tally = PrivateAlleleTally(focal="x", n_loci=4, counts={"P": 1}, missing={"P": 2})
        df = tally.to_frame()
        assert df.iloc[0].to_dict() == {
            "population": "P", "private_loci": 1, "missing_loci": 2, "total_loci": 4,
        }


class TestCandidateSet:
    def test_empty_candidate_set_not_informative(self, small_store):
        focal_only = small_store.subset(individuals=["ind1"])
        result = CandidateSet(focal="ind1", populations=(), dataset=focal_only)
        assert result.is_informative is False
        assert result.individuals == ("ind1",)
