"""
Tests for paprov.popgen modules.
"""

import pytest
import numpy as np

from paprov.core.errors import DuplicateReservedLabel, InvalidFocalIndividual
from paprov.core.models import GenotypeStore, PrivateAlleleTally, RESERVED_LABEL
from paprov.core.reporter import NullReporter
from paprov.popgen.candidates import (
    assemble_candidate_set,
    prepare_focal,
    resolve_threshold,
    select_candidates,
)
from paprov.popgen.monomorphs import filter_monomorphs, find_monomorphs
from paprov.popgen.private_alleles import count_private_alleles, private_allele_mask
from paprov.popgen.report_pa import report_private_alleles
from paprov.popgen.size_filter import partition_by_size, resolve_nmin


NA = np.nan


def screen(focal_calls, population_calls):
    """Private-allele decisions of one focal row against one population."""
    return private_allele_mask(
        np.array(focal_calls, dtype=float), np.array(population_calls, dtype=float)
    ).tolist()


class TestPrivateAlleleMask:
    """Per-locus private-allele decisions."""

    def test_homozygous_focal(self):
        """AA focal is private only against an all-BB population, and vice versa."""
        assert screen([0, 0, 2, 2], [[2, 1, 0, 1], [2, 2, 0, 2]]) == [
            True, False, True, False,
        ]

    def test_heterozygous_focal(self):
        """AB focal carries a private allele against any fixed population."""
        assert screen([1, 1, 1], [[0, 2, 0], [0, 2, 2]]) == [True, True, False]

    def test_missing_population_calls_ignored(self):
        assert screen([0, 2], [[2, NA], [NA, 0], [2, 0]]) == [True, True]

    def test_all_missing_population_counts_as_private(self):
        """A locus with no population data is private for any focal call."""
        assert screen([0, 1, 2], [[NA, NA, NA], [NA, NA, NA]]) == [True, True, True]

    def test_missing_focal_never_private(self):
        assert screen([NA, NA], [[2, 0], [2, 0]]) == [False, False]

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            private_allele_mask(np.zeros(3), np.zeros((2, 2)))


class TestCountPrivateAlleles:
    """Tests for tallies over whole populations."""

    def test_reference_counts(self, reference_store):
        tally = count_private_alleles(reference_store, "FOC", ["A", "B", "C"])
        assert dict(tally.counts) == {"A": 1, "B": 0, "C": 3}
        assert dict(tally.missing) == {"A": 1, "B": 1, "C": 1}
        assert tally.n_loci == 4
        assert tally.populations == ("A", "B", "C")

    def test_scenario_single_homozygous_locus(self):
        """Focal AA against a BB population: one private locus."""
        store = GenotypeStore.from_array(
            [[0]] + [[2]] * 3, individuals=["u", "p1", "p2", "p3"],
            populations=["X", "P", "P", "P"],
        )
        assert count_private_alleles(store, "u", ["P"]).count("P") == 1

    def test_scenario_shared_allele(self):
        """Focal AB against a population with AA and AB: nothing private."""
        store = GenotypeStore.from_array(
            [[1], [0], [1]], individuals=["u", "p1", "p2"], populations=["X", "P", "P"],
        )
        assert count_private_alleles(store, "u", ["P"]).count("P") == 0

    def test_scenario_heterozygous_against_fixed(self):
        """Focal AB against a fixed AA population: the B allele is private."""
        store = GenotypeStore.from_array(
            [[1], [0], [0]], individuals=["u", "p1", "p2"], populations=["X", "P", "P"],
        )
        assert count_private_alleles(store, "u", ["P"]).count("P") == 1

    def test_focal_missing_everywhere(self):
        """A focal individual without calls has no private alleles and L missing loci."""
        store = GenotypeStore.from_array(
            [[None, None, None], [0, 2, 1], [0, 2, 1], [2, 0, 0], [2, 0, 0]],
            individuals=["u", "p1", "p2", "q1", "q2"],
            populations=["X", "P", "P", "Q", "Q"],
        )
        tally = count_private_alleles(store, "u", ["P", "Q"])
        assert dict(tally.counts) == {"P": 0, "Q": 0}
        assert dict(tally.missing) == {"P": 3, "Q": 3}

    def test_scenario_missing_focal(self):
        store = GenotypeStore.from_array(
            [[None, 0], [2, 2], [2, 2]], individuals=["u", "p1", "p2"],
            populations=["X", "P", "P"],
        )
        tally = count_private_alleles(store, "u", ["P"])
        assert tally.count("P") == 1
        assert tally.missing["P"] == 1

    def test_count_plus_missing_bounded(self, reference_store):
        tally = count_private_alleles(reference_store, "FOC", ["A", "B", "C"])
        for pop in tally.populations:
            assert tally.counts[pop] + tally.missing[pop] <= tally.n_loci

    def test_population_identical_to_focal(self):
        """A population made of copies of the focal genotype has no private alleles."""
        row = [0, 1, 2, None, 1]
        store = GenotypeStore.from_array(
            [row] * 4, individuals=["u", "c1", "c2", "c3"],
            populations=["X", "P", "P", "P"],
        )
        assert count_private_alleles(store, "u", ["P"]).count("P") == 0

    def test_threads_match_serial(self, reference_store):
        pops = ["A", "B", "C"]
        serial = count_private_alleles(reference_store, "FOC", pops, threads=1)
        threaded = count_private_alleles(reference_store, "FOC", pops, threads=3)
        assert dict(serial.counts) == dict(threaded.counts)
        assert list(threaded.counts) == pops

    def test_empty_population_list(self, reference_store):
        tally = count_private_alleles(reference_store, "FOC", [])
        assert tally.populations == ()


class TestMonomorphs:
    """Tests for monomorphic locus handling."""

    def test_find_monomorphs(self):
        store = GenotypeStore.from_array(
            [[0, 2, 1, None, 0], [0, 2, 1, None, 2]], individuals=["a", "b"],
        )
        # fixed AA, fixed BB, all heterozygous, all missing, polymorphic
        assert find_monomorphs(store).tolist() == [True, True, False, True, False]

    def test_filter_returns_same_store_when_clean(self, small_store):
        assert filter_monomorphs(small_store) is small_store

    def test_filter_drops_loci(self):
        store = GenotypeStore.from_array([[0, 0], [0, 2]], individuals=["a", "b"])
        assert filter_monomorphs(store).loci == ("L2",)


class TestSizeFilter:
    """Tests for sample-size partitioning."""

    def test_partition(self, reference_store):
        labeled = reference_store.relabel("FOC", RESERVED_LABEL)
        part = partition_by_size(labeled, nmin=10)
        assert part.retained == ("A", "B")
        assert part.discarded == ("C",)
        assert part.small_but_retained == ()

    def test_small_but_retained(self, reference_store):
        labeled = reference_store.relabel("FOC", RESERVED_LABEL)
        part = partition_by_size(labeled, nmin=4)
        assert part.retained == ("A", "B", "C")
        assert part.small_but_retained == ("C",)

    def test_reserved_label_never_a_candidate(self, reference_store):
        labeled = reference_store.relabel("FOC", RESERVED_LABEL)
        part = partition_by_size(labeled, nmin=1)
        assert RESERVED_LABEL not in part.retained + part.discarded

    def test_non_positive_nmin_rejected(self, reference_store):
        with pytest.raises(ValueError):
            partition_by_size(reference_store, nmin=0)

    def test_resolve_nmin(self):
        reporter = NullReporter()
        assert resolve_nmin(-3, reporter) == 10
        assert resolve_nmin(5, reporter) == 5
        assert len(reporter.warnings()) == 1


class TestCandidates:
    """Tests for focal preparation and candidate selection."""

    def test_prepare_focal(self, reference_store):
        labeled = prepare_focal(reference_store, "FOC")
        assert labeled.population_of("FOC") == RESERVED_LABEL
        assert "Z" not in labeled.populations

    def test_focal_absent(self, reference_store):
        with pytest.raises(InvalidFocalIndividual, match="nope"):
            prepare_focal(reference_store, "nope")

    def test_reserved_label_already_used(self, reference_store):
        taken = reference_store.relabel("A0", RESERVED_LABEL)
        with pytest.raises(DuplicateReservedLabel) as excinfo:
            prepare_focal(taken, "FOC")
        assert excinfo.value.holders == ["A0"]

    def test_focal_already_reserved(self, reference_store):
        """A dataset from a previous run can be screened again."""
        labeled = reference_store.relabel("FOC", RESERVED_LABEL)
        assert prepare_focal(labeled, "FOC").individuals_of(RESERVED_LABEL) == {"FOC"}

    def test_select_candidates(self):
        tally = PrivateAlleleTally(
            focal="u", n_loci=10,
            counts={"P": 0, "Q": 2, "R": 1},
            missing={"P": 0, "Q": 0, "R": 0},
        )
        assert select_candidates(tally, 0) == ("P",)
        assert select_candidates(tally, 1) == ("P", "R")
        with pytest.raises(ValueError):
            select_candidates(tally, -1)

    def test_resolve_threshold(self):
        reporter = NullReporter()
        assert resolve_threshold(-1, reporter) == 0
        assert resolve_threshold(3, reporter) == 3
        assert len(reporter.warnings()) == 1

    def test_assemble_without_candidates(self, reference_store):
        labeled = prepare_focal(reference_store, "FOC")
        result = assemble_candidate_set(labeled, "FOC", (), mono_rm=False)
        assert result.individuals == ("FOC",)
        assert result.is_informative is False


class TestReportPrivateAlleles:
    """End-to-end tests of the private-allele screen."""

    def test_default_run(self, reference_store):
        result = report_private_alleles(reference_store, "FOC")
        dataset = result.candidates.dataset

        assert result.partition.retained == ("A", "B")
        assert result.partition.discarded == ("C",)
        assert dict(result.tally.counts) == {"A": 1, "B": 0}
        assert result.candidates.populations == ("B",)
        assert dataset.populations == ["B", RESERVED_LABEL]
        assert dataset.n_individuals == 11
        # L2 is fixed BB among FOC and B
        assert dataset.loci == ("L1", "L3", "L4")

    def test_without_monomorph_removal(self, reference_store):
        result = report_private_alleles(reference_store, "FOC", mono_rm=False)
        assert result.candidates.dataset.n_loci == 4

    def test_input_store_unchanged(self, reference_store):
        report_private_alleles(reference_store, "FOC")
        assert reference_store.population_of("FOC") == "Z"

    def test_focal_always_retained(self, reference_store):
        result = report_private_alleles(reference_store, "FOC", threshold=0, nmin=100)
        assert result.candidates.populations == ()
        assert result.candidates.individuals == ("FOC",)

    def test_missing_counts_equal_across_populations(self, reference_store):
        result = report_private_alleles(reference_store, "FOC", nmin=4)
        assert len(set(result.tally.missing.values())) == 1

    def test_threshold_monotonic(self, reference_store):
        previous = set()
        for threshold in range(5):
            result = report_private_alleles(reference_store, "FOC", nmin=4, threshold=threshold)
            accepted = set(result.candidates.populations)
            assert previous <= accepted
            previous = accepted
        assert previous == {"A", "B", "C"}

    def test_rerun_on_output_is_stable(self, reference_store):
        first = report_private_alleles(reference_store, "FOC", threshold=1)
        second = report_private_alleles(first.candidates.dataset, "FOC", threshold=1)
        assert second.candidates.populations == first.candidates.populations
        assert second.candidates.individuals == first.candidates.individuals

    def test_threads_match_serial(self, reference_store):
        serial = report_private_alleles(reference_store, "FOC", nmin=4)
        threaded = report_private_alleles(reference_store, "FOC", nmin=4, threads=4)
        assert dict(serial.tally.counts) == dict(threaded.tally.counts)
        assert serial.candidates.individuals == threaded.candidates.individuals

    def test_parameter_corrections_warn(self, reference_store):
        reporter = NullReporter()
        result = report_private_alleles(
            reference_store, "FOC", nmin=0, threshold=-2, reporter=reporter
        )
        assert result.nmin == 10
        assert result.threshold == 0
        warnings = " ".join(reporter.warnings())
        assert "greater than zero" in warnings
        assert "non-negative" in warnings

    def test_small_population_warning(self, reference_store):
        reporter = NullReporter()
        report_private_alleles(reference_store, "FOC", nmin=4, reporter=reporter)
        assert any("less than 10: C" in w for w in reporter.warnings())
        assert any("Substantial risk" in w for w in reporter.warnings())

    def test_invalid_focal_raises_before_counting(self, reference_store):
        reporter = NullReporter()
        with pytest.raises(InvalidFocalIndividual):
            report_private_alleles(reference_store, "ghost", reporter=reporter)
        assert not any(e.kind.value == "summary" for e in reporter.events)

    def test_default_population_notice(self):
        store = GenotypeStore.from_array(
            [[0, 1]] + [[2, 2]] * 10, individuals=["u"] + [f"p{i}" for i in range(10)],
        )
        reporter = NullReporter()
        result = report_private_alleles(store, "u", reporter=reporter)
        assert result.partition.retained == ("pop1",)
        assert any("'pop1'" in e.message for e in reporter.events)
