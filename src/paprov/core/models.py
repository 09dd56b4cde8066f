"""
Core data models for paprov.

Defines the genotype store (individuals x loci, biallelic diploid calls plus
population labels) and the immutable records produced by a private-allele run.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Iterable, Mapping, Sequence, Dict, List, Tuple, Union

import numpy as np
import pandas as pd

from paprov.core.errors import InvalidGenotypes, LocusMetadataMismatch, NotFound


# Population label assigned to the focal individual for the duration of a run
RESERVED_LABEL = "unknown"

# Label used when a dataset arrives without population assignments
DEFAULT_POPULATION = "pop1"

# 0 = homozygous allele A, 1 = heterozygous, 2 = homozygous allele B
VALID_GENOTYPES = (0, 1, 2)

LocusKey = Union[str, int]


class GenotypeStore:
    """
    Read-only view over a genotype matrix and its population labels.

    Calls are held in a float matrix (NaN = missing call). Nothing in the
    store is mutated after construction: ``relabel`` and ``subset`` return
    new stores that share no writable state with the original.

    Attributes:
        individuals: Individual labels in matrix row order
        loci: Locus names in matrix column order
        default_populations: True when labels were not supplied and every
            individual was placed in ``DEFAULT_POPULATION``
    """

    __slots__ = (
        "_matrix", "_individuals", "_loci", "_labels",
        "_ind_index", "_loc_index", "_loc_metrics", "default_populations",
    )

    def __init__(
        self,
        genotypes: pd.DataFrame,
        populations: Optional[Union[Sequence[str], pd.Series]] = None,
        loc_metrics: Optional[pd.DataFrame] = None,
    ) -> None:
        """
        Build a store from a DataFrame of calls.

        Args:
            genotypes: DataFrame indexed by individual label, one column per
                locus, values 0/1/2 or NaN
            populations: Population label per individual (sequence in row
                order, or Series indexed by individual). None assigns all
                individuals to ``DEFAULT_POPULATION``.
            loc_metrics: Optional per-locus metadata, one row per locus

        Raises:
            InvalidGenotypes: on non-numeric or out-of-range calls, duplicate
                labels, or a population vector of the wrong length
            LocusMetadataMismatch: if ``loc_metrics`` row count differs from
                the number of loci
        """
        individuals = tuple(str(i) for i in genotypes.index)
        loci = tuple(str(c) for c in genotypes.columns)

        if len(set(individuals)) != len(individuals):
            dupes = sorted({i for i in individuals if individuals.count(i) > 1})
            raise InvalidGenotypes(f"Duplicate individual labels: {dupes}")
        if len(set(loci)) != len(loci):
            raise InvalidGenotypes("Duplicate locus names in genotype matrix")

        try:
            matrix = genotypes.to_numpy(dtype=float, na_value=np.nan)
        except (TypeError, ValueError) as e:
            raise InvalidGenotypes(f"Genotype matrix is not numeric: {e}") from e

        valid = np.isnan(matrix) | np.isin(matrix, VALID_GENOTYPES)
        if not valid.all():
            bad = np.unique(matrix[~valid])
            raise InvalidGenotypes(
                f"Genotypes must be 0, 1, 2 or missing; found {bad.tolist()}"
            )

        default_populations = populations is None
        if populations is None:
            labels = np.array([DEFAULT_POPULATION] * len(individuals), dtype=object)
        elif isinstance(populations, pd.Series):
            aligned = populations.reindex(genotypes.index)
            if aligned.isna().any():
                missing = [str(i) for i in aligned[aligned.isna()].index]
                raise InvalidGenotypes(f"No population label for individuals: {missing}")
            labels = aligned.astype(str).to_numpy(dtype=object)
        else:
            labels = np.array([str(p) for p in populations], dtype=object)
            if len(labels) != len(individuals):
                raise InvalidGenotypes(
                    f"{len(labels)} population labels supplied for "
                    f"{len(individuals)} individuals"
                )

        if loc_metrics is not None:
            if len(loc_metrics) != len(loci):
                raise LocusMetadataMismatch(len(loci), len(loc_metrics))
            loc_metrics = loc_metrics.reset_index(drop=True)

        self._init_parts(
            matrix, individuals, loci, labels, loc_metrics, default_populations
        )

    def _init_parts(
        self,
        matrix: np.ndarray,
        individuals: Tuple[str, ...],
        loci: Tuple[str, ...],
        labels: np.ndarray,
        loc_metrics: Optional[pd.DataFrame],
        default_populations: bool,
    ) -> None:
        matrix = np.array(matrix, dtype=float, copy=True)
        matrix.setflags(write=False)
        labels = np.array(labels, dtype=object, copy=True)
        labels.setflags(write=False)

        self._matrix = matrix
        self._individuals = individuals
        self._loci = loci
        self._labels = labels
        self._ind_index = {ind: i for i, ind in enumerate(individuals)}
        self._loc_index = {loc: k for k, loc in enumerate(loci)}
        self._loc_metrics = None if loc_metrics is None else loc_metrics.copy()
        self.default_populations = default_populations

    @classmethod
    def _from_parts(cls, *parts) -> GenotypeStore:
        """Assemble a store from already-validated parts."""
        store = cls.__new__(cls)
        store._init_parts(*parts)
        return store

    @classmethod
    def from_array(
        cls,
        matrix: np.ndarray | Sequence[Sequence[Optional[float]]],
        individuals: Sequence[str],
        loci: Optional[Sequence[str]] = None,
        populations: Optional[Sequence[str]] = None,
        loc_metrics: Optional[pd.DataFrame] = None,
    ) -> GenotypeStore:
        """
        Create a store from a 2-D array (rows = individuals).

        ``None`` entries are treated as missing calls. When ``loci`` is
        omitted, loci are named ``L1``..``Ln``.
        """
        arr = np.array(
            [[np.nan if v is None else v for v in row] for row in matrix],
            dtype=float,
        )
        if loci is None:
            loci = [f"L{k + 1}" for k in range(arr.shape[1])]
        df = pd.DataFrame(arr, index=list(individuals), columns=list(loci))
        return cls(df, populations=populations, loc_metrics=loc_metrics)

    # ------------------------------------------------------------------
    # Shape and labels
    # ------------------------------------------------------------------

    @property
    def individuals(self) -> Tuple[str, ...]:
        return self._individuals

    @property
    def loci(self) -> Tuple[str, ...]:
        return self._loci

    @property
    def n_individuals(self) -> int:
        return len(self._individuals)

    @property
    def n_loci(self) -> int:
        return len(self._loci)

    @property
    def labels(self) -> Tuple[str, ...]:
        """Population label of each individual, in row order."""
        return tuple(self._labels)

    @property
    def populations(self) -> List[str]:
        """Distinct population labels, sorted."""
        return sorted(set(self._labels))

    @property
    def loc_metrics(self) -> Optional[pd.DataFrame]:
        """Copy of the locus metrics table (None if absent)."""
        return None if self._loc_metrics is None else self._loc_metrics.copy()

    def __len__(self) -> int:
        return self.n_individuals

    def __contains__(self, individual: object) -> bool:
        return individual in self._ind_index

    def __repr__(self) -> str:
        return (
            f"GenotypeStore({self.n_individuals} individuals, {self.n_loci} loci, "
            f"{len(self.populations)} populations)"
        )

    def population_of(self, individual: str) -> str:
        return self._labels[self._row_index(individual)]

    def population_sizes(self) -> pd.Series:
        """Number of individuals per population, indexed by sorted label."""
        return pd.Series(self._labels, dtype=object).value_counts().sort_index()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _row_index(self, individual: str) -> int:
        try:
            return self._ind_index[individual]
        except KeyError:
            raise NotFound(f"Individual not found: {individual}") from None

    def _locus_index(self, locus: LocusKey) -> int:
        if isinstance(locus, (int, np.integer)) and not isinstance(locus, bool):
            if 0 <= locus < self.n_loci:
                return int(locus)
            raise NotFound(f"Locus index out of range: {locus} (n_loci={self.n_loci})")
        try:
            return self._loc_index[locus]
        except KeyError:
            raise NotFound(f"Locus not found: {locus}") from None

    def genotype_of(self, individual: str, locus: LocusKey) -> Optional[int]:
        """
        Genotype of one individual at one locus.

        Args:
            individual: Individual label
            locus: Locus name or 0-based column position

        Returns:
            0, 1 or 2, or None for a missing call

        Raises:
            NotFound: unknown individual or locus
        """
        value = self._matrix[self._row_index(individual), self._locus_index(locus)]
        if np.isnan(value):
            return None
        return int(value)

    def genotype_row(self, individual: str) -> np.ndarray:
        """All calls of one individual (NaN = missing)."""
        return self._matrix[self._row_index(individual)].copy()

    def individuals_of(self, label: str) -> frozenset:
        """Labels of the individuals assigned to a population (empty if none)."""
        return frozenset(
            ind for ind, pop in zip(self._individuals, self._labels) if pop == label
        )

    def population_matrix(self, label: str) -> np.ndarray:
        """Calls of every member of a population, rows in store order."""
        return self._matrix[self._labels == label].copy()

    def as_matrix(self) -> np.ndarray:
        return self._matrix.copy()

    # ------------------------------------------------------------------
    # Derived stores
    # ------------------------------------------------------------------

    def relabel(self, individual: str, new_label: str) -> GenotypeStore:
        """
        Return a store in which ``individual`` belongs to ``new_label``.

        Only the membership of the old and new populations changes; calls
        and locus metadata are untouched.

        Raises:
            NotFound: unknown individual
        """
        row = self._row_index(individual)
        labels = self._labels.copy()
        labels[row] = str(new_label)
        return self._from_parts(
            self._matrix, self._individuals, self._loci, labels,
            self._loc_metrics, self.default_populations,
        )

    def subset(
        self,
        individuals: Optional[Iterable[str]] = None,
        loci: Optional[Union[Iterable[LocusKey], np.ndarray]] = None,
    ) -> GenotypeStore:
        """
        Return a store restricted to some individuals and/or loci.

        Original row and column order is preserved whatever order the
        selection is given in. ``loci`` may be a boolean mask over all loci.

        Raises:
            NotFound: a requested individual or locus does not exist
        """
        if individuals is None:
            rows = np.arange(self.n_individuals)
        else:
            rows = np.array(sorted({self._row_index(i) for i in individuals}), dtype=int)

        if loci is None:
            cols = np.arange(self.n_loci)
        elif isinstance(loci, np.ndarray) and loci.dtype == bool:
            if loci.shape != (self.n_loci,):
                raise ValueError(
                    f"Locus mask has shape {loci.shape}, expected ({self.n_loci},)"
                )
            cols = np.flatnonzero(loci)
        else:
            cols = np.array(sorted({self._locus_index(k) for k in loci}), dtype=int)

        metrics = None
        if self._loc_metrics is not None:
            metrics = self._loc_metrics.iloc[cols].reset_index(drop=True)

        return self._from_parts(
            self._matrix[np.ix_(rows, cols)],
            tuple(self._individuals[r] for r in rows),
            tuple(self._loci[c] for c in cols),
            self._labels[rows],
            metrics,
            self.default_populations,
        )

    def with_loc_metrics(self, loc_metrics: Optional[pd.DataFrame]) -> GenotypeStore:
        """Return a store carrying a replacement locus metrics table."""
        if loc_metrics is not None:
            if len(loc_metrics) != self.n_loci:
                raise LocusMetadataMismatch(self.n_loci, len(loc_metrics))
            loc_metrics = loc_metrics.reset_index(drop=True)
        return self._from_parts(
            self._matrix, self._individuals, self._loci, self._labels,
            loc_metrics, self.default_populations,
        )

    def to_frame(self, include_population: bool = True) -> pd.DataFrame:
        """
        Export calls as a DataFrame (index = individual).

        With ``include_population`` the first column is ``pop``. Calls use
        the nullable ``Int64`` dtype so missing values print as ``<NA>``.
        """
        df = pd.DataFrame(
            self._matrix, index=pd.Index(self._individuals, name="id"),
            columns=list(self._loci),
        ).astype("Int64")
        if include_population:
            df.insert(0, "pop", list(self._labels))
        return df


@dataclass(frozen=True, slots=True)
class PrivateAlleleTally:
    """
    Private-allele counts of one focal individual against candidate populations.

    Attributes:
        focal: Focal individual label
        n_loci: Number of loci scanned
        counts: Population -> number of loci with a private allele
        missing: Population -> number of loci skipped because the focal
            call was missing
    """
    focal: str
    n_loci: int
    counts: Mapping[str, int]
    missing: Mapping[str, int]

    def __post_init__(self) -> None:
        if list(self.counts) != list(self.missing):
            raise ValueError("counts and missing must cover the same populations")
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))
        object.__setattr__(self, "missing", MappingProxyType(dict(self.missing)))

    @property
    def populations(self) -> Tuple[str, ...]:
        return tuple(self.counts)

    def count(self, population: str) -> int:
        return self.counts[population]

    def grouped_by_count(self) -> Dict[int, List[str]]:
        """Populations grouped by their private-allele count, lowest count first."""
        groups: Dict[int, List[str]] = {}
        for pop, n in self.counts.items():
            groups.setdefault(n, []).append(pop)
        return dict(sorted(groups.items()))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "population": list(self.counts),
            "private_loci": list(self.counts.values()),
            "missing_loci": list(self.missing.values()),
            "total_loci": self.n_loci,
        })


@dataclass(frozen=True)
class CandidateSet:
    """
    Outcome of a private-allele run.

    Attributes:
        focal: Focal individual label (carries ``RESERVED_LABEL`` in ``dataset``)
        populations: Accepted candidate source populations, sorted
        dataset: Focal individual plus all members of accepted populations
    """
    focal: str
    populations: Tuple[str, ...]
    dataset: GenotypeStore

    @property
    def individuals(self) -> Tuple[str, ...]:
        return self.dataset.individuals

    @property
    def is_informative(self) -> bool:
        """False when no candidate population survived."""
        return len(self.populations) > 0
