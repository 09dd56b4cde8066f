"""
Population sample-size filter.

Small target populations are statistically unreliable for claims that an
allele is absent, so populations below ``nmin`` are dropped from the
candidate set. Retained populations below a fixed advisory size trigger a
non-blocking warning.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from paprov.core.models import GenotypeStore, RESERVED_LABEL
from paprov.core.reporter import Reporter

logger = logging.getLogger(__name__)

DEFAULT_NMIN = 10

# Advisory minimum, independent of the user-chosen nmin
HARD_MIN = 10


@dataclass(frozen=True)
class PopulationPartition:
    """Split of candidate populations by sample size."""
    retained: Tuple[str, ...]
    discarded: Tuple[str, ...]
    small_but_retained: Tuple[str, ...]
    nmin: int
    advisory_min: int = HARD_MIN


def resolve_nmin(nmin: int, reporter: Optional[Reporter] = None) -> int:
    """Return ``nmin``, or the default when it is not positive."""
    if nmin <= 0:
        message = (
            "The minimum size of the target population must be greater than "
            f"zero, set to {DEFAULT_NMIN}"
        )
        logger.warning(message)
        if reporter is not None:
            reporter.warning(message, nmin=nmin)
        return DEFAULT_NMIN
    return nmin


def partition_by_size(
    store: GenotypeStore,
    nmin: int = DEFAULT_NMIN,
    advisory_min: int = HARD_MIN,
    exclude: Iterable[str] = (RESERVED_LABEL,),
) -> PopulationPartition:
    """
    Partition the populations of a store by sample size.

    Args:
        store: Genotype store
        nmin: Minimum size for a population to be retained (must be > 0;
            see ``resolve_nmin``)
        advisory_min: Size below which a retained population is flagged
        exclude: Labels that are never candidates (the focal individual's)

    Returns:
        PopulationPartition with sorted label tuples
    """
    if nmin <= 0:
        raise ValueError(f"nmin must be positive, got {nmin}")

    excluded = set(exclude)
    sizes = store.population_sizes()
    sizes = sizes[[label not in excluded for label in sizes.index]]

    retained = tuple(label for label, n in sizes.items() if n >= nmin)
    discarded = tuple(label for label, n in sizes.items() if n < nmin)
    small = tuple(label for label in retained if sizes[label] < advisory_min)

    logger.debug(
        f"Size partition (nmin={nmin}): {len(retained)} retained, "
        f"{len(discarded)} discarded, {len(small)} below {advisory_min}"
    )

    return PopulationPartition(
        retained=retained,
        discarded=discarded,
        small_but_retained=small,
        nmin=nmin,
        advisory_min=advisory_min,
    )
