"""
Candidate source population selection.

Turns private-allele counts into the final dataset: the focal individual
plus every population whose count does not exceed the threshold.
"""

import logging
from typing import Optional, Sequence, Tuple

from paprov.core.errors import (
    AmbiguousFocalCount,
    DuplicateReservedLabel,
    InvalidFocalIndividual,
)
from paprov.core.models import (
    CandidateSet,
    GenotypeStore,
    PrivateAlleleTally,
    RESERVED_LABEL,
)
from paprov.core.reporter import Reporter
from paprov.popgen.monomorphs import filter_monomorphs

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0


def resolve_threshold(threshold: int, reporter: Optional[Reporter] = None) -> int:
    """Return ``threshold``, or 0 when it is negative."""
    if threshold < 0:
        message = (
            "The threshold for private alleles must be non-negative, "
            f"set to {DEFAULT_THRESHOLD}"
        )
        logger.warning(message)
        if reporter is not None:
            reporter.warning(message, threshold=threshold)
        return DEFAULT_THRESHOLD
    return threshold


def prepare_focal(
    store: GenotypeStore,
    focal: str,
    label: str = RESERVED_LABEL,
) -> GenotypeStore:
    """
    Move the focal individual into the reserved population.

    A focal individual that already carries the reserved label on its own
    is accepted as is, so a dataset produced by a previous run can be
    screened again.

    Raises:
        InvalidFocalIndividual: focal individual not in the store
        DuplicateReservedLabel: another individual already carries ``label``
        AmbiguousFocalCount: ``label`` is not carried by exactly one
            individual after relabeling
    """
    if focal not in store:
        raise InvalidFocalIndividual(focal)

    holders = sorted(store.individuals_of(label) - {focal})
    if holders:
        raise DuplicateReservedLabel(label, holders)

    relabeled = store.relabel(focal, label)

    # postcondition of the checks above
    n_focal = len(relabeled.individuals_of(label))
    if n_focal != 1:
        raise AmbiguousFocalCount(label, n_focal)

    return relabeled


def select_candidates(tally: PrivateAlleleTally, threshold: int) -> Tuple[str, ...]:
    """Populations with at most ``threshold`` private-allele loci, in tally order."""
    if threshold < 0:
        raise ValueError(f"threshold must be non-negative, got {threshold}")
    return tuple(pop for pop, n in tally.counts.items() if n <= threshold)


def assemble_candidate_set(
    store: GenotypeStore,
    focal: str,
    accepted: Sequence[str],
    mono_rm: bool = True,
) -> CandidateSet:
    """
    Build the retained dataset from accepted populations.

    Args:
        store: Genotype store with the focal individual already relabeled
        focal: Focal individual label
        accepted: Accepted population labels
        mono_rm: Drop loci that are monomorphic within the retained dataset

    Returns:
        CandidateSet; with no accepted population the dataset holds only
        the focal individual
    """
    keep = {focal}
    for pop in accepted:
        keep |= store.individuals_of(pop)

    dataset = store.subset(individuals=keep)
    if mono_rm:
        dataset = filter_monomorphs(dataset)

    logger.info(
        f"Retained {dataset.n_individuals} individuals from {len(accepted)} "
        f"populations, {dataset.n_loci} loci"
    )

    return CandidateSet(
        focal=focal,
        populations=tuple(sorted(accepted)),
        dataset=dataset,
    )
