"""
Core module for paprov.

Contains the genotype store, result types, domain errors, reporting and
genotype file I/O.
"""

from paprov.core.result import Result, Ok, Err
from paprov.core.errors import (
    PaprovError,
    NotFound,
    InvalidGenotypes,
    LocusMetadataMismatch,
    InvalidFocalIndividual,
    DuplicateReservedLabel,
    AmbiguousFocalCount,
    EmptySelection,
)
from paprov.core.models import (
    GenotypeStore,
    PrivateAlleleTally,
    CandidateSet,
    RESERVED_LABEL,
)
from paprov.core.reporter import Reporter, NullReporter

__all__ = [
    "Result",
    "Ok",
    "Err",
    "PaprovError",
    "NotFound",
    "InvalidGenotypes",
    "LocusMetadataMismatch",
    "InvalidFocalIndividual",
    "DuplicateReservedLabel",
    "AmbiguousFocalCount",
    "EmptySelection",
    "GenotypeStore",
    "PrivateAlleleTally",
    "CandidateSet",
    "RESERVED_LABEL",
    "Reporter",
    "NullReporter",
]
