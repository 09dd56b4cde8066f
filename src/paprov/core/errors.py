"""
Domain errors.

All fatal conditions of a private-allele run derive from ``PaprovError`` so
callers can catch them as a group. They are raised before any counting starts.
"""


class PaprovError(Exception):
    """Base class for fatal analysis errors."""


class NotFound(PaprovError, LookupError):
    """An individual or locus is not present in the genotype store."""


class InvalidGenotypes(PaprovError, ValueError):
    """Genotype matrix holds values outside {0, 1, 2, missing} or bad labels."""


class LocusMetadataMismatch(PaprovError):
    """Locus metrics table and genotype matrix disagree on the number of loci."""

    def __init__(self, n_loci: int, n_rows: int):
        self.n_loci = n_loci
        self.n_rows = n_rows
        super().__init__(
            f"The number of rows in the locus metrics table ({n_rows}) does not "
            f"match the number of loci in the genotype matrix ({n_loci})"
        )


class InvalidFocalIndividual(PaprovError):
    """The nominated focal individual is not present in the dataset."""

    def __init__(self, focal: str):
        self.focal = focal
        super().__init__(
            f"Nominated focal individual (of unknown provenance) '{focal}' "
            "is not present in the dataset"
        )


class DuplicateReservedLabel(PaprovError):
    """The reserved population label is already carried by other individuals."""

    def __init__(self, label: str, holders: list[str]):
        self.label = label
        self.holders = holders
        super().__init__(
            f"Population label '{label}' already in use by: {', '.join(holders)}"
        )


class AmbiguousFocalCount(PaprovError):
    """After relabeling, the reserved label is not carried by exactly one individual."""

    def __init__(self, label: str, count: int):
        self.label = label
        self.count = count
        super().__init__(
            f"Expected exactly one individual labelled '{label}', found {count}"
        )


class EmptySelection(PaprovError):
    """A selection of individuals or loci ended up empty."""
