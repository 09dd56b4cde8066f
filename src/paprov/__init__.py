"""
paprov: private-allele screening of candidate source populations.

Given SNP genotypes of reference populations and one individual of unknown
provenance, paprov counts the loci at which the individual carries an allele
absent from each population and retains only the plausible source
populations.
"""

__version__ = "1.0.0"

from paprov.core.result import Result, Ok, Err

__all__ = [
    "__version__",
    "Result",
    "Ok",
    "Err",
]
