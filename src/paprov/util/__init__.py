"""
Dataset utility modules.

  keep       - Keep selected individuals
  subsample  - Subsample loci (random or by AvgPIC)
  convert    - Export to STRUCTURE format
"""

from paprov.util.keep import run_keep, keep_individuals
from paprov.util.subsample import run_subsample, subsample_loci
from paprov.util.convert import run_convert, to_structure

__all__ = [
    "run_keep",
    "keep_individuals",
    "run_subsample",
    "subsample_loci",
    "run_convert",
    "to_structure",
]
