"""
Private-allele screening modules.

  size_filter      - Drop target populations below a minimum sample size
  private_alleles  - Count loci with private alleles per population
  candidates       - Threshold the counts and assemble the retained dataset
  monomorphs       - Detect and remove monomorphic loci
  metrics          - Recalculate locus metrics
  report_pa        - End-to-end run and report outputs
"""

from paprov.popgen.size_filter import partition_by_size, PopulationPartition
from paprov.popgen.private_alleles import count_private_alleles, private_allele_mask
from paprov.popgen.candidates import (
    prepare_focal,
    select_candidates,
    assemble_candidate_set,
)
from paprov.popgen.monomorphs import filter_monomorphs, find_monomorphs
from paprov.popgen.report_pa import report_private_alleles, run_report_pa

__all__ = [
    "partition_by_size",
    "PopulationPartition",
    "count_private_alleles",
    "private_allele_mask",
    "prepare_focal",
    "select_candidates",
    "assemble_candidate_set",
    "filter_monomorphs",
    "find_monomorphs",
    "report_private_alleles",
    "run_report_pa",
]
