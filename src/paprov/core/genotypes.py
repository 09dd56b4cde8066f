"""
Genotype file operations.

Reads genotype matrices into a ``GenotypeStore`` and writes them back out.
Two input formats are supported:

  - Genotype TSV: one row per individual, an ``id`` column, an optional
    ``pop`` column, and one column per locus holding 0/1/2 (``NA`` missing)
  - VCF: biallelic SNPs read with cyvcf2; populations come from a popmap

Only biallelic SNPs are kept from VCF input; indels and multi-allelic
records are skipped because the 0/1/2 coding cannot represent them.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional
import logging

import numpy as np
import pandas as pd

from paprov.core.errors import PaprovError
from paprov.core.models import GenotypeStore
from paprov.core.result import Result, Ok, Err

logger = logging.getLogger(__name__)

# Tokens read as a missing call in genotype TSV files
MISSING_TOKENS = ["NA", "", "-", ".", "nan", "NaN", "-9"]

VCF_SUFFIXES = (".vcf", ".vcf.gz", ".bcf")


def is_vcf_path(path: Path) -> bool:
    name = path.name.lower()
    return any(name.endswith(s) for s in VCF_SUFFIXES)


def read_popmap(path: Path | str) -> Result[Dict[str, str], str]:
    """
    Read a two-column, whitespace-separated sample -> population map.

    Lines starting with '#' are ignored.
    """
    path = Path(path)
    if not path.exists():
        return Err(f"Popmap not found: {path}")
    try:
        df = pd.read_csv(
            path, sep=r"\s+", header=None, names=["sample", "pop"],
            dtype=str, comment="#",
        )
    except Exception as e:
        return Err(f"Failed to read popmap: {e}")

    if df["pop"].isna().any():
        bad = df.loc[df["pop"].isna(), "sample"].tolist()
        return Err(f"Popmap lines without a population: {bad}")
    if df["sample"].duplicated().any():
        dupes = df.loc[df["sample"].duplicated(), "sample"].tolist()
        return Err(f"Samples listed more than once in popmap: {dupes}")

    return Ok(dict(zip(df["sample"], df["pop"])))


def read_loc_metrics(path: Path | str) -> Result[pd.DataFrame, str]:
    """Read a per-locus metrics table (TSV with header, one row per locus)."""
    path = Path(path)
    if not path.exists():
        return Err(f"Locus metrics file not found: {path}")
    try:
        return Ok(pd.read_csv(path, sep="\t"))
    except Exception as e:
        return Err(f"Failed to read locus metrics: {e}")


def read_genotype_tsv(
    path: Path | str,
    id_column: str = "id",
    pop_column: str = "pop",
    popmap: Optional[Dict[str, str]] = None,
    loc_metrics: Optional[pd.DataFrame] = None,
) -> Result[GenotypeStore, str]:
    """
    Load a genotype TSV file.

    Args:
        path: Path to TSV file
        id_column: Column holding individual labels
        pop_column: Column holding population labels (optional in the file)
        popmap: Sample -> population map; takes precedence over ``pop_column``
        loc_metrics: Optional per-locus metadata table

    Returns:
        Ok(GenotypeStore) on success, Err(message) on failure
    """
    path = Path(path)
    if not path.exists():
        return Err(f"File not found: {path}")

    try:
        header = pd.read_csv(path, sep="\t", nrows=0).columns
        # missing-call tokens apply to locus columns only
        na_values = {
            col: MISSING_TOKENS for col in header if col not in (id_column, pop_column)
        }
        df = pd.read_csv(path, sep="\t", dtype=str, na_values=na_values,
                         keep_default_na=False)
    except Exception as e:
        return Err(f"Failed to read genotype TSV: {e}")

    if id_column not in df.columns:
        return Err(f"Missing required column: {id_column}")

    df = df.set_index(id_column)
    populations = None
    if pop_column in df.columns:
        populations = df.pop(pop_column)
        if populations.isna().any() or (populations.str.strip() == "").any():
            return Err(f"Empty population labels in column '{pop_column}'")

    if popmap is not None:
        missing = [ind for ind in df.index if ind not in popmap]
        if missing:
            return Err(f"Individuals missing from popmap: {missing}")
        populations = pd.Series(popmap).reindex(df.index)

    try:
        calls = df.apply(pd.to_numeric)
    except (TypeError, ValueError) as e:
        return Err(f"Non-numeric genotype calls: {e}")

    try:
        store = GenotypeStore(calls, populations=populations, loc_metrics=loc_metrics)
    except PaprovError as e:
        return Err(str(e))

    logger.info(
        f"Loaded {store.n_individuals} individuals x {store.n_loci} loci from {path}"
    )
    return Ok(store)


def read_vcf_genotypes(
    vcf_path: Path | str,
    popmap: Optional[Dict[str, str]] = None,
) -> Result[GenotypeStore, str]:
    """
    Load biallelic SNP genotypes from a VCF file.

    Calls are coded as the number of alternate alleles (0/1/2). Loci are
    named ``chrom:pos`` and their ``chrom``, ``pos``, ``ref``, ``alt`` are
    kept as locus metrics.

    Args:
        vcf_path: Path to VCF/BCF file (compressed or not)
        popmap: Sample -> population map; every sample must be listed

    Returns:
        Ok(GenotypeStore) on success, Err(message) on failure
    """
    from cyvcf2 import VCF

    try:
        # gts012: 0=HOM_REF, 1=HET, 2=HOM_ALT, 3=UNKNOWN
        vcf = VCF(str(vcf_path), gts012=True)
    except Exception as e:
        return Err(f"Failed to read VCF: {e}")

    samples = list(vcf.samples)
    columns = []
    records = []
    skipped = 0

    try:
        for variant in vcf:
            if (
                len(variant.REF) != 1
                or len(variant.ALT) != 1
                or len(variant.ALT[0]) != 1
            ):
                skipped += 1
                continue
            calls = variant.gt_types.astype(float)
            calls[calls == 3] = np.nan
            columns.append(calls)
            records.append({
                "chrom": variant.CHROM,
                "pos": variant.POS,
                "ref": variant.REF,
                "alt": variant.ALT[0],
            })
    except Exception as e:
        return Err(f"Failed while parsing VCF records: {e}")
    finally:
        vcf.close()

    if skipped:
        logger.info(f"Skipped {skipped} non-biallelic or indel records")

    matrix = np.column_stack(columns) if columns else np.empty((len(samples), 0))
    metrics = pd.DataFrame(records, columns=["chrom", "pos", "ref", "alt"])
    loci = [f"{r['chrom']}:{r['pos']}" for r in records]

    populations = None
    if popmap is not None:
        missing = [s for s in samples if s not in popmap]
        if missing:
            return Err(f"Samples missing from popmap: {missing}")
        populations = [popmap[s] for s in samples]

    try:
        store = GenotypeStore(
            pd.DataFrame(matrix, index=samples, columns=loci),
            populations=populations,
            loc_metrics=metrics,
        )
    except PaprovError as e:
        return Err(str(e))

    logger.info(
        f"Loaded {store.n_individuals} samples x {store.n_loci} SNPs from {vcf_path}"
    )
    return Ok(store)


def read_genotypes(
    path: Path | str,
    popmap_path: Optional[Path] = None,
    loc_metrics_path: Optional[Path] = None,
) -> Result[GenotypeStore, str]:
    """Load genotypes choosing the reader from the file suffix."""
    path = Path(path)

    popmap = None
    if popmap_path is not None:
        popmap_result = read_popmap(popmap_path)
        if popmap_result.is_err():
            return popmap_result
        popmap = popmap_result.unwrap()

    if is_vcf_path(path):
        if loc_metrics_path is not None:
            logger.warning("Locus metrics file ignored for VCF input")
        return read_vcf_genotypes(path, popmap=popmap)

    metrics = None
    if loc_metrics_path is not None:
        metrics_result = read_loc_metrics(loc_metrics_path)
        if metrics_result.is_err():
            return metrics_result
        metrics = metrics_result.unwrap()

    return read_genotype_tsv(path, popmap=popmap, loc_metrics=metrics)


def write_genotype_tsv(store: GenotypeStore, path: Path | str) -> Result[Path, str]:
    """
    Save a store as genotype TSV (``id``, ``pop``, then one column per locus).

    When the store carries locus metrics they are written next to it as
    ``<stem>.loc_metrics.tsv``.
    """
    try:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        store.to_frame().to_csv(path, sep="\t", na_rep="NA")

        metrics = store.loc_metrics
        if metrics is not None:
            metrics_path = path.with_name(path.name.rsplit(".", 1)[0] + ".loc_metrics.tsv")
            metrics.to_csv(metrics_path, sep="\t", index=False)
        return Ok(path)
    except Exception as e:
        return Err(f"Failed to write genotype TSV: {e}")
