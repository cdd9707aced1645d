"""
GSEA preranked input preparation and result post-processing

The enrichment statistics themselves come from gseapy's prerank; this
module prepares a clean ranking for it and turns its result table into a
plot-ready frame.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Union

import gseapy as gp
import numpy as np
import pandas as pd

from ..config import RunConfig
from ..differential.classifier import rank_genes
from ..exceptions import MalformedInputError
from ..io.loader import FC_COLUMN, P_COLUMN

logger = logging.getLogger(__name__)

GeneSets = Union[str, Dict[str, Iterable[str]]]

COLLECTION_PREFIXES = (
    "HALLMARK",
    "GOBP",
    "GOMF",
    "GOCC",
    "GO",
    "KEGG_MEDICUS",
    "KEGG",
    "REACTOME",
    "WP",
    "BIOCARTA",
    "PID",
)

RESULT_COLUMNS = {
    "Term": "gene_set",
    "ES": "enrichment_score",
    "NES": "normalized_enrichment_score",
    "NOM p-val": "nominal_p_value",
    "FDR q-val": "adjusted_p_value",
    "FWER p-val": "fwer_p_value",
    "Lead_genes": "core_members",
}


@dataclass
class EnrichmentResult:
    """Post-processed GSEA prerank output"""

    results_df: pd.DataFrame
    n_ranked_genes: int
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def significant_sets(self) -> int:
        if self.results_df.empty:
            return 0
        p_threshold = self.parameters.get("p_threshold", 0.05)
        return int((self.results_df["adjusted_p_value"] <= p_threshold).sum())


def prepare_ranking(
    table: pd.DataFrame,
    fc_col: str = FC_COLUMN,
    p_col: str = P_COLUMN,
    id_col: str = "gene_id",
) -> pd.Series:
    """Deduplicated ranking sorted descending, ready for prerank"""
    ranking = rank_genes(table, fc_col=fc_col, p_col=p_col, id_col=id_col)
    if ranking.empty:
        raise MalformedInputError("No genes with a usable ranking score")

    logger.info(
        f"Ranked {len(ranking)} genes "
        f"(score range {ranking.iloc[-1]:.2f} to {ranking.iloc[0]:.2f})"
    )
    return ranking


def clean_gene_set_label(name: str) -> str:
    """
    Display label for a gene set name

    ``HALLMARK_INTERFERON_ALPHA_RESPONSE`` becomes ``Interferon alpha response``.
    Names that are not upper-case MSigDB identifiers keep their casing.
    """
    label = str(name).strip()
    # Enrichr-style "Library__Term" or "Library:Term"
    label = re.split(r"__|::", label)[-1]

    for prefix in COLLECTION_PREFIXES:
        if label.upper().startswith(prefix + "_"):
            label = label[len(prefix) + 1 :]
            break

    msigdb_style = label.isupper()
    label = re.sub(r"[_\s]+", " ", label).strip()

    if msigdb_style and label:
        label = label.lower()
        label = label[0].upper() + label[1:]

    return label


def _set_size(tag_percent: Any) -> float:
    """Denominator of gseapy's 'Tag %' ("hits/size")"""
    match = re.match(r"\s*(\d+)\s*/\s*(\d+)", str(tag_percent))
    if not match:
        return np.nan
    return float(match.group(2))


def process_gsea_results(res2d: pd.DataFrame) -> pd.DataFrame:
    """
    Clean the prerank result table for plotting

    Adds ``core_member_count`` (leading-edge genes), ``set_size``,
    ``hit_ratio`` (core members / set size) and ``display_label``; sorts by
    NES, highest first.
    """
    if res2d is None or res2d.empty:
        logger.warning("GSEA returned no gene sets")
        return pd.DataFrame(
            columns=list(RESULT_COLUMNS.values())
            + ["core_member_count", "set_size", "hit_ratio", "display_label"]
        )

    results = res2d.rename(columns=RESULT_COLUMNS).copy()
    if "gene_set" not in results.columns:
        raise MalformedInputError("GSEA results lack a gene set column", column="Term")

    for column in (
        "enrichment_score",
        "normalized_enrichment_score",
        "nominal_p_value",
        "adjusted_p_value",
        "fwer_p_value",
    ):
        if column in results.columns:
            results[column] = pd.to_numeric(results[column], errors="coerce")

    core = results.get("core_members", pd.Series("", index=results.index))
    results["core_member_count"] = (
        core.fillna("")
        .astype(str)
        .map(lambda genes: len([g for g in genes.split(";") if g.strip()]))
    )

    if "Tag %" in results.columns:
        results["set_size"] = results["Tag %"].map(_set_size)
    else:
        results["set_size"] = np.nan

    results["hit_ratio"] = results["core_member_count"] / results["set_size"]
    results["display_label"] = results["gene_set"].map(clean_gene_set_label)

    results = results.sort_values(
        "normalized_enrichment_score", ascending=False, kind="mergesort"
    ).reset_index(drop=True)

    return results


def run_prerank(
    ranking: pd.Series,
    gene_sets: GeneSets,
    config: Optional[RunConfig] = None,
) -> EnrichmentResult:
    """
    Run gseapy prerank on a ranking and post-process the result

    A single blocking call; failures propagate to the caller.
    """
    params = dict((config or RunConfig()).enrichment)

    if isinstance(gene_sets, dict):
        gene_sets = {name: list(genes) for name, genes in gene_sets.items()}
        logger.info(f"Running GSEA prerank against {len(gene_sets)} gene sets")
    else:
        logger.info(f"Running GSEA prerank against {gene_sets}")

    prerank = gp.prerank(
        rnk=ranking,
        gene_sets=gene_sets,
        outdir=None,
        min_size=params["min_size"],
        max_size=params["max_size"],
        permutation_num=params["permutation_num"],
        threads=params.get("threads", 1),
        seed=params["seed"],
        no_plot=True,
        verbose=False,
    )

    results = process_gsea_results(prerank.res2d)
    result = EnrichmentResult(
        results_df=results, n_ranked_genes=len(ranking), parameters=params
    )

    logger.info(
        f"GSEA tested {len(results)} gene sets, "
        f"{result.significant_sets} with adjusted p <= {params.get('p_threshold', 0.05)}"
    )
    return result


def select_top_gene_sets(
    results: pd.DataFrame, top_n: int = 20, p_threshold: float = 0.05
) -> pd.DataFrame:
    """Significant gene sets with the largest |NES|, ordered by NES"""
    if results.empty:
        return results.copy()

    significant = results[results["adjusted_p_value"] <= p_threshold]
    order = significant["normalized_enrichment_score"].abs().sort_values(
        ascending=False, kind="mergesort"
    )
    top = significant.loc[order.index[:top_n]]
    return top.sort_values(
        "normalized_enrichment_score", ascending=False, kind="mergesort"
    )
