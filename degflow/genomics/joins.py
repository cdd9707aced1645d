"""
Left joins of classified results with auxiliary tables, and per-plot views

Each view is an independent snapshot: builders never modify their inputs.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..differential.classifier import LABEL_COLUMN, ClassificationLabel
from ..exceptions import JoinKeyMismatchError, MalformedInputError
from ..io.loader import FC_COLUMN, P_COLUMN
from .expression import BASE_MEAN_COLUMN, expression_matrix, log_expression

logger = logging.getLogger(__name__)

AUX_SUFFIX = "_aux"
MISMATCH_MODES = ("raise", "warn", "ignore")


def join_tables(
    base: pd.DataFrame,
    other: pd.DataFrame,
    key: str = "gene_id",
    on_mismatch: str = "warn",
) -> pd.DataFrame:
    """
    Left outer join of ``other`` onto ``base``

    Every base row survives with its values unchanged and in its original
    order; base rows without a match get nulls in the auxiliary columns.
    Duplicate keys multiply rows exactly like a relational left join.

    Args:
        base: Base table
        other: Auxiliary table
        key: Join column present in both tables
        on_mismatch: What to do when both tables are non-empty but share no
            key: "raise" (JoinKeyMismatchError), "warn" or "ignore"
    """
    if on_mismatch not in MISMATCH_MODES:
        raise ValueError(f"on_mismatch must be one of {MISMATCH_MODES}")

    for name, table in (("base", base), ("auxiliary", other)):
        if key not in table.columns:
            raise MalformedInputError(f"Join key missing from {name} table", column=key)

    if len(base) and len(other):
        shared = set(base[key]).intersection(other[key])
        if not shared:
            message = (
                f"No '{key}' values shared between base ({len(base)} rows) and "
                f"auxiliary ({len(other)} rows) tables; check identifier normalization"
            )
            if on_mismatch == "raise":
                raise JoinKeyMismatchError(message, key=key)
            if on_mismatch == "warn":
                logger.warning(message)

    n_dup_other = int(other[key].duplicated().sum())
    if n_dup_other:
        logger.warning(
            f"Auxiliary table has {n_dup_other} duplicate '{key}' values; "
            f"matching base rows will be repeated"
        )

    joined = base.merge(other, on=key, how="left", suffixes=("", AUX_SUFFIX))

    if len(joined) != len(base):
        logger.info(f"Join expanded {len(base)} base rows to {len(joined)}")

    return joined


def join_all(
    base: pd.DataFrame,
    others: Iterable[pd.DataFrame],
    key: str = "gene_id",
    on_mismatch: str = "warn",
) -> pd.DataFrame:
    """Chain left joins in order"""
    joined = base
    for other in others:
        joined = join_tables(joined, other, key=key, on_mismatch=on_mismatch)
    return joined


def volcano_view(
    classified: pd.DataFrame,
    fc_col: str = FC_COLUMN,
    p_col: str = P_COLUMN,
) -> pd.DataFrame:
    """Classified table plus -log10 adjusted p-value for the y axis"""
    view = classified.copy()
    p = pd.to_numeric(view[p_col], errors="coerce").clip(lower=np.finfo(float).tiny)
    view["neg_log10_p"] = -np.log10(p)
    view[fc_col] = pd.to_numeric(view[fc_col], errors="coerce").fillna(0.0)
    return view


def ma_view(
    classified: pd.DataFrame,
    means: pd.DataFrame,
    key: str = "gene_id",
    pseudocount: float = 1.0,
    on_mismatch: str = "warn",
    fc_col: str = FC_COLUMN,
) -> pd.DataFrame:
    """Classified table joined with mean expression (A value on log2 scale)"""
    if BASE_MEAN_COLUMN not in means.columns:
        raise MalformedInputError("Means table lacks base mean", column=BASE_MEAN_COLUMN)

    view = join_tables(classified, means, key=key, on_mismatch=on_mismatch)
    view["log2_base_mean"] = log_expression(view[BASE_MEAN_COLUMN], pseudocount)
    view[fc_col] = pd.to_numeric(view[fc_col], errors="coerce").fillna(0.0)
    return view


def heatmap_view(
    classified: pd.DataFrame,
    expression: pd.DataFrame,
    columns: List[str],
    gene_ids: Optional[Sequence[str]] = None,
    max_genes: Optional[int] = None,
    key: str = "gene_id",
    pseudocount: float = 1.0,
    scale_rows: bool = True,
    label_col: str = LABEL_COLUMN,
    p_col: str = P_COLUMN,
) -> pd.DataFrame:
    """
    Gene x sample matrix for a clustered heatmap

    Rows are the requested ``gene_ids`` or, by default, the significant genes
    ordered by adjusted p-value and capped at ``max_genes``. Genes are
    looked up by identifier, never by row position.
    """
    if gene_ids is None:
        significant = classified[
            classified[label_col] != ClassificationLabel.NOT_SIGNIFICANT.value
        ]
        significant = significant.sort_values(p_col, kind="mergesort")
        gene_ids = significant[key].drop_duplicates().tolist()
        if max_genes is not None:
            gene_ids = gene_ids[:max_genes]

    wanted = list(dict.fromkeys(str(g) for g in gene_ids))
    matrix = expression_matrix(
        expression,
        columns,
        id_col=key,
        pseudocount=pseudocount,
        scale_rows=scale_rows,
    )
    present = [g for g in wanted if g in matrix.index]
    if len(present) < len(wanted):
        logger.info(
            f"{len(wanted) - len(present)} heatmap genes absent from expression table"
        )

    return matrix.loc[present]


def label_lookup(
    table: pd.DataFrame,
    gene_ids: Iterable[str],
    key: str = "gene_id",
    label_column: Optional[str] = None,
) -> Dict[str, str]:
    """Display label for each requested gene id present in ``table``"""
    wanted = set(str(g) for g in gene_ids)
    rows = table[table[key].astype(str).isin(wanted)].drop_duplicates(subset=key)

    if label_column and label_column in rows.columns:
        labels = rows[label_column].fillna(rows[key]).astype(str)
    else:
        labels = rows[key].astype(str)

    return dict(zip(rows[key].astype(str), labels))
