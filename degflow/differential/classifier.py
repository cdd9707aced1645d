"""
Threshold-based classification of differential expression results
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict

import numpy as np
import pandas as pd

from ..exceptions import MalformedInputError
from ..io.loader import FC_COLUMN, P_COLUMN

logger = logging.getLogger(__name__)

DEFAULT_FC_THRESHOLD = 0.585  # log2(1.5)
DEFAULT_P_THRESHOLD = 0.05
LABEL_COLUMN = "label"
SCORE_COLUMN = "ranking_score"


class ClassificationLabel(str, Enum):
    """Direction of a gene's differential expression"""

    UPREGULATED = "Upregulated"
    DOWNREGULATED = "Downregulated"
    NOT_SIGNIFICANT = "NotSignificant"

    def __str__(self) -> str:
        return self.value


@dataclass
class ClassificationSummary:
    """Counts per label for one classified table"""

    n_tested: int
    n_up: int
    n_down: int
    n_not_significant: int
    fc_threshold: float = DEFAULT_FC_THRESHOLD
    p_threshold: float = DEFAULT_P_THRESHOLD

    @property
    def n_significant(self) -> int:
        return self.n_up + self.n_down

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["n_significant"] = self.n_significant
        return data


def _check_columns(table: pd.DataFrame, *columns: str) -> None:
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise MalformedInputError(
            f"Columns required for classification are missing: {missing}",
            column=missing[0],
        )


def classify(
    table: pd.DataFrame,
    fc_col: str = FC_COLUMN,
    p_col: str = P_COLUMN,
    fc_threshold: float = DEFAULT_FC_THRESHOLD,
    p_threshold: float = DEFAULT_P_THRESHOLD,
    label_col: str = LABEL_COLUMN,
) -> pd.DataFrame:
    """
    Label each gene as up, down or not significant

    Both bounds are inclusive. A missing fold change is treated as 0, so such
    genes always end up NotSignificant; a missing p-value never passes the
    significance bound.

    Args:
        table: Gene-level table with fold-change and p-value columns
        fc_col: log2 fold-change column
        p_col: Adjusted p-value column
        fc_threshold: Minimum absolute log2 fold change
        p_threshold: Maximum adjusted p-value
        label_col: Name of the added label column

    Returns:
        Copy of ``table`` with ``label_col`` added
    """
    _check_columns(table, fc_col, p_col)

    fc = pd.to_numeric(table[fc_col], errors="coerce").fillna(0.0)
    p = pd.to_numeric(table[p_col], errors="coerce")

    significant = (p <= p_threshold).fillna(False).to_numpy(dtype=bool)
    up = significant & (fc >= fc_threshold).to_numpy(dtype=bool)
    down = significant & (fc <= -fc_threshold).to_numpy(dtype=bool)

    labels = np.select(
        [up, down],
        [
            ClassificationLabel.UPREGULATED.value,
            ClassificationLabel.DOWNREGULATED.value,
        ],
        default=ClassificationLabel.NOT_SIGNIFICANT.value,
    )

    classified = table.copy()
    classified[label_col] = labels
    return classified


def ranking_score(
    table: pd.DataFrame,
    fc_col: str = FC_COLUMN,
    p_col: str = P_COLUMN,
) -> pd.Series:
    """
    GSEA ranking metric: -log10(p) * sign(fc)

    A missing fold change counts as 0 and sign(0) is 0, so such genes score 0.
    A p-value of exactly 0 is clipped to the smallest positive float.
    Missing p-values give NaN.
    """
    _check_columns(table, fc_col, p_col)

    fc = pd.to_numeric(table[fc_col], errors="coerce").fillna(0.0)
    p = pd.to_numeric(table[p_col], errors="coerce")
    p = p.clip(lower=np.finfo(float).tiny)

    score = -np.log10(p) * np.sign(fc)
    # -0.0 from sign(0) * positive
    score = score.where(score != 0, 0.0)
    score.name = SCORE_COLUMN
    return score


def rank_genes(
    table: pd.DataFrame,
    fc_col: str = FC_COLUMN,
    p_col: str = P_COLUMN,
    id_col: str = "gene_id",
) -> pd.Series:
    """
    Descending, deduplicated ranking indexed by gene id

    The sort is stable: equal scores (including the zero-score block) keep
    their original row order. Rows without a p-value are dropped first, then
    duplicate ids keep their first scored row.
    """
    _check_columns(table, id_col)

    scores = ranking_score(table, fc_col=fc_col, p_col=p_col)
    ranked = pd.Series(scores.to_numpy(), index=table[id_col].astype(str).to_numpy())
    ranked.index.name = id_col
    ranked.name = SCORE_COLUMN

    n_input = len(ranked)
    ranked = ranked.dropna()
    if n_input - len(ranked):
        logger.info(f"Dropped {n_input - len(ranked)} rows without a p-value")

    n_scored = len(ranked)
    ranked = ranked[~ranked.index.duplicated(keep="first")]
    n_duplicates = n_scored - len(ranked)
    if n_duplicates:
        logger.warning(f"Dropped {n_duplicates} duplicate gene ids from ranking")

    return ranked.sort_values(ascending=False, kind="mergesort")


def summarize_classification(
    table: pd.DataFrame,
    label_col: str = LABEL_COLUMN,
    fc_threshold: float = DEFAULT_FC_THRESHOLD,
    p_threshold: float = DEFAULT_P_THRESHOLD,
) -> ClassificationSummary:
    """Count genes per label"""
    _check_columns(table, label_col)

    counts = table[label_col].value_counts()
    return ClassificationSummary(
        n_tested=len(table),
        n_up=int(counts.get(ClassificationLabel.UPREGULATED.value, 0)),
        n_down=int(counts.get(ClassificationLabel.DOWNREGULATED.value, 0)),
        n_not_significant=int(
            counts.get(ClassificationLabel.NOT_SIGNIFICANT.value, 0)
        ),
        fc_threshold=fc_threshold,
        p_threshold=p_threshold,
    )


def significant_genes(
    table: pd.DataFrame,
    label_col: str = LABEL_COLUMN,
    id_col: str = "gene_id",
    direction: str = "both",
) -> set:
    """Gene ids labeled up, down, or either"""
    _check_columns(table, label_col, id_col)

    if direction == "up":
        wanted = {ClassificationLabel.UPREGULATED.value}
    elif direction == "down":
        wanted = {ClassificationLabel.DOWNREGULATED.value}
    elif direction == "both":
        wanted = {
            ClassificationLabel.UPREGULATED.value,
            ClassificationLabel.DOWNREGULATED.value,
        }
    else:
        raise ValueError(f"Unknown direction: {direction}")

    return set(table.loc[table[label_col].isin(wanted), id_col].astype(str))
