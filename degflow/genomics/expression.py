"""
Expression-level summaries (group means, log transform, heatmap matrices)
"""

import logging
from typing import Dict, Iterable, List, Sequence, Union

import numpy as np
import pandas as pd
from scipy.stats import zscore

from ..exceptions import MalformedInputError
from ..io.loader import expression_columns

logger = logging.getLogger(__name__)

BASE_MEAN_COLUMN = "base_mean"


def _check_columns(table: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise MalformedInputError(
            f"Expression columns missing: {missing}", column=missing[0]
        )


def compute_group_means(
    table: pd.DataFrame,
    groups: Dict[str, Sequence[str]],
    id_col: str = "gene_id",
) -> pd.DataFrame:
    """
    Per-group and grand mean expression for every gene

    Args:
        table: Expression table with one numeric column per sample
        groups: Group name -> sample columns (at least one per group)
        id_col: Gene identifier column

    Returns:
        DataFrame with ``id_col``, ``mean_<group>`` per group and ``base_mean``
    """
    if not groups:
        raise MalformedInputError("No expression groups configured")

    empty = [name for name, columns in groups.items() if not columns]
    if empty:
        raise MalformedInputError(f"Expression groups without columns: {empty}")

    all_columns = expression_columns(groups)
    _check_columns(table, [id_col] + all_columns)

    means = pd.DataFrame({id_col: table[id_col].to_numpy()}, index=table.index)
    for name, columns in groups.items():
        means[f"mean_{name}"] = table[list(columns)].mean(axis=1)
    means[BASE_MEAN_COLUMN] = table[all_columns].mean(axis=1)

    logger.info(
        f"Computed means for {len(groups)} groups over {len(all_columns)} samples"
    )
    return means.reset_index(drop=True)


def log_expression(
    values: Union[pd.Series, pd.DataFrame, np.ndarray], pseudocount: float = 1.0
):
    """log2(x + pseudocount)"""
    return np.log2(values + pseudocount)


def expression_matrix(
    table: pd.DataFrame,
    columns: List[str],
    id_col: str = "gene_id",
    pseudocount: float = 1.0,
    scale_rows: bool = True,
) -> pd.DataFrame:
    """
    Gene x sample matrix for heatmaps

    Values are log2(x + pseudocount); with ``scale_rows`` each row is
    z-scored over its observed values and rows with zero variance become 0.
    Missing sample values stay NaN.
    """
    _check_columns(table, [id_col] + list(columns))

    matrix = table.set_index(id_col)[list(columns)].astype(float)
    duplicated = matrix.index.duplicated(keep="first")
    if duplicated.any():
        logger.warning(
            f"Keeping first of {int(duplicated.sum())} duplicated genes in matrix"
        )
        matrix = matrix[~duplicated]

    missing = matrix.isna()
    if missing.to_numpy().any():
        logger.warning(
            f"{int(missing.to_numpy().sum())} missing expression values in "
            f"{int(missing.any(axis=1).sum())} genes left as NaN"
        )

    matrix = log_expression(matrix, pseudocount)

    if scale_rows and len(matrix):
        with np.errstate(divide="ignore", invalid="ignore"):
            scaled = zscore(matrix.to_numpy(), axis=1, ddof=1, nan_policy="omit")
        scaled = np.where(missing.to_numpy(), np.nan, np.nan_to_num(scaled, nan=0.0))
        matrix = pd.DataFrame(scaled, index=matrix.index, columns=matrix.columns)

    return matrix
