"""
Clustered expression heatmap
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
import seaborn as sns

from ..config import RunConfig
from .style import apply_style, save_figure

logger = logging.getLogger(__name__)


def create_clustered_heatmap(
    matrix: pd.DataFrame,
    output_file: Union[str, Path],
    config: Optional[RunConfig] = None,
    row_labels: Optional[Dict[str, str]] = None,
    title: Optional[str] = None,
) -> List[Path]:
    """
    Hierarchically clustered heatmap of a gene x sample matrix

    Args:
        matrix: Output of ``heatmap_view`` (index = gene id)
        output_file: Target path
        config: Run configuration
        row_labels: gene id -> text; only these rows get a tick label, and
            every other row is left blank. None labels every row.
        title: Figure title

    Returns:
        Saved file paths
    """
    config = config or RunConfig()
    viz = config.visualization

    if matrix.isna().to_numpy().any():
        # Ward linkage needs complete rows: fill gaps with the row mean
        complete = matrix.dropna(how="all")
        if len(complete) < len(matrix):
            logger.warning(
                f"Dropping {len(matrix) - len(complete)} heatmap genes without values"
            )
        n_filled = int(complete.isna().to_numpy().sum())
        if n_filled:
            logger.warning(f"Filling {n_filled} missing heatmap cells with the row mean")
        matrix = complete.apply(lambda row: row.fillna(row.mean()), axis=1)

    if matrix.empty:
        logger.warning("Heatmap matrix is empty, nothing to plot")
        return []

    if row_labels is None:
        yticklabels = [str(g) for g in matrix.index]
    else:
        yticklabels = [row_labels.get(str(g), "") for g in matrix.index]
        unmatched = set(row_labels) - set(str(g) for g in matrix.index)
        if unmatched:
            logger.info(f"{len(unmatched)} requested heatmap labels not in matrix")

    apply_style()
    scaled = bool(viz.get("heatmap_zscore", True))
    grid = sns.clustermap(
        matrix,
        method="ward",
        metric="euclidean",
        row_cluster=len(matrix) > 1,
        col_cluster=matrix.shape[1] > 1,
        cmap=viz.get("heatmap_cmap", "RdBu_r"),
        center=0 if scaled else None,
        yticklabels=yticklabels,
        xticklabels=True,
        figsize=tuple(viz["heatmap_figsize"]),
        cbar_kws={"label": "Row z-score" if scaled else "log2(expression + 1)"},
    )
    grid.ax_heatmap.set_ylabel("")
    grid.ax_heatmap.tick_params(axis="y", length=0, labelsize=7)
    if title:
        grid.figure.suptitle(title, y=1.02, fontsize=14)

    logger.info(f"Clustered heatmap of {matrix.shape[0]} genes x {matrix.shape[1]} samples")
    return save_figure(grid.figure, output_file, config)
