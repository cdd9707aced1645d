"""
Dot plot of GSEA results
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..config import RunConfig
from ..visualization.style import apply_style, save_figure
from .gsea import select_top_gene_sets

logger = logging.getLogger(__name__)


def plot_gsea_dotplot(
    results: pd.DataFrame,
    output_file: Union[str, Path],
    config: Optional[RunConfig] = None,
    top_n: Optional[int] = None,
    title: Optional[str] = None,
) -> List[Path]:
    """
    Dot plot of the top gene sets

    x = NES, y = gene set, dot size = leading-edge gene count,
    colour = adjusted p-value.

    Parameters:
    -----------
    results : pd.DataFrame
        Output of ``process_gsea_results``
    output_file : str or Path
        Target path
    config : RunConfig
        Supplies ``enrichment.top_n``/``p_threshold`` and figure options
    top_n : int
        Override for the number of gene sets shown

    Returns:
    --------
    List[Path]
        Saved file paths
    """
    config = config or RunConfig()
    params = config.enrichment
    top_n = top_n or params.get("top_n", 20)

    plot_df = select_top_gene_sets(results, top_n, params.get("p_threshold", 0.05))
    if plot_df.empty:
        logger.warning("No significant gene sets available for dotplot")
        return []

    # Highest NES at the top
    plot_df = plot_df.iloc[::-1].reset_index(drop=True)
    y_positions = np.arange(len(plot_df))

    apply_style()
    width, height = config.visualization["dotplot_figsize"]
    fig, ax = plt.subplots(figsize=(width, max(height, len(plot_df) * 0.35)))

    sizes = plot_df["core_member_count"].clip(lower=1) * 8
    scatter = ax.scatter(
        plot_df["normalized_enrichment_score"],
        y_positions,
        s=sizes,
        c=plot_df["adjusted_p_value"],
        cmap="viridis_r",
        edgecolors="black",
        linewidths=0.5,
    )

    ax.axvline(x=0, color="grey", linewidth=0.8, linestyle="--")
    ax.set_yticks(y_positions)
    ax.set_yticklabels(
        [
            label if len(label) <= 50 else f"{label[:47]}..."
            for label in plot_df["display_label"]
        ],
        fontsize=9,
    )
    ax.set_xlabel("Normalized enrichment score", fontsize=12)
    ax.set_title(title or "Gene set enrichment", fontsize=14, fontweight="bold")

    cbar = fig.colorbar(scatter, ax=ax, pad=0.02)
    cbar.set_label("Adjusted p-value")

    handles, labels = scatter.legend_elements(
        prop="sizes", num=4, func=lambda s: s / 8, fmt="{x:.0f}"
    )
    ax.legend(
        handles,
        labels,
        title="Core genes",
        bbox_to_anchor=(1.25, 1),
        loc="upper left",
        frameon=False,
    )

    fig.tight_layout()
    logger.info(f"Dotplot of {len(plot_df)} gene sets")
    return save_figure(fig, output_file, config)
