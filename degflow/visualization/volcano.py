"""
Volcano and MA plots for classified differential expression results
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..config import RunConfig
from ..differential.classifier import LABEL_COLUMN, ClassificationLabel
from ..io.loader import FC_COLUMN
from .style import apply_style, save_figure

logger = logging.getLogger(__name__)

LABEL_ORDER = [
    ClassificationLabel.NOT_SIGNIFICANT,
    ClassificationLabel.DOWNREGULATED,
    ClassificationLabel.UPREGULATED,
]


def _scatter_by_label(
    ax, view: pd.DataFrame, x: str, y: str, config: RunConfig
) -> None:
    viz = config.visualization
    colors = viz["label_colors"]

    # NotSignificant first so DEGs are drawn on top
    for label in LABEL_ORDER:
        subset = view[view[LABEL_COLUMN] == label.value]
        if subset.empty:
            continue
        ax.scatter(
            subset[x],
            subset[y],
            c=colors.get(label.value, "#666666"),
            s=viz["point_size"],
            alpha=viz["alpha"],
            linewidths=0,
            label=f"{label.value} ({len(subset)})",
            rasterized=len(subset) > 5000,
        )


def _annotate_highlights(
    ax,
    highlights: Optional[pd.DataFrame],
    x: str,
    y: str,
    label_column: Optional[str] = None,
) -> None:
    if highlights is None or highlights.empty:
        return

    text_column = (
        label_column if label_column and label_column in highlights else "gene_id"
    )

    ax.scatter(
        highlights[x],
        highlights[y],
        s=30,
        facecolors="none",
        edgecolors="black",
        linewidths=0.8,
        zorder=3,
    )

    for _, row in highlights.iterrows():
        if pd.isna(row[x]) or pd.isna(row[y]):
            continue
        ax.annotate(
            str(row[text_column]),
            xy=(row[x], row[y]),
            xytext=(5, 5),
            textcoords="offset points",
            fontsize=8,
            fontweight="bold",
            bbox=dict(boxstyle="round,pad=0.2", facecolor="white", alpha=0.8),
            arrowprops=dict(arrowstyle="-", color="black", lw=0.5),
        )


def create_volcano_plot(
    view: pd.DataFrame,
    output_file: Union[str, Path],
    config: Optional[RunConfig] = None,
    highlights: Optional[pd.DataFrame] = None,
    title: Optional[str] = None,
    label_column: Optional[str] = None,
) -> List[Path]:
    """
    Volcano plot: log2 fold change against -log10 adjusted p-value

    Args:
        view: Output of ``volcano_view``
        output_file: Target path; without a suffix one file per configured format
        config: Run configuration (thresholds, colours, sizes)
        highlights: Rows to circle and annotate (``select_highlights`` output)
        title: Plot title
        label_column: Column used for annotation text instead of gene_id

    Returns:
        Saved file paths
    """
    config = config or RunConfig()
    fc_threshold = config.thresholds["fc_threshold"]
    p_threshold = config.thresholds["p_threshold"]

    apply_style()
    fig, ax = plt.subplots(figsize=tuple(config.visualization["volcano_figsize"]))

    _scatter_by_label(ax, view, FC_COLUMN, "neg_log10_p", config)

    ax.axvline(x=fc_threshold, color="black", linestyle="--", linewidth=0.8, alpha=0.5)
    ax.axvline(x=-fc_threshold, color="black", linestyle="--", linewidth=0.8, alpha=0.5)
    ax.axhline(
        y=-np.log10(p_threshold), color="black", linestyle="--", linewidth=0.8, alpha=0.5
    )

    _annotate_highlights(ax, highlights, FC_COLUMN, "neg_log10_p", label_column)

    ax.set_xlabel("log2(Fold Change)", fontsize=12)
    ax.set_ylabel("-log10(adjusted p-value)", fontsize=12)
    ax.set_title(title or config.project_name, fontsize=14)
    ax.legend(loc="upper left", frameon=False, fontsize=9)

    fig.tight_layout()
    return save_figure(fig, output_file, config)


def create_ma_plot(
    view: pd.DataFrame,
    output_file: Union[str, Path],
    config: Optional[RunConfig] = None,
    highlights: Optional[pd.DataFrame] = None,
    title: Optional[str] = None,
    label_column: Optional[str] = None,
) -> List[Path]:
    """MA plot: log2 mean expression against log2 fold change"""
    config = config or RunConfig()
    fc_threshold = config.thresholds["fc_threshold"]

    plotted = view.dropna(subset=["log2_base_mean"])
    if len(plotted) < len(view):
        logger.info(
            f"MA plot skips {len(view) - len(plotted)} genes without mean expression"
        )

    apply_style()
    fig, ax = plt.subplots(figsize=tuple(config.visualization["ma_figsize"]))

    _scatter_by_label(ax, plotted, "log2_base_mean", FC_COLUMN, config)

    ax.axhline(y=0, color="black", linewidth=0.8, alpha=0.7)
    ax.axhline(y=fc_threshold, color="black", linestyle="--", linewidth=0.8, alpha=0.5)
    ax.axhline(y=-fc_threshold, color="black", linestyle="--", linewidth=0.8, alpha=0.5)

    if highlights is not None and "log2_base_mean" in highlights:
        highlights = highlights.dropna(subset=["log2_base_mean"])
        _annotate_highlights(ax, highlights, "log2_base_mean", FC_COLUMN, label_column)

    ax.set_xlabel("log2(mean expression + 1)", fontsize=12)
    ax.set_ylabel("log2(Fold Change)", fontsize=12)
    ax.set_title(title or config.project_name, fontsize=14)
    ax.legend(loc="upper right", frameon=False, fontsize=9)

    fig.tight_layout()
    return save_figure(fig, output_file, config)
