"""
Proportional two-set Venn diagram
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import matplotlib.pyplot as plt
from matplotlib_venn import venn2

from ..config import RunConfig
from ..genomics.overlap import OverlapResult
from .style import apply_style, save_figure

logger = logging.getLogger(__name__)


def create_venn_diagram(
    overlap: OverlapResult,
    output_file: Union[str, Path],
    config: Optional[RunConfig] = None,
    labels: Optional[Sequence[str]] = None,
    title: Optional[str] = None,
) -> List[Path]:
    """
    Area-proportional Venn diagram of two gene lists

    Region areas are fit by matplotlib-venn from (|A only|, |B only|, |A and B|).
    """
    config = config or RunConfig()
    viz = config.visualization
    labels = tuple(labels or viz["venn_labels"])
    colors = tuple(viz["venn_colors"])

    apply_style()
    fig, ax = plt.subplots(figsize=tuple(viz["venn_figsize"]))

    subsets = overlap.venn_subsets()
    if sum(subsets) == 0:
        logger.warning("Both gene lists are empty, Venn diagram will be blank")
        ax.text(0.5, 0.5, "No genes", ha="center", va="center", transform=ax.transAxes)
    else:
        diagram = venn2(
            subsets=subsets,
            set_labels=labels,
            set_colors=colors,
            alpha=0.6,
            ax=ax,
        )
        for label in diagram.set_labels or []:
            if label is not None:
                label.set_fontsize(12)

    ax.set_axis_off()
    ax.set_title(
        title or f"{labels[0]} vs {labels[1]} (shared: {overlap.count_intersection})",
        fontsize=13,
    )

    fig.tight_layout()
    return save_figure(fig, output_file, config)
