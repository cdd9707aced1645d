"""
Visualization module for DegFlow

Renders fully joined, fully labeled views produced by ``degflow.genomics``:
volcano and MA plots, clustered heatmaps and proportional Venn diagrams.
"""

from .heatmaps import create_clustered_heatmap
from .style import apply_style, output_paths, save_figure
from .venn import create_venn_diagram
from .volcano import create_ma_plot, create_volcano_plot

__all__ = [
    "create_volcano_plot",
    "create_ma_plot",
    "create_clustered_heatmap",
    "create_venn_diagram",
    "apply_style",
    "output_paths",
    "save_figure",
]
