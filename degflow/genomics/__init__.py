"""
Gene-level table operations for DegFlow

This module provides functionality for:
- Per-group and grand mean expression
- Left joins of classified results with auxiliary tables
- Per-plot views (volcano, MA, heatmap)
- Highlight gene selection by identifier
- Overlap statistics between gene lists
"""

from .expression import (BASE_MEAN_COLUMN, compute_group_means,
                         expression_matrix, log_expression)
from .highlights import HighlightSet, missing_highlights, select_highlights
from .joins import (heatmap_view, join_all, join_tables, label_lookup,
                    ma_view, volcano_view)
from .overlap import OverlapResult, compare_sets

__all__ = [
    "BASE_MEAN_COLUMN",
    "compute_group_means",
    "expression_matrix",
    "log_expression",
    "join_tables",
    "join_all",
    "volcano_view",
    "ma_view",
    "heatmap_view",
    "label_lookup",
    "HighlightSet",
    "select_highlights",
    "missing_highlights",
    "OverlapResult",
    "compare_sets",
]
