"""
Gene set enrichment for DegFlow

This module provides:
- Deduplicated, stably sorted rankings for preranked GSEA
- A gseapy prerank bridge (the statistics stay in gseapy)
- Post-processing of the result table (hit ratio, display labels)
- Dot plot visualization of the top gene sets
"""

from .gsea import (EnrichmentResult, clean_gene_set_label, prepare_ranking,
                   process_gsea_results, run_prerank, select_top_gene_sets)
from .visualization import plot_gsea_dotplot

__all__ = [
    "EnrichmentResult",
    "prepare_ranking",
    "run_prerank",
    "process_gsea_results",
    "clean_gene_set_label",
    "select_top_gene_sets",
    "plot_gsea_dotplot",
]
