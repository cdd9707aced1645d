"""
Differential expression classification for DegFlow

Labels genes as upregulated, downregulated or not significant from
fold-change and adjusted p-value thresholds, and derives the signed
significance score used to rank genes for GSEA.
"""

from .classifier import (DEFAULT_FC_THRESHOLD, DEFAULT_P_THRESHOLD,
                         LABEL_COLUMN, SCORE_COLUMN, ClassificationLabel,
                         ClassificationSummary, classify, rank_genes,
                         ranking_score, significant_genes,
                         summarize_classification)

__all__ = [
    "ClassificationLabel",
    "ClassificationSummary",
    "classify",
    "ranking_score",
    "rank_genes",
    "summarize_classification",
    "significant_genes",
    "DEFAULT_FC_THRESHOLD",
    "DEFAULT_P_THRESHOLD",
    "LABEL_COLUMN",
    "SCORE_COLUMN",
]
