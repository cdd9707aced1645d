"""
Table loading for DegFlow
"""

from .loader import (FC_COLUMN, P_COLUMN, expression_columns, load_de_table,
                     load_expression_table, load_table, normalize_gene_ids,
                     read_gene_list)

__all__ = [
    "FC_COLUMN",
    "P_COLUMN",
    "load_table",
    "load_de_table",
    "load_expression_table",
    "normalize_gene_ids",
    "expression_columns",
    "read_gene_list",
]
