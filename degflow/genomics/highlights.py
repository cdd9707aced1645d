"""
Selection of genes of interest for visual emphasis
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

import pandas as pd

from ..exceptions import MalformedInputError

logger = logging.getLogger(__name__)


def select_highlights(
    table: pd.DataFrame, gene_ids: Iterable[str], key: str = "gene_id"
) -> pd.DataFrame:
    """
    Rows whose gene id is in ``gene_ids``, in original row order

    Requested ids absent from the table are silently left out; use
    ``missing_highlights`` for a completeness check.
    """
    if key not in table.columns:
        raise MalformedInputError("Highlight key column missing", column=key)

    wanted = set(str(g) for g in gene_ids)
    mask = table[key].astype(str).isin(wanted)
    return table.loc[mask].copy()


def missing_highlights(
    table: pd.DataFrame, gene_ids: Iterable[str], key: str = "gene_id"
) -> List[str]:
    """Requested ids that do not occur in ``table``, sorted"""
    present = set(table[key].astype(str))
    return sorted(set(str(g) for g in gene_ids) - present)


@dataclass(frozen=True)
class HighlightSet:
    """Named, ordered collection of genes to emphasize in one rendering pass"""

    name: str
    gene_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        ordered = tuple(dict.fromkeys(str(g) for g in self.gene_ids))
        object.__setattr__(self, "gene_ids", ordered)

    def __len__(self) -> int:
        return len(self.gene_ids)

    def __contains__(self, gene_id: object) -> bool:
        return gene_id in self.gene_ids

    def select(self, table: pd.DataFrame, key: str = "gene_id") -> pd.DataFrame:
        selected = select_highlights(table, self.gene_ids, key=key)

        missing = missing_highlights(table, self.gene_ids, key=key)
        if missing:
            logger.info(
                f"Highlight set '{self.name}': {len(missing)} genes not in table "
                f"({', '.join(missing[:10])})"
            )

        return selected
