"""
Overlap statistics between two gene lists
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple

import pandas as pd


@dataclass(frozen=True)
class OverlapResult:
    """Set algebra between gene lists A and B"""

    intersection: FrozenSet[str]
    unique_to_a: FrozenSet[str]
    unique_to_b: FrozenSet[str]

    @property
    def count_intersection(self) -> int:
        return len(self.intersection)

    @property
    def count_a(self) -> int:
        return len(self.unique_to_a) + len(self.intersection)

    @property
    def count_b(self) -> int:
        return len(self.unique_to_b) + len(self.intersection)

    @property
    def union(self) -> FrozenSet[str]:
        return self.intersection | self.unique_to_a | self.unique_to_b

    @property
    def jaccard(self) -> float:
        union_size = len(self.union)
        return self.count_intersection / union_size if union_size else 0.0

    def venn_subsets(self) -> Tuple[int, int, int]:
        """(A only, B only, A and B), the order venn2 expects"""
        return (len(self.unique_to_a), len(self.unique_to_b), self.count_intersection)

    def to_frame(self, labels: Tuple[str, str] = ("A", "B")) -> pd.DataFrame:
        """One row per gene with the region it falls in"""
        label_a, label_b = labels
        regions = (
            (f"{label_a} and {label_b}", self.intersection),
            (f"{label_a} only", self.unique_to_a),
            (f"{label_b} only", self.unique_to_b),
        )
        rows = [
            {"gene_id": gene, "region": region}
            for region, genes in regions
            for gene in sorted(genes)
        ]
        return pd.DataFrame(rows, columns=["gene_id", "region"])


def compare_sets(set_a: Iterable[str], set_b: Iterable[str]) -> OverlapResult:
    """Intersection and one-sided complements of two gene lists"""
    a = frozenset(set_a)
    b = frozenset(set_b)
    return OverlapResult(
        intersection=a & b,
        unique_to_a=a - b,
        unique_to_b=b - a,
    )
