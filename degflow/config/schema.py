"""
Column-position contracts for input tables

Some pipeline exports ship headers that differ between batches (separator
characters, group naming). A ColumnSchema pins the expected column count and
maps positions to canonical names so a batch with a different layout fails
at load time instead of being silently mislabeled.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence

from ..exceptions import MalformedInputError

logger = logging.getLogger(__name__)


@dataclass
class ColumnSchema:
    """Versioned column-position contract for a delimited table"""

    name: str
    expected_columns: int
    positions: Dict[int, str] = field(default_factory=dict)
    version: str = "1"

    def __post_init__(self):
        # YAML/JSON keys arrive as strings
        self.positions = {int(k): str(v) for k, v in self.positions.items()}

    def validate(self, columns: Sequence[str]) -> None:
        """Fail loudly when the header does not match the contract"""
        if len(columns) != self.expected_columns:
            raise MalformedInputError(
                f"Schema {self.name} v{self.version} expects "
                f"{self.expected_columns} columns, found {len(columns)}"
            )

        out_of_range = [i for i in self.positions if i < 0 or i >= len(columns)]
        if out_of_range:
            raise MalformedInputError(
                f"Schema {self.name} v{self.version} references positions "
                f"{sorted(out_of_range)} outside the header"
            )

        new_names = list(self.positions.values())
        duplicated = sorted({n for n in new_names if new_names.count(n) > 1})
        if duplicated:
            raise MalformedInputError(
                f"Schema {self.name} v{self.version} assigns duplicate names: "
                f"{duplicated}"
            )

    def to_renames(self, columns: Sequence[str]) -> Dict[str, str]:
        """Translate positions into a name-based rename mapping"""
        self.validate(columns)
        renames = {columns[i]: new for i, new in sorted(self.positions.items())}
        logger.debug(f"Schema {self.name} v{self.version} renames: {renames}")
        return renames

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "expected_columns": self.expected_columns,
            "positions": dict(self.positions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnSchema":
        return cls(
            name=data["name"],
            expected_columns=int(data["expected_columns"]),
            positions=data.get("positions", {}),
            version=str(data.get("version", "1")),
        )

