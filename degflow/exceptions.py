"""
Exception types for DegFlow
"""

from pathlib import Path
from typing import Optional, Union


class DegFlowError(Exception):
    """Base class for all DegFlow errors"""


class MalformedInputError(DegFlowError):
    """Input table is unreadable, missing a required column, or not numeric"""

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        column: Optional[str] = None,
    ):
        self.path = Path(path) if path is not None else None
        self.column = column

        details = []
        if self.path is not None:
            details.append(f"file={self.path}")
        if column is not None:
            details.append(f"column={column}")

        if details:
            message = f"{message} ({', '.join(details)})"

        super().__init__(message)


class JoinKeyMismatchError(DegFlowError):
    """A join between two non-empty tables matched no keys"""

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)
