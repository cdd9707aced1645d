"""
Loading and normalization of gene-level tables

Every table that enters the pipeline goes through ``load_table`` so that the
gene identifier column is named and normalized the same way everywhere; it
is the join key for every downstream view.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import ColumnSchema, RunConfig
from ..exceptions import MalformedInputError

logger = logging.getLogger(__name__)

FC_COLUMN = "log2_fold_change"
P_COLUMN = "adjusted_p_value"


def normalize_gene_ids(ids: pd.Series, delimiter: str = "|") -> pd.Series:
    """Truncate composite annotations at the first delimiter"""
    normalized = ids.astype("string").str.split(delimiter, n=1, regex=False).str[0]
    return normalized.astype("string").str.strip()


def _read_header(path: Path, sep: str) -> List[str]:
    try:
        header = pd.read_csv(path, sep=sep, nrows=0)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise MalformedInputError(f"Could not read table header: {e}", path=path) from e
    except pd.errors.EmptyDataError as e:
        raise MalformedInputError("Table is empty", path=path) from e
    return list(header.columns)


def _coerce_numeric(df: pd.DataFrame, column: str, path: Path) -> pd.Series:
    original = df[column]
    if not pd.api.types.is_numeric_dtype(original):
        original = original.astype(object).str.strip().replace("", np.nan)
    coerced = pd.to_numeric(original, errors="coerce")

    bad = original.notna() & coerced.isna()
    if bad.any():
        examples = original[bad].astype(str).unique()[:3].tolist()
        raise MalformedInputError(
            f"Unparsable numeric values {examples}", path=path, column=column
        )

    return coerced.astype(float)


def load_table(
    path: Union[str, Path],
    column_renames: Optional[Dict[str, str]] = None,
    sep: str = "\t",
    id_column: Optional[str] = "gene_id",
    id_delimiter: str = "|",
    required_columns: Sequence[str] = (),
    numeric_columns: Sequence[str] = (),
    schema: Optional[ColumnSchema] = None,
) -> pd.DataFrame:
    """
    Load a delimited gene-level table

    Args:
        path: Delimited text file with a header row
        column_renames: Mapping of raw column name to canonical name; every
            source column must be present
        sep: Field separator
        id_column: Canonical (post-rename) gene identifier column, or None
        id_delimiter: Identifier values are truncated at its first occurrence
        required_columns: Post-rename columns that must exist
        numeric_columns: Post-rename columns parsed as float
        schema: Optional column-position contract validated before renaming

    Returns:
        Renamed table with normalized identifiers

    Raises:
        MalformedInputError: unreadable file, missing column, bad number
    """
    path = Path(path)
    if not path.is_file():
        raise MalformedInputError("Input file not found", path=path)

    header = _read_header(path, sep)

    renames = {}
    if schema is not None:
        try:
            renames.update(schema.to_renames(header))
        except MalformedInputError as e:
            raise MalformedInputError(str(e), path=path) from e
    renames.update(column_renames or {})

    missing = [col for col in renames if col not in header]
    if missing:
        raise MalformedInputError(
            f"Rename source columns missing: {missing}", path=path, column=missing[0]
        )

    # Read the identifier as text so numeric-looking ids survive intact
    dtype = None
    if id_column is not None:
        id_source = next(
            (src for src, dst in renames.items() if dst == id_column), id_column
        )
        if id_source in header:
            dtype = {id_source: str}

    try:
        df = pd.read_csv(path, sep=sep, dtype=dtype)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise MalformedInputError(f"Could not parse table: {e}", path=path) from e

    df = df.rename(columns=renames)

    required = list(required_columns)
    if id_column is not None and id_column not in required:
        required.insert(0, id_column)
    absent = [col for col in required if col not in df.columns]
    if absent:
        raise MalformedInputError(
            f"Required columns missing after rename: {absent}",
            path=path,
            column=absent[0],
        )

    for column in numeric_columns:
        if column not in df.columns:
            raise MalformedInputError("Numeric column missing", path=path, column=column)
        df[column] = _coerce_numeric(df, column, path)

    if id_column is not None:
        gene_ids = normalize_gene_ids(df[id_column], id_delimiter).fillna("")
        invalid = (gene_ids == "").to_numpy(dtype=bool)
        if invalid.any():
            # +2: header line and 1-based numbering
            rows = (df.index[invalid] + 2).tolist()[:5]
            raise MalformedInputError(
                f"Empty gene identifier on line(s) {rows}",
                path=path,
                column=id_column,
            )
        df[id_column] = gene_ids.astype(str)

    logger.info(f"Loaded {len(df)} rows x {len(df.columns)} columns from {path}")
    return df


def load_de_table(path: Union[str, Path], config: RunConfig) -> pd.DataFrame:
    """Load a differential-expression table using the run configuration"""
    columns = config.columns
    table = load_table(
        path,
        column_renames=columns.get("de_renames"),
        sep=columns.get("separator", "\t"),
        id_column=columns.get("id_column", "gene_id"),
        id_delimiter=columns.get("id_delimiter", "|"),
        required_columns=[FC_COLUMN, P_COLUMN],
        numeric_columns=[FC_COLUMN, P_COLUMN],
        schema=config.column_schema("de"),
    )

    p_values = table[P_COLUMN]
    out_of_range = (p_values < 0) | (p_values > 1)
    if out_of_range.any():
        examples = p_values[out_of_range].unique()[:3].tolist()
        raise MalformedInputError(
            f"Adjusted p-values outside [0, 1]: {examples}",
            path=Path(path),
            column=P_COLUMN,
        )

    return table


def load_expression_table(path: Union[str, Path], config: RunConfig) -> pd.DataFrame:
    """Load an expression-level table (TPM or normalized counts)"""
    columns = config.columns
    value_columns = expression_columns(config.expression.get("groups", {}))
    return load_table(
        path,
        column_renames=columns.get("expression_renames"),
        sep=columns.get("separator", "\t"),
        id_column=columns.get("id_column", "gene_id"),
        id_delimiter=columns.get("id_delimiter", "|"),
        required_columns=value_columns,
        numeric_columns=value_columns,
        schema=config.column_schema("expression"),
    )


def expression_columns(groups: Dict[str, Iterable[str]]) -> List[str]:
    """All sample columns listed across groups, first occurrence order"""
    seen = []
    for columns in groups.values():
        for column in columns:
            if column not in seen:
                seen.append(column)
    return seen


def read_gene_list(path: Union[str, Path], id_delimiter: str = "|") -> List[str]:
    """Read one identifier per line; blank lines and '#' comments are skipped"""
    path = Path(path)
    try:
        lines = path.read_text().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Could not read gene list: {e}", path=path) from e

    genes = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        gene = line.split("\t")[0].split(id_delimiter, 1)[0].strip()
        if gene:
            genes.append(gene)

    logger.info(f"Read {len(genes)} gene identifiers from {path}")
    return genes
