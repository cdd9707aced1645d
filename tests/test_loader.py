"""Tests for table loading and identifier normalization."""

import pandas as pd
import pytest

from degflow.config import ColumnSchema, RunConfig
from degflow.exceptions import MalformedInputError
from degflow.io import (load_de_table, load_expression_table, load_table,
                        normalize_gene_ids, read_gene_list)

from .conftest import GROUPS, write_tsv

DE_RENAMES = {"gene": "gene_id", "logFC": "log2_fold_change", "FDR": "adjusted_p_value"}


def test_normalize_gene_ids_truncates_at_first_pipe():
    ids = pd.Series(["TP53|ENSG0001|protein_coding", "BRCA1", " MYC |x", None])

    result = normalize_gene_ids(ids)

    assert result.iloc[0] == "TP53"
    assert result.iloc[1] == "BRCA1"
    assert result.iloc[2] == "MYC"
    assert pd.isna(result.iloc[3])


def test_load_table_renames_and_normalizes(de_file):
    df = load_table(
        de_file,
        DE_RENAMES,
        numeric_columns=["log2_fold_change", "adjusted_p_value"],
    )

    assert list(df.columns) == ["gene_id", "log2_fold_change", "adjusted_p_value", "logCPM"]
    assert df["gene_id"].tolist() == ["GeneX", "GeneY", "GeneZ", "GeneW", "GeneV", "GeneU"]
    assert df["log2_fold_change"].iloc[0] == pytest.approx(1.2)


def test_load_table_keeps_null_fold_change(de_file):
    df = load_table(de_file, DE_RENAMES, numeric_columns=["log2_fold_change"])

    assert pd.isna(df.loc[df["gene_id"] == "GeneW", "log2_fold_change"].iloc[0])


def test_load_table_missing_rename_source(de_file):
    with pytest.raises(MalformedInputError) as excinfo:
        load_table(de_file, {"log2FoldChange": "log2_fold_change", "gene": "gene_id"})

    assert excinfo.value.column == "log2FoldChange"
    assert excinfo.value.path == de_file
    assert "de.tsv" in str(excinfo.value)


def test_load_table_missing_required_column(de_file):
    with pytest.raises(MalformedInputError, match="Required columns missing"):
        load_table(de_file, {"gene": "gene_id"}, required_columns=["log2_fold_change"])


def test_load_table_missing_file(tmp_path):
    with pytest.raises(MalformedInputError, match="not found"):
        load_table(tmp_path / "absent.tsv")


def test_load_table_empty_file(tmp_path):
    empty = tmp_path / "empty.tsv"
    empty.write_text("")

    with pytest.raises(MalformedInputError, match="empty"):
        load_table(empty)


def test_load_table_unparsable_number(tmp_path):
    path = write_tsv(
        tmp_path / "bad.tsv",
        ["gene", "logFC", "FDR"],
        [("A", "1.0", "0.01"), ("B", "high", "0.02")],
    )

    with pytest.raises(MalformedInputError) as excinfo:
        load_table(path, DE_RENAMES, numeric_columns=["log2_fold_change"])

    assert excinfo.value.column == "log2_fold_change"
    assert "high" in str(excinfo.value)


def test_load_table_rejects_empty_identifier(tmp_path):
    path = write_tsv(
        tmp_path / "blank_id.tsv",
        ["gene", "logFC", "FDR"],
        [("A", "1.0", "0.01"), ("|orphan", "0.5", "0.02")],
    )

    with pytest.raises(MalformedInputError, match="Empty gene identifier"):
        load_table(path, DE_RENAMES)


def test_load_table_keeps_numeric_identifiers_as_text(tmp_path):
    path = write_tsv(
        tmp_path / "entrez.tsv",
        ["gene", "logFC", "FDR"],
        [("007157", "1.0", "0.01"), ("672", "0.5", "0.02")],
    )

    df = load_table(path, DE_RENAMES)

    assert df["gene_id"].tolist() == ["007157", "672"]


def test_load_table_with_column_schema(tmp_path):
    path = write_tsv(
        tmp_path / "positional.tsv",
        ["Geneid", "sgScr-1", "sgScr-2"],
        [("A|x", 1.0, 2.0), ("B|y", 3.0, 4.0)],
    )
    schema = ColumnSchema(
        name="counts",
        expected_columns=3,
        positions={0: "gene_id", 1: "sgScr_1", 2: "sgScr_2"},
    )

    df = load_table(path, schema=schema, numeric_columns=["sgScr_1", "sgScr_2"])

    assert list(df.columns) == ["gene_id", "sgScr_1", "sgScr_2"]
    assert df["gene_id"].tolist() == ["A", "B"]


def test_load_table_schema_column_count_mismatch(tmp_path):
    path = write_tsv(tmp_path / "short.tsv", ["Geneid", "s1"], [("A", 1.0)])
    schema = ColumnSchema(name="counts", expected_columns=3, positions={0: "gene_id"})

    with pytest.raises(MalformedInputError, match="expects 3 columns, found 2"):
        load_table(path, schema=schema)


def test_load_de_table_uses_config(de_file):
    df = load_de_table(de_file, RunConfig())

    assert "log2_fold_change" in df.columns
    assert df["adjusted_p_value"].dtype == float


@pytest.mark.parametrize("bad_p", ["-0.01", "1.5"])
def test_load_de_table_rejects_p_values_outside_unit_interval(tmp_path, bad_p):
    path = write_tsv(
        tmp_path / "de.tsv",
        ["gene", "logFC", "FDR"],
        [("A", "1.0", "0.01"), ("B", "2.0", bad_p), ("C", "0.5", "")],
    )

    with pytest.raises(MalformedInputError) as excinfo:
        load_de_table(path, RunConfig())

    assert excinfo.value.column == "adjusted_p_value"
    assert excinfo.value.path == path
    assert "outside [0, 1]" in str(excinfo.value)


def test_load_de_table_accepts_boundary_p_values(tmp_path):
    path = write_tsv(
        tmp_path / "de.tsv",
        ["gene", "logFC", "FDR"],
        [("A", "1.0", "0"), ("B", "2.0", "1"), ("C", "0.5", "")],
    )

    df = load_de_table(path, RunConfig())

    assert df["adjusted_p_value"].iloc[:2].tolist() == [0.0, 1.0]


def test_load_expression_table_requires_group_columns(expression_file):
    config = RunConfig(expression={"groups": {**GROUPS, "extra": ["missing_col"]}})

    with pytest.raises(MalformedInputError, match="missing_col"):
        load_expression_table(expression_file, config)


def test_read_gene_list_skips_comments_and_blanks(tmp_path):
    path = tmp_path / "genes.txt"
    path.write_text("# header\nTP53|ENSG1\n\nMYC\n  BRCA1  \n")

    assert read_gene_list(path) == ["TP53", "MYC", "BRCA1"]
