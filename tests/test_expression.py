"""Tests for group means and heatmap matrices."""

import numpy as np
import pandas as pd
import pytest

from degflow.config import RunConfig
from degflow.exceptions import MalformedInputError
from degflow.genomics import (compute_group_means, expression_matrix,
                              log_expression)
from degflow.io import load_expression_table

from .conftest import GROUPS

SAMPLES = ["ctrl_1", "ctrl_2", "treat_1", "treat_2"]


@pytest.fixture
def expression(expression_file):
    return load_expression_table(
        expression_file, RunConfig(expression={"groups": GROUPS})
    )


def test_group_means(expression):
    means = compute_group_means(expression, GROUPS)

    assert list(means.columns) == ["gene_id", "mean_ctrl", "mean_treat", "base_mean"]
    gene_x = means.set_index("gene_id").loc["GeneX"]
    assert gene_x["mean_ctrl"] == pytest.approx(11.0)
    assert gene_x["mean_treat"] == pytest.approx(32.0)
    assert gene_x["base_mean"] == pytest.approx(21.5)


def test_group_means_rejects_empty_groups(expression):
    with pytest.raises(MalformedInputError):
        compute_group_means(expression, {})

    with pytest.raises(MalformedInputError, match="without columns"):
        compute_group_means(expression, {"ctrl": ["ctrl_1"], "treat": []})


def test_group_means_missing_sample_column(expression):
    with pytest.raises(MalformedInputError) as excinfo:
        compute_group_means(expression, {"ctrl": ["ctrl_9"]})

    assert excinfo.value.column == "ctrl_9"


def test_log_expression_pseudocount():
    values = pd.Series([0.0, 1.0, 3.0])

    assert log_expression(values).tolist() == [0.0, 1.0, 2.0]
    assert log_expression(values, pseudocount=0.5).iloc[0] == pytest.approx(-1.0)


def test_expression_matrix_rows_are_z_scored(expression):
    matrix = expression_matrix(expression, SAMPLES)

    assert matrix.shape == (6, 4)
    assert np.allclose(matrix.mean(axis=1), 0.0)
    assert matrix.loc["GeneX"].std(ddof=1) == pytest.approx(1.0)


def test_expression_matrix_flat_row_is_zero(expression):
    matrix = expression_matrix(expression, SAMPLES)

    assert (matrix.loc["GeneT"] == 0.0).all()


def test_expression_matrix_unscaled(expression):
    matrix = expression_matrix(expression, SAMPLES, scale_rows=False)

    assert matrix.loc["GeneT", "ctrl_1"] == pytest.approx(2.0)


def test_expression_matrix_keeps_first_duplicate():
    table = pd.DataFrame(
        {"gene_id": ["A", "A"], "s1": [1.0, 7.0], "s2": [3.0, 15.0]}
    )

    matrix = expression_matrix(table, ["s1", "s2"], scale_rows=False)

    assert matrix.index.tolist() == ["A"]
    assert matrix.loc["A"].tolist() == [1.0, 2.0]


def test_expression_matrix_missing_cell_stays_missing(caplog):
    table = pd.DataFrame(
        {
            "gene_id": ["A", "B"],
            "s1": [1.0, 1.0],
            "s2": [7.0, 3.0],
            "s3": [np.nan, 7.0],
        }
    )

    with caplog.at_level("WARNING"):
        matrix = expression_matrix(table, ["s1", "s2", "s3"])

    assert matrix.loc["A", "s1"] == pytest.approx(-0.7071, abs=1e-4)
    assert matrix.loc["A", "s2"] == pytest.approx(0.7071, abs=1e-4)
    assert np.isnan(matrix.loc["A", "s3"])
    assert matrix.loc["B"].tolist() == pytest.approx([-1.0, 0.0, 1.0])
    assert "1 missing expression values" in caplog.text


def test_expression_matrix_unscaled_keeps_missing():
    table = pd.DataFrame({"gene_id": ["A"], "s1": [3.0], "s2": [np.nan]})

    matrix = expression_matrix(table, ["s1", "s2"], scale_rows=False)

    assert matrix.loc["A", "s1"] == pytest.approx(2.0)
    assert np.isnan(matrix.loc["A", "s2"])
