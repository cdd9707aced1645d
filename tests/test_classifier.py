"""Tests for threshold classification and GSEA ranking."""

import numpy as np
import pandas as pd
import pytest

from degflow.differential import (ClassificationLabel, classify, rank_genes,
                                  ranking_score, significant_genes,
                                  summarize_classification)
from degflow.exceptions import MalformedInputError


def _table(fc, p, genes=None):
    genes = genes or [f"G{i}" for i in range(len(fc))]
    return pd.DataFrame(
        {"gene_id": genes, "log2_fold_change": fc, "adjusted_p_value": p}
    )


def test_scenario_labels(scenario_table):
    labeled = classify(scenario_table)

    assert labeled["label"].tolist() == [
        "Upregulated",
        "Downregulated",
        "NotSignificant",
    ]


def test_classify_returns_copy(scenario_table):
    original = scenario_table.copy()

    classify(scenario_table)

    assert "label" not in scenario_table.columns
    pd.testing.assert_frame_equal(scenario_table, original)


def test_thresholds_are_inclusive():
    labeled = classify(_table([0.585, -0.585], [0.05, 0.05]))

    assert labeled["label"].tolist() == ["Upregulated", "Downregulated"]


def test_just_below_fold_change_threshold():
    labeled = classify(_table([0.584999, -0.584999], [0.001, 0.001]))

    assert set(labeled["label"]) == {"NotSignificant"}


def test_just_above_p_threshold():
    labeled = classify(_table([2.0], [0.0500001]))

    assert labeled["label"].iloc[0] == "NotSignificant"


def test_null_fold_change_is_not_significant():
    labeled = classify(_table([np.nan, None], [0.0001, 0.0001]))

    assert set(labeled["label"]) == {ClassificationLabel.NOT_SIGNIFICANT.value}


def test_null_p_value_is_not_significant():
    labeled = classify(_table([3.0], [np.nan]))

    assert labeled["label"].iloc[0] == "NotSignificant"


def test_custom_thresholds():
    table = _table([0.8, 1.5], [0.01, 0.01])

    labeled = classify(table, fc_threshold=1.0, p_threshold=0.01)

    assert labeled["label"].tolist() == ["NotSignificant", "Upregulated"]


def test_classification_is_deterministic(scenario_table):
    first = classify(scenario_table)
    second = classify(scenario_table)

    pd.testing.assert_frame_equal(first, second)


def test_missing_column_raises():
    table = pd.DataFrame({"gene_id": ["A"], "log2_fold_change": [1.0]})

    with pytest.raises(MalformedInputError) as excinfo:
        classify(table)

    assert excinfo.value.column == "adjusted_p_value"


def test_ranking_score_scenario(scenario_table):
    scores = ranking_score(scenario_table)

    assert scores.tolist() == pytest.approx([2.0, -1.5229, 0.699], abs=1e-3)


def test_ranking_score_zero_p_value_is_finite():
    scores = ranking_score(_table([1.0, -1.0], [0.0, 0.0]))

    assert np.isfinite(scores).all()
    assert scores.iloc[0] > 300
    assert scores.iloc[1] < -300


def test_ranking_score_null_fold_change_is_plain_zero():
    scores = ranking_score(_table([np.nan, 0.0], [0.01, 0.01]))

    assert scores.tolist() == [0.0, 0.0]
    assert not np.signbit(scores).any()


def test_rank_genes_scenario_order(scenario_table):
    ranked = rank_genes(scenario_table)

    assert ranked.index.tolist() == ["GeneX", "GeneZ", "GeneY"]
    assert ranked.name == "ranking_score"


def test_rank_genes_ties_keep_input_order():
    table = _table(
        [0.0, 1.0, 0.0, 0.0, -1.0],
        [0.5, 0.01, 0.2, 0.9, 0.01],
        genes=["Z1", "Up", "Z2", "Z3", "Down"],
    )

    ranked = rank_genes(table)

    assert ranked.index.tolist() == ["Up", "Z1", "Z2", "Z3", "Down"]


def test_rank_genes_deduplicates_and_drops_missing_p():
    table = _table(
        [1.0, 2.0, 1.0],
        [0.01, 0.0001, np.nan],
        genes=["A", "A", "B"],
    )

    ranked = rank_genes(table)

    assert ranked.index.tolist() == ["A"]
    assert ranked["A"] == pytest.approx(2.0)


def test_rank_genes_keeps_first_scored_duplicate():
    table = _table(
        [1.0, 1.0, 1.0],
        [np.nan, 0.01, 0.5],
        genes=["A", "A", "B"],
    )

    ranked = rank_genes(table)

    assert ranked.index.tolist() == ["A", "B"]
    assert ranked["A"] == pytest.approx(2.0)
    assert ranked["B"] == pytest.approx(0.30103, abs=1e-4)


def test_summarize_classification(de_file):
    from degflow.config import RunConfig
    from degflow.io import load_de_table

    labeled = classify(load_de_table(de_file, RunConfig()))
    summary = summarize_classification(labeled)

    assert summary.n_tested == 6
    assert summary.n_up == 2
    assert summary.n_down == 2
    assert summary.n_not_significant == 2
    assert summary.n_significant == 4
    assert summary.to_dict()["n_significant"] == 4


def test_significant_genes_by_direction(de_file):
    from degflow.config import RunConfig
    from degflow.io import load_de_table

    labeled = classify(load_de_table(de_file, RunConfig()))

    assert significant_genes(labeled) == {"GeneX", "GeneV", "GeneY", "GeneU"}
    assert significant_genes(labeled, direction="up") == {"GeneX", "GeneV"}
    assert significant_genes(labeled, direction="down") == {"GeneY", "GeneU"}

    with pytest.raises(ValueError):
        significant_genes(labeled, direction="sideways")
