"""Shared fixtures: small DE and expression tables written to tmp_path."""

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from degflow.config import RunConfig


DE_ROWS = [
    ("GeneX|ENSG0001|protein_coding", 1.2, 0.01, 5.1),
    ("GeneY|ENSG0002|protein_coding", -0.7, 0.03, 3.3),
    ("GeneZ|ENSG0003|lncRNA", 0.1, 0.2, 2.0),
    ("GeneW|ENSG0004|protein_coding", "", 0.01, 1.5),
    ("GeneV|ENSG0005|protein_coding", 2.5, 0.001, 7.2),
    ("GeneU|ENSG0006|protein_coding", -1.8, 0.04, 4.4),
]

EXPRESSION_ROWS = [
    ("GeneX|ENSG0001", 10.0, 12.0, 30.0, 34.0),
    ("GeneY|ENSG0002", 20.0, 22.0, 12.0, 11.0),
    ("GeneZ|ENSG0003", 5.0, 5.0, 5.5, 5.0),
    ("GeneV|ENSG0005", 1.0, 2.0, 9.0, 11.0),
    ("GeneU|ENSG0006", 40.0, 44.0, 12.0, 13.0),
    ("GeneT|ENSG0007", 3.0, 3.0, 3.0, 3.0),
]

GROUPS = {"ctrl": ["ctrl_1", "ctrl_2"], "treat": ["treat_1", "treat_2"]}


def write_tsv(path, header, rows):
    lines = ["\t".join(header)]
    lines += ["\t".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def de_file(tmp_path):
    return write_tsv(tmp_path / "de.tsv", ["gene", "logFC", "FDR", "logCPM"], DE_ROWS)


@pytest.fixture
def expression_file(tmp_path):
    return write_tsv(
        tmp_path / "expression.tsv",
        ["gene", "ctrl_1", "ctrl_2", "treat_1", "treat_2"],
        EXPRESSION_ROWS,
    )


@pytest.fixture
def comparison_file(tmp_path):
    rows = [
        ("GeneX", 1.0, 0.02, 5.0),
        ("GeneU", -2.0, 0.01, 4.0),
        ("GeneS", 3.0, 0.001, 6.0),
        ("GeneZ", 0.2, 0.5, 2.0),
    ]
    return write_tsv(
        tmp_path / "comparison.tsv", ["gene", "logFC", "FDR", "logCPM"], rows
    )


@pytest.fixture
def run_config(tmp_path, de_file, expression_file, comparison_file):
    return RunConfig(
        project_name="test_run",
        output_dir=str(tmp_path / "out"),
        de_file=str(de_file),
        expression_file=str(expression_file),
        comparison_file=str(comparison_file),
        expression={"groups": GROUPS},
        visualization={"highlight_genes": ["GeneX", "GeneU", "NotAGene"], "dpi": 50},
    )


@pytest.fixture
def scenario_table():
    """The three-gene example: one up, one down, one not significant."""
    return pd.DataFrame(
        {
            "gene_id": ["GeneX", "GeneY", "GeneZ"],
            "log2_fold_change": [1.2, -0.7, 0.1],
            "adjusted_p_value": [0.01, 0.03, 0.2],
        }
    )
