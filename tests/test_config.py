"""Tests for run configuration loading and validation."""

import json

import pytest
import yaml

from degflow.config import (ColumnSchema, RunConfig, get_default_config,
                            load_config, save_config, validate_config)
from degflow.exceptions import MalformedInputError


def test_defaults():
    config = get_default_config()

    assert config.thresholds == {"fc_threshold": 0.585, "p_threshold": 0.05}
    assert config.columns["id_delimiter"] == "|"
    assert config.join["on_mismatch"] == "warn"
    assert config.visualization["save_formats"] == ["png"]


def test_sections_merge_with_defaults():
    config = RunConfig(thresholds={"fc_threshold": 1.0}, visualization={"dpi": 72})

    assert config.thresholds == {"fc_threshold": 1.0, "p_threshold": 0.05}
    assert config.visualization["dpi"] == 72
    assert "label_colors" in config.visualization


def test_yaml_round_trip(tmp_path):
    config = RunConfig(project_name="trial", thresholds={"p_threshold": 0.01})
    path = tmp_path / "config.yaml"

    save_config(config, path)
    loaded = load_config(path)

    assert loaded.project_name == "trial"
    assert loaded.thresholds["p_threshold"] == 0.01
    assert yaml.safe_load(path.read_text())["project_name"] == "trial"


def test_save_json_by_suffix(tmp_path):
    path = tmp_path / "config.json"

    save_config(RunConfig(project_name="j"), path)

    assert json.loads(path.read_text())["project_name"] == "j"
    assert load_config(path).project_name == "j"


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")

    bad = tmp_path / "config.toml"
    bad.write_text("x = 1")
    with pytest.raises(ValueError, match="Unsupported"):
        load_config(bad)


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(path).project_name == "DegFlow_Analysis"


def test_resolve_path_against_input_dir(tmp_path):
    config = RunConfig(input_dir=str(tmp_path))

    assert config.resolve_path("de.tsv") == tmp_path / "de.tsv"
    assert config.resolve_path("/abs/de.tsv").as_posix() == "/abs/de.tsv"
    assert config.resolve_path(None) is None


def test_validate_config_clean(run_config):
    assert validate_config(run_config) == []


def test_validate_config_reports_issues(tmp_path):
    config = RunConfig(
        de_file=str(tmp_path / "nope.tsv"),
        expression_file=str(tmp_path / "expr.tsv"),
        thresholds={"fc_threshold": 0, "p_threshold": 1.5},
        visualization={"save_formats": ["png", "bmp"]},
        join={"on_mismatch": "explode"},
        columns={"de_schema": {"name": "broken"}},
    )

    issues = "\n".join(validate_config(config))

    assert "de_file does not exist" in issues
    assert "fc_threshold must be a positive number" in issues
    assert "p_threshold must be in (0, 1]" in issues
    assert "expression.groups must list columns" in issues
    assert "Unsupported save formats: ['bmp']" in issues
    assert "on_mismatch" in issues
    assert "de_schema" in issues


def test_column_schema_from_config():
    config = RunConfig(
        columns={
            "de_schema": {
                "name": "edger",
                "version": 2,
                "expected_columns": 3,
                "positions": {"0": "gene_id", "1": "log2_fold_change"},
            }
        }
    )

    schema = config.column_schema("de")

    assert schema.version == "2"
    assert schema.positions == {0: "gene_id", 1: "log2_fold_change"}
    assert config.column_schema("expression") is None


def test_column_schema_validation():
    schema = ColumnSchema("s", expected_columns=2, positions={0: "a", 1: "a"})

    with pytest.raises(MalformedInputError, match="duplicate names"):
        schema.validate(["x", "y"])

    out_of_range = ColumnSchema("s", expected_columns=2, positions={5: "a"})
    with pytest.raises(MalformedInputError, match="outside the header"):
        out_of_range.validate(["x", "y"])

    assert ColumnSchema.from_dict(schema.to_dict()) == schema
