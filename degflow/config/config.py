"""
Run configuration for DegFlow
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .schema import ColumnSchema

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("png", "pdf", "svg", "jpg", "tiff")
MISMATCH_MODES = ("raise", "warn", "ignore")


@dataclass
class RunConfig:
    """
    Explicit configuration for one analysis run

    Replaces process-wide working directory and plotting options; every
    loader and renderer receives this object instead.
    """

    project_name: str = "DegFlow_Analysis"

    # Input/Output paths
    input_dir: Optional[str] = None
    output_dir: Optional[str] = "degflow_output"
    de_file: Optional[str] = None
    expression_file: Optional[str] = None
    comparison_file: Optional[str] = None
    gene_sets: Optional[Any] = None

    # Sections
    columns: Dict[str, Any] = field(default_factory=dict)
    thresholds: Dict[str, Any] = field(default_factory=dict)
    expression: Dict[str, Any] = field(default_factory=dict)
    enrichment: Dict[str, Any] = field(default_factory=dict)
    visualization: Dict[str, Any] = field(default_factory=dict)
    join: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Fill every section with defaults, keeping user overrides"""
        self.columns = {**self._get_default_columns(), **self.columns}
        self.thresholds = {**self._get_default_thresholds(), **self.thresholds}
        self.expression = {**self._get_default_expression(), **self.expression}
        self.enrichment = {**self._get_default_enrichment(), **self.enrichment}
        self.visualization = {
            **self._get_default_visualization(),
            **self.visualization,
        }
        self.join = {**self._get_default_join(), **self.join}

    def _get_default_columns(self) -> Dict[str, Any]:
        """Default input column handling"""
        return {
            "separator": "\t",
            "id_column": "gene_id",
            "id_delimiter": "|",
            "label_column": None,
            "de_renames": {
                "gene": "gene_id",
                "logFC": "log2_fold_change",
                "FDR": "adjusted_p_value",
            },
            "expression_renames": {"gene": "gene_id"},
            "de_schema": None,
            "expression_schema": None,
        }

    def _get_default_thresholds(self) -> Dict[str, Any]:
        """Default DEG thresholds (|log2FC| >= log2(1.5), padj <= 0.05)"""
        return {
            "fc_threshold": 0.585,
            "p_threshold": 0.05,
        }

    def _get_default_expression(self) -> Dict[str, Any]:
        """Default expression table handling"""
        return {
            "groups": {},
            "pseudocount": 1.0,
        }

    def _get_default_enrichment(self) -> Dict[str, Any]:
        """Default GSEA prerank parameters"""
        return {
            "min_size": 15,
            "max_size": 500,
            "permutation_num": 1000,
            "seed": 42,
            "threads": 1,
            "top_n": 20,
            "p_threshold": 0.05,
        }

    def _get_default_visualization(self) -> Dict[str, Any]:
        """Default plotting options"""
        return {
            "label_colors": {
                "Upregulated": "#D55E00",
                "Downregulated": "#0072B2",
                "NotSignificant": "#BBBBBB",
            },
            "point_size": 8,
            "alpha": 0.7,
            "dpi": 300,
            "save_formats": ["png"],
            "volcano_figsize": [7, 6],
            "ma_figsize": [7, 6],
            "heatmap_figsize": [8, 10],
            "dotplot_figsize": [8, 8],
            "venn_figsize": [6, 6],
            "heatmap_cmap": "RdBu_r",
            "heatmap_max_genes": 50,
            "heatmap_zscore": True,
            "highlight_genes": [],
            "venn_labels": ["Primary", "Comparison"],
            "venn_colors": ["#E69F00", "#56B4E9"],
        }

    def _get_default_join(self) -> Dict[str, Any]:
        return {"on_mismatch": "warn"}

    def column_schema(self, table: str) -> Optional[ColumnSchema]:
        """ColumnSchema for 'de' or 'expression', if one is configured"""
        data = self.columns.get(f"{table}_schema")
        if not data:
            return None
        if isinstance(data, ColumnSchema):
            return data
        return ColumnSchema.from_dict(data)

    def resolve_path(self, path: Optional[Union[str, Path]]) -> Optional[Path]:
        """Resolve a configured path against input_dir"""
        if path is None:
            return None
        path = Path(path)
        if path.is_absolute() or self.input_dir is None:
            return path
        return Path(self.input_dir) / path

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir or ".")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_file: Union[str, Path]) -> RunConfig:
    """Load configuration from YAML or JSON file"""
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            config_dict = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return RunConfig(**(config_dict or {}))


def save_config(config: RunConfig, output_file: Union[str, Path]) -> None:
    """Save configuration to YAML or JSON, chosen by suffix"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.to_dict()

    with open(output_path, "w") as f:
        if output_path.suffix.lower() == ".json":
            json.dump(config_dict, f, indent=2)
        else:
            yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {output_path}")


def validate_config(config: RunConfig) -> List[str]:
    """Validate configuration and return list of issues"""
    issues = []

    if config.input_dir and not Path(config.input_dir).exists():
        issues.append(f"Input directory does not exist: {config.input_dir}")

    for name in ("de_file", "expression_file", "comparison_file"):
        value = getattr(config, name)
        if value and not config.resolve_path(value).exists():
            issues.append(f"{name} does not exist: {config.resolve_path(value)}")

    fc_threshold = config.thresholds.get("fc_threshold")
    if not isinstance(fc_threshold, (int, float)) or fc_threshold <= 0:
        issues.append("thresholds.fc_threshold must be a positive number")

    p_threshold = config.thresholds.get("p_threshold")
    if not isinstance(p_threshold, (int, float)) or not 0 < p_threshold <= 1:
        issues.append("thresholds.p_threshold must be in (0, 1]")

    groups = config.expression.get("groups") or {}
    if config.expression_file and not groups:
        issues.append("expression.groups must list columns when expression_file is set")
    for group, columns in groups.items():
        if not columns:
            issues.append(f"Expression group '{group}' has no columns")

    formats = config.visualization.get("save_formats") or []
    unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
    if not formats:
        issues.append("visualization.save_formats must not be empty")
    if unknown:
        issues.append(f"Unsupported save formats: {unknown}")

    if config.join.get("on_mismatch") not in MISMATCH_MODES:
        issues.append(f"join.on_mismatch must be one of {MISMATCH_MODES}")

    for table in ("de", "expression"):
        try:
            config.column_schema(table)
        except (KeyError, TypeError, ValueError) as e:
            issues.append(f"Invalid columns.{table}_schema: {e}")

    return issues


def get_default_config() -> RunConfig:
    """Get default configuration object"""
    return RunConfig()
