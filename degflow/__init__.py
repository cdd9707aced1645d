"""
DegFlow: differential expression classification and plotting pipeline

DegFlow loads gene-level differential-expression results from an RNA-seq
pipeline, labels genes by fold-change and significance thresholds, and
prepares consistent joined views for a fixed set of static figures.

Main Components:
- Table loading with identifier normalization
- Up/down/not-significant classification and GSEA ranking scores
- Left joins with expression means and enrichment results
- Highlight gene selection and gene-list overlap statistics
- Volcano, MA, clustered heatmap, GSEA dot plot and Venn figures

Example:
    >>> from degflow import DegFlowAnalysis
    >>> analysis = DegFlowAnalysis(config="config.yaml")
    >>> results = analysis.run_full_pipeline()
"""

import logging
import sys
from importlib import metadata
from typing import Any, Dict

try:
    __version__ = metadata.version("degflow")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0-dev"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

from . import differential, enrichment, genomics, io, utils, visualization
from .config import RunConfig, load_config
from .core import DegFlowAnalysis
from .exceptions import DegFlowError, JoinKeyMismatchError, MalformedInputError
from .utils import setup_logging, validate_environment

__all__ = [
    "__version__",
    "DegFlowAnalysis",
    "RunConfig",
    "load_config",
    "setup_logging",
    "validate_environment",
    "DegFlowError",
    "MalformedInputError",
    "JoinKeyMismatchError",
    "io",
    "differential",
    "genomics",
    "enrichment",
    "visualization",
    "utils",
]


def get_info() -> Dict[str, Any]:
    """Get package information."""
    return {
        "name": "DegFlow",
        "version": __version__,
        "description": "Differential expression classification and plotting pipeline",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "modules": __all__[9:],
    }


def check_dependencies() -> Dict[str, bool]:
    """Check if key dependencies are available."""
    from .utils.validation import CORE_PACKAGES, validate_python_packages

    status = validate_python_packages(list(CORE_PACKAGES))
    return {CORE_PACKAGES[name]: available for name, available in status.items()}


logger = logging.getLogger(__name__)
logger.debug(f"DegFlow v{__version__} initialized")
