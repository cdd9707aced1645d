"""
Shared figure setup and saving
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import seaborn as sns

from ..config import RunConfig

logger = logging.getLogger(__name__)


def apply_style() -> None:
    """Plot style shared by every DegFlow figure"""
    sns.set_theme(style="ticks", context="paper")
    plt.rcParams["axes.spines.top"] = False
    plt.rcParams["axes.spines.right"] = False


def output_paths(
    output_file: Union[str, Path], formats: Optional[Sequence[str]] = None
) -> List[Path]:
    """
    One path per format

    A suffix on ``output_file`` wins over ``formats``.
    """
    output_file = Path(output_file)
    if output_file.suffix:
        return [output_file]
    return [output_file.with_suffix(f".{fmt}") for fmt in (formats or ["png"])]


def save_figure(
    fig: plt.Figure,
    output_file: Union[str, Path],
    config: Optional[RunConfig] = None,
) -> List[Path]:
    """Save ``fig`` in every configured format and close it"""
    config = config or RunConfig()
    viz = config.visualization

    saved = []
    try:
        for path in output_paths(output_file, viz.get("save_formats")):
            path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, dpi=viz.get("dpi", 300), bbox_inches="tight")
            saved.append(path)
            logger.info(f"Plot saved: {path}")
    finally:
        plt.close(fig)

    return saved
