"""
Validation utilities for DegFlow
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import Dict, List, Union

logger = logging.getLogger(__name__)

# import name -> distribution name
CORE_PACKAGES = {
    "numpy": "numpy",
    "pandas": "pandas",
    "scipy": "scipy",
    "matplotlib": "matplotlib",
    "seaborn": "seaborn",
    "matplotlib_venn": "matplotlib-venn",
    "gseapy": "gseapy",
    "yaml": "pyyaml",
    "click": "click",
    "colorlog": "colorlog",
}


def validate_directory_exists(
    dir_path: Union[str, Path], create_if_missing: bool = False
) -> bool:
    """
    Validate that a directory exists

    Args:
        dir_path: Path to directory
        create_if_missing: Whether to create directory if missing

    Returns:
        True if directory exists or was created, False otherwise
    """
    path = Path(dir_path)

    if not path.exists():
        if not create_if_missing:
            logger.error(f"Directory not found: {path}")
            return False
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Could not create directory {path}: {e}")
            return False
        logger.info(f"Created directory: {path}")
        return True

    if not path.is_dir():
        logger.error(f"Path is not a directory: {path}")
        return False

    return True


def validate_python_packages(packages: List[str]) -> Dict[str, bool]:
    """Check if Python packages are importable"""
    results = {}

    for package in packages:
        try:
            importlib.import_module(package)
            results[package] = True
            logger.debug(f"Package {package}: available")
        except ImportError:
            results[package] = False
            logger.debug(f"Package {package}: not available")

    return results


def validate_environment() -> List[str]:
    """
    Environment validation

    Returns:
        List of validation issues found
    """
    issues = []

    logger.info("Validating DegFlow environment...")

    if sys.version_info < (3, 8):
        issues.append(
            f"Python 3.8+ required, found {sys.version_info.major}.{sys.version_info.minor}"
        )

    package_status = validate_python_packages(list(CORE_PACKAGES))
    missing = [
        CORE_PACKAGES[pkg] for pkg, available in package_status.items() if not available
    ]
    if missing:
        issues.append(f"Missing Python packages: {', '.join(missing)}")

    if issues:
        logger.warning(f"Environment validation found {len(issues)} issues")
        for issue in issues:
            logger.warning(f"  - {issue}")
    else:
        logger.info("Environment validation passed")

    return issues


def validate_output_permissions(output_dir: Union[str, Path]) -> bool:
    """Check if output directory is writable"""
    try:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        test_file = output_path / ".write_test"
        test_file.write_text("test")
        test_file.unlink()
    except OSError as e:
        logger.error(f"Output directory not writable: {e}")
        return False

    return True
