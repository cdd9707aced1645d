"""
Configuration management for DegFlow

This module provides configuration loading, validation, and management
for the DegFlow analysis pipeline.
"""

from .config import (RunConfig, get_default_config, load_config, save_config,
                     validate_config)
from .schema import ColumnSchema

__all__ = [
    "RunConfig",
    "load_config",
    "save_config",
    "validate_config",
    "get_default_config",
    "ColumnSchema",
]
