"""
BullyWatch - Core Package
=========================

Configuration, constants, and logging shared by every module.

DESIGN:
    - get_config() returns the same TemporalConfig instance
    - logger is a global TreeLogger instance
"""

from .config import (
    ConfigValidationError,
    TemporalConfig,
    get_config,
    load_config,
    validate_and_log_config,
)
from .logger import TreeLogger, logger

__all__ = [
    # Config
    "TemporalConfig",
    "ConfigValidationError",
    "get_config",
    "load_config",
    "validate_and_log_config",
    # Logger
    "logger",
    "TreeLogger",
]
