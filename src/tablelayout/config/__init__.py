"""Configuration module for tablelayout.

This module provides:
- Pydantic models for configuration validation
- YAML config file loading and discovery
- Default configuration values
- Environment variable expansion
- Clear error messages for config issues
"""

from tablelayout.config.defaults import DEFAULT_CONFIG
from tablelayout.config.loader import (
    Config,
    ConfigError,
    ConfigSyntaxError,
    ConfigValidationError,
    LoggingConfig,
    OutputConfig,
    SolverConfig,
    get_config_path,
    load_config,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConfigSyntaxError",
    "ConfigValidationError",
    "DEFAULT_CONFIG",
    "LoggingConfig",
    "OutputConfig",
    "SolverConfig",
    "get_config_path",
    "load_config",
]
