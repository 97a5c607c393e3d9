"""Default configuration values for tablelayout.

This module defines the default configuration used when no config file exists
or when config values are not specified. All configuration options are documented
here for reference.

Environment Variables:
    TABLELAYOUT_CONFIG_PATH: Override default config file path
    Any config value can reference environment variables using ${VAR} syntax

Config File Locations (in order of precedence):
    1. Path specified via --config CLI flag
    2. Path specified via TABLELAYOUT_CONFIG_PATH environment variable
    3. ~/.config/tablelayout/config.yaml (XDG default)
    4. ~/.tablelayout/config.yaml (legacy location)
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    # Solver behaviour
    "solver": {
        "single_precision": True,  # Narrow delivered rectangles to 32-bit floats
        "warn_overconstrained": True,  # Log a warning when shrinking runs out of slack
        "legacy_vertical_center": False,  # Vertical centering tests the horizontal flag
        "trace": False,  # Debug-log matrix size and negotiation steps
    },
    # Output of the solve command
    "output": {
        "default_format": "json",  # Output format: json, table
        "pretty_print": True,  # Pretty-print JSON output
        "decimal_places": 3,  # Rounding applied to printed coordinates
    },
    # Logging configuration (for debugging)
    "logging": {
        "enabled": False,
        "level": "INFO",  # DEBUG, INFO, WARNING, ERROR
        "file": None,  # None logs to stderr
    },
}
