"""JSON formatter for solve results.

Serializes a solved layout to JSON, either indented for people or compact
for piping into other tools. Infinite sizes are written as the strings
"inf" and "-inf" so the output stays valid JSON.
"""

from __future__ import annotations

import json
import math
from typing import Any

from tablelayout.formatters.base import Formatter


def _finite(value: Any) -> Any:
    """Replace non-finite floats with strings, recursing into containers."""
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "nan"
        return "inf" if value > 0 else "-inf"
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(item) for item in value]
    return value


class JsonFormatter(Formatter):
    """JSON formatter for tablelayout CLI output.

    Instance Attributes:
        pretty_print: Whether to format with indentation (default: True)
    """

    name: str = "json"
    display_name: str = "JSON Formatter"
    file_extension: str = ".json"

    def __init__(self, pretty_print: bool = True) -> None:
        """Initialize the JSON formatter.

        Args:
            pretty_print: If True, output indented JSON (default: True).
                         If False, output compact single-line JSON.
        """
        super().__init__()
        self.pretty_print = pretty_print

    def initialize(self, config: dict[str, Any] | None = None) -> None:
        """Initialize the formatter with configuration.

        Args:
            config: Formatter configuration. Supports:
                - pretty_print (bool): Whether to indent output
        """
        super().initialize(config)
        if config:
            self.pretty_print = config.get("pretty_print", self.pretty_print)

    def format(self, data: dict[str, Any]) -> str:
        """Format a solve result as a JSON string.

        Key order of ``data`` is preserved.

        Example:
            >>> formatter = JsonFormatter(pretty_print=False)
            >>> formatter.format({"rows": 1, "cells": []})
            '{"rows":1,"cells":[]}'
        """
        output = _finite(data)
        if self.pretty_print:
            return json.dumps(output, indent=2, ensure_ascii=False)
        else:
            return json.dumps(output, ensure_ascii=False, separators=(",", ":"))
