"""Configuration loading and validation for tablelayout.

This module provides:
- Pydantic models for configuration validation
- YAML config file discovery and loading
- Environment variable expansion in config values
- Merging of config file with defaults
- Clear, user-friendly error messages for config and layout document issues
"""

from difflib import get_close_matches
import os
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from tablelayout.config.defaults import DEFAULT_CONFIG


class ConfigError(Exception):
    """Base exception for configuration errors.

    Provides user-friendly error messages with context about what went wrong
    and suggestions for how to fix it.

    Attributes:
        message: The main error message
        file_path: Path to the offending file (if applicable)
        line_number: Line number where the error occurred (if known)
        suggestion: Helpful suggestion for fixing the error
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        line_number: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
        context_lines: list[str] | None = None,
    ) -> None:
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        self.column = column
        self.suggestion = suggestion
        self.context_lines = context_lines
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location, context and suggestion."""
        parts = []

        if self.file_path:
            location = f"Error in {self.file_path}"
            if self.line_number:
                location += f" line {self.line_number}"
            parts.append(location + ":")
        else:
            parts.append("Configuration error:")

        parts.append(f"  {self.message}")

        if self.context_lines and self.column:
            parts.append("")
            for line in self.context_lines:
                parts.append(f"    {line}")
            parts.append(" " * (self.column + 3) + "^")

        if self.suggestion:
            parts.append("")
            parts.append(f"  Suggestion: {self.suggestion}")

        return "\n".join(parts)


class ConfigSyntaxError(ConfigError):
    """Error for YAML syntax issues."""

    pass


class ConfigValidationError(ConfigError):
    """Error for configuration value validation failures."""

    pass


# Known keys per section, used to suggest fixes for typos
VALID_KEYS: dict[tuple[str, ...], set[str]] = {
    (): {"solver", "output", "logging"},
    ("solver",): {"single_precision", "warn_overconstrained", "legacy_vertical_center", "trace"},
    ("output",): {"default_format", "pretty_print", "decimal_places"},
    ("logging",): {"enabled", "level", "file"},
}

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _suggest_key(unknown_key: str, valid_keys: set[str]) -> str | None:
    """Suggest a similar valid key for an unknown key.

    Args:
        unknown_key: The key that was not recognized
        valid_keys: Set of valid key names

    Returns:
        A suggestion message, or None if no good match found
    """
    matches = get_close_matches(unknown_key, sorted(valid_keys), n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return None


def _describe_value(value: Any) -> str:
    """Get a human-readable type description for a value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return f'string "{value}"'
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def format_validation_error(
    error: ValidationError,
    data: dict[str, Any],
    file_path: str | None = None,
    valid_keys: dict[tuple[str, ...], set[str]] | None = None,
) -> ConfigValidationError:
    """Convert a Pydantic ValidationError to a user-friendly ConfigValidationError.

    Only the first reported error is described in detail.

    Args:
        error: The Pydantic validation error
        data: The original data, used to quote the offending value
        file_path: Path to the file the data came from
        valid_keys: Known keys per section, for typo suggestions

    Returns:
        A ConfigValidationError with helpful message and suggestion
    """
    errors = error.errors()
    if not errors:
        return ConfigValidationError("Validation failed", file_path=file_path)

    first_error = errors[0]
    loc = tuple(first_error.get("loc", ()))
    msg = first_error.get("msg", "Invalid value")
    error_type = first_error.get("type", "")
    ctx = first_error.get("ctx", {}) or {}

    path = ".".join(str(part) for part in loc)

    actual_value: Any = data
    for key in loc:
        if isinstance(actual_value, dict):
            actual_value = actual_value.get(key)
        elif isinstance(actual_value, list) and isinstance(key, int):
            actual_value = actual_value[key] if key < len(actual_value) else None
        else:
            break

    suggestion = None

    if error_type == "literal_error":
        message = f"Invalid value for '{path}': got {_describe_value(actual_value)}"
        suggestion = f"Expected one of: {ctx.get('expected', '')}"

    elif error_type in ("greater_than_equal", "less_than_equal"):
        limit = ctx.get("ge", ctx.get("le"))
        message = f"Value for '{path}' is out of range: {actual_value}"
        if error_type == "greater_than_equal":
            suggestion = f"Value must be at least {limit}"
        else:
            suggestion = f"Value must be at most {limit}"

    elif error_type in ("int_parsing", "float_parsing", "int_type", "float_type"):
        message = f"Invalid number for '{path}': got {_describe_value(actual_value)}"
        suggestion = "Please provide a valid number"

    elif error_type in ("bool_type", "bool_parsing"):
        message = f"Expected boolean for '{path}': got {_describe_value(actual_value)}"
        suggestion = "Use 'true' or 'false'"

    elif error_type in ("list_type", "tuple_type"):
        message = f"Expected list for '{path}': got {_describe_value(actual_value)}"
        suggestion = "Please provide a list (e.g., [64, 32])"

    elif error_type == "extra_forbidden":
        unknown_key = str(loc[-1]) if loc else "unknown"
        message = f"Unknown key '{path}'"
        known = (valid_keys or {}).get(tuple(str(part) for part in loc[:-1]))
        if known:
            suggestion = _suggest_key(unknown_key, known)
        if not suggestion:
            suggestion = "Check the documentation for valid options"

    else:
        message = f"Invalid value for '{path}': {msg}"

    return ConfigValidationError(message, file_path=file_path, suggestion=suggestion)


def format_yaml_error(
    error: yaml.YAMLError,
    file_path: str | None = None,
    content: str | None = None,
) -> ConfigSyntaxError:
    """Convert a YAML error to a user-friendly ConfigSyntaxError.

    Args:
        error: The YAML error
        file_path: Path to the file being parsed
        content: The file content for context

    Returns:
        A ConfigSyntaxError with position, context line and suggestion
    """
    line_number = None
    column = None
    context_lines = None
    suggestion = None

    mark = getattr(error, "problem_mark", None)
    if mark is not None:
        line_number = mark.line + 1
        column = mark.column + 1
        if content:
            lines = content.splitlines()
            if 0 <= mark.line < len(lines):
                context_lines = [lines[mark.line]]

    error_str = str(error).lower()

    if "could not find expected ':'" in error_str:
        suggestion = "Check for missing colons after keys (e.g., 'key: value')"
    elif "found character" in error_str and ("tab" in error_str or "'\\t'" in error_str):
        suggestion = "Use spaces instead of tabs for indentation"
    elif "mapping values are not allowed" in error_str:
        suggestion = "Check your indentation - make sure nested keys are properly indented"
    elif "found undefined alias" in error_str:
        suggestion = "Check that all YAML anchors (&name) are defined before aliases (*name)"

    message = "Invalid YAML syntax"
    problem = getattr(error, "problem", None)
    if problem:
        message = f"YAML syntax error: {problem}"

    return ConfigSyntaxError(
        message,
        file_path=file_path,
        line_number=line_number,
        column=column,
        context_lines=context_lines,
        suggestion=suggestion,
    )


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from ``path``.

    An empty file yields an empty dict.

    Raises:
        ConfigSyntaxError: If the file is not valid YAML or not a mapping
    """
    content = path.read_text()
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise format_yaml_error(e, str(path), content) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigSyntaxError(
            f"Expected a mapping at the top level, got {_describe_value(data)}",
            file_path=str(path),
        )
    return data


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax. Unset variables without a
    default are left as written.
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return ENV_VAR_PATTERN.sub(replace_env_var, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Pydantic Configuration Models


class SolverConfig(BaseModel):
    """Solver behaviour switches."""

    model_config = ConfigDict(extra="forbid")

    single_precision: bool = True
    warn_overconstrained: bool = True
    legacy_vertical_center: bool = False
    trace: bool = False


class OutputConfig(BaseModel):
    """Output settings for the solve command."""

    model_config = ConfigDict(extra="forbid")

    default_format: Literal["json", "table"] = "json"
    pretty_print: bool = True
    decimal_places: int = Field(default=3, ge=0, le=10)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: str | None = None


class Config(BaseModel):
    """Main configuration model for tablelayout.

    Configuration is loaded from YAML files and can be overridden by CLI flags.
    """

    model_config = ConfigDict(extra="forbid")

    solver: SolverConfig = Field(default_factory=SolverConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_config_path(custom_path: str | None = None) -> Path | None:
    """Determine the configuration file path.

    Checks locations in this order:
    1. Custom path (if provided via --config flag)
    2. TABLELAYOUT_CONFIG_PATH environment variable
    3. ~/.config/tablelayout/config.yaml (XDG standard)
    4. ~/.tablelayout/config.yaml (legacy location)

    Args:
        custom_path: Optional custom config path from CLI

    Returns:
        Path to config file if found, None otherwise

    Raises:
        FileNotFoundError: If a custom path was given but does not exist
    """
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {custom_path}")

    env_path = os.environ.get("TABLELAYOUT_CONFIG_PATH")
    if env_path:
        path = Path(env_path).expanduser()
        if path.exists():
            return path
        return None

    xdg_path = Path.home() / ".config" / "tablelayout" / "config.yaml"
    if xdg_path.exists():
        return xdg_path

    legacy_path = Path.home() / ".tablelayout" / "config.yaml"
    if legacy_path.exists():
        return legacy_path

    return None


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    raise_on_error: bool = True,
) -> Config:
    """Load and validate configuration.

    Configuration is merged in this order (later overrides earlier):
    1. Default configuration
    2. Config file (if found)
    3. CLI overrides (if provided)

    Environment variables in config values are expanded using ${VAR} syntax.

    Args:
        config_path: Optional custom config file path
        cli_overrides: Optional dict of CLI argument overrides
        raise_on_error: If True, raise ConfigError on issues; if False, fall
            back to the defaults

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If custom config path doesn't exist
        ConfigSyntaxError: If config file has invalid YAML syntax
        ConfigValidationError: If config values are invalid
    """
    config_data = DEFAULT_CONFIG.copy()
    resolved_path: Path | None = None

    path = get_config_path(config_path)
    if path:
        resolved_path = path
        try:
            file_config = read_yaml(path)
        except ConfigSyntaxError:
            if raise_on_error:
                raise
            file_config = {}
        config_data = deep_merge(config_data, file_config)

    if cli_overrides:
        config_data = deep_merge(config_data, cli_overrides)

    config_data = expand_env_vars(config_data)

    try:
        return Config(**config_data)
    except ValidationError as e:
        if raise_on_error:
            raise format_validation_error(
                e,
                config_data,
                str(resolved_path) if resolved_path else None,
                VALID_KEYS,
            ) from e
        return Config(**DEFAULT_CONFIG)
