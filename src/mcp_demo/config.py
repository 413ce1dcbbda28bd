"""
Configuration management for the demo MCP server.

This module implements the AppConfig Pydantic model and configuration loading.

Configuration is loaded from multiple sources with layered precedence:
1. Built-in defaults (Pydantic model defaults)
2. YAML config file (--config path)
3. Environment variables (MCP_DEMO_* prefix, __ for nesting)
4. Command-line arguments (highest precedence)
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

PROTOCOL_VERSION = "2025-06-18"

# =============================================================================
# Server Configuration
# =============================================================================


class ServerConfig(BaseModel):
    """Server identity and protocol settings.

    Attributes:
        name: Server name reported in the initialize handshake.
        version: Server version reported in the initialize handshake.
        protocol_version: Protocol version returned verbatim by initialize.
        log_level: Initial application log level.
    """

    name: str = Field(default="mcp-server-demo", description="Server name")
    version: str = Field(default="0.1.0", description="Server version")
    protocol_version: str = Field(
        default=PROTOCOL_VERSION,
        description="Protocol version returned by initialize",
    )
    log_level: str = Field(
        default="info",
        description="Log level: debug, info, warn, error",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"debug", "info", "warn", "warning", "error", "critical"}
        v_lower = v.lower()
        if v_lower not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        # Normalize 'warn' to 'warning'
        if v_lower == "warn":
            return "warning"
        return v_lower


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level.
        json_format: Emit one JSON object per log line.
        debug_mode: Enable extra diagnostic logging.
    """

    level: str = Field(default="info", description="Log level")
    json_format: bool = Field(
        default=True,
        description="Whether to format log lines as JSON",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable extra diagnostic logging",
    )


# =============================================================================
# Resources Configuration
# =============================================================================


class ResourcesConfig(BaseModel):
    """Resource discovery configuration.

    Roots are a coordination convention between client and server, not a
    security sandbox.

    Attributes:
        roots: Directories whose files are exposed as resources.
        description: Description attached to each listed file.
        default_mime_type: MIME type used when none can be guessed.
    """

    roots: list[Path] = Field(
        default_factory=lambda: [Path("demo-root")],
        validate_default=True,
        description="Root directories scanned for resources",
    )
    description: str = Field(
        default="Demo file",
        description="Description attached to listed resources",
    )
    default_mime_type: str = Field(
        default="text/plain",
        description="MIME type used when it cannot be guessed from the name",
    )

    @field_validator("roots", mode="before")
    @classmethod
    def coerce_roots(cls, v: Any) -> Any:
        """Accept a single path where a list is expected."""
        if isinstance(v, (str, Path)):
            return [v]
        return v

    @field_validator("roots")
    @classmethod
    def make_roots_absolute(cls, v: list[Path]) -> list[Path]:
        """Make each root absolute without following symlinks."""
        return [Path(os.path.abspath(os.path.expanduser(root))) for root in v]


# =============================================================================
# Notifications Configuration
# =============================================================================


class NotificationsConfig(BaseModel):
    """Deferred list_changed notification settings.

    Attributes:
        list_changed_enabled: Schedule list_changed notifications after initialize.
        list_changed_delay_seconds: Delay between the initialize reply and the
            notifications.
    """

    list_changed_enabled: bool = Field(
        default=True,
        description="Send list_changed notifications after initialize",
    )
    list_changed_delay_seconds: float = Field(
        default=5.0,
        description="Delay before list_changed notifications are sent",
        ge=0,
    )


# =============================================================================
# Validation Configuration
# =============================================================================


class ValidationConfig(BaseModel):
    """Schema validation settings.

    Attributes:
        provider: "auto" uses jsonschema when it can be loaded and the
            structural validator otherwise; "jsonschema" and "structural"
            force one provider.
    """

    provider: str = Field(
        default="auto",
        description="Validator provider: auto, jsonschema, structural",
    )

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Validate the provider name."""
        valid_providers = {"auto", "jsonschema", "structural"}
        v_lower = v.lower()
        if v_lower not in valid_providers:
            raise ValueError(
                f"Invalid validator provider: {v}. Must be one of: {', '.join(sorted(valid_providers))}"
            )
        return v_lower


# =============================================================================
# Prompt Configuration
# =============================================================================


class PromptConfig(BaseModel):
    """An extra prompt declared in configuration.

    Attributes:
        name: Unique prompt name.
        title: Display title.
        description: Human-readable description.
        input_schema: Schema for the prompt arguments (``inputSchema`` in YAML).
        template: Template text with ``{{var}}`` placeholders.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, description="Unique prompt name")
    title: str = Field(default="", description="Display title")
    description: str = Field(default="", description="Prompt description")
    input_schema: dict[str, Any] | None = Field(
        default=None,
        alias="inputSchema",
        description="Schema for the prompt arguments",
    )
    template: str = Field(description="Template with {{var}} placeholders")


# =============================================================================
# Main Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """
    Main application configuration model.

    Built from multiple layers following the precedence rules:
    1. Built-in defaults (defined in this model)
    2. YAML config file
    3. Environment variables (MCP_DEMO_* prefix)
    4. Command-line arguments

    Attributes:
        server: Server settings.
        logging: Logging configuration.
        resources: Resource roots.
        notifications: Deferred notification settings.
        validation: Schema validation settings.
        prompts: Extra prompts appended to the built-in table.
    """

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Server settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    resources: ResourcesConfig = Field(
        default_factory=ResourcesConfig,
        description="Resource roots",
    )
    notifications: NotificationsConfig = Field(
        default_factory=NotificationsConfig,
        description="Deferred notification settings",
    )
    validation: ValidationConfig = Field(
        default_factory=ValidationConfig,
        description="Schema validation settings",
    )
    prompts: list[PromptConfig] = Field(
        default_factory=list,
        description="Extra prompts appended to the built-in table",
    )

    @field_validator("prompts")
    @classmethod
    def validate_unique_prompts(cls, v: list[PromptConfig]) -> list[PromptConfig]:
        """Reject duplicate prompt names."""
        seen: set[str] = set()
        for prompt in v:
            if prompt.name in seen:
                raise ValueError(f"Duplicate prompt name: {prompt.name}")
            seen.add(prompt.name)
        return v


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: The base dictionary.
        override: The dictionary with values to override.

    Returns:
        A new dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary with configuration values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to appropriate Python type.

    Args:
        value: String value from environment variable.

    Returns:
        Parsed value (bool, int, float, list, or string).
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    # Comma-separated lists
    if "," in value:
        return [_parse_env_value(item.strip()) for item in value.split(",")]

    return value


def _load_env_config(prefix: str = "MCP_DEMO_") -> dict[str, Any]:
    """
    Load configuration from environment variables.

    Environment variables are parsed with the following rules:
    - Prefix: MCP_DEMO_ (configurable)
    - Nested keys: Double underscore (__) separator
    - Example: MCP_DEMO_RESOURCES__ROOTS=/srv/a,/srv/b

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary with configuration values.
    """
    result: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        parts = key[len(prefix) :].lower().split("__")

        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})

        current[parts[-1]] = _parse_env_value(value)

    return result


def _parse_cli_args(args: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Dictionary with parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Demo MCP server (JSON-RPC 2.0 over stdio)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        help="Override log level",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    parser.add_argument(
        "--root",
        action="append",
        dest="roots",
        metavar="DIR",
        help="Resource root directory (repeatable, replaces configured roots)",
    )

    parser.add_argument(
        "--validator",
        type=str,
        choices=["auto", "jsonschema", "structural"],
        help="Schema validator provider",
    )

    parsed = parser.parse_args(args)

    result: dict[str, Any] = {}

    if parsed.config:
        result["_config_path"] = parsed.config

    if parsed.log_level:
        result["server"] = {"log_level": parsed.log_level}
        result["logging"] = {"level": parsed.log_level}

    if parsed.debug:
        result.setdefault("logging", {})["debug_mode"] = True
        result.setdefault("server", {})["log_level"] = "debug"

    if parsed.roots:
        result["resources"] = {"roots": parsed.roots}

    if parsed.validator:
        result["validation"] = {"provider": parsed.validator}

    return result


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = "MCP_DEMO_",
    cli_args: list[str] | None = None,
) -> AppConfig:
    """
    Load configuration from all sources with layered precedence.

    Configuration is loaded from multiple sources in order:
    1. Built-in defaults (from AppConfig model)
    2. YAML config file (if specified)
    3. Environment variables (MCP_DEMO_* prefix)
    4. Command-line arguments

    Later sources override earlier ones.

    Args:
        config_path: Path to YAML configuration file. If None, uses the
            CLI --config argument when given.
        env_prefix: Prefix for environment variables.
        cli_args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Fully configured AppConfig instance.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValidationError: If configuration is invalid.

    Example:
        >>> config = load_config(cli_args=["--root", "/srv/demo"])
        >>> print(config.resources.roots)
        [PosixPath('/srv/demo')]
    """
    config_dict: dict[str, Any] = {}

    # Parse CLI args first to get config path
    cli_config = _parse_cli_args(cli_args)

    if config_path is None:
        if "_config_path" in cli_config:
            config_path = Path(cli_config.pop("_config_path"))
    else:
        cli_config.pop("_config_path", None)
        config_path = Path(config_path)

    if config_path is not None:
        config_dict = _deep_merge(config_dict, _load_yaml_config(config_path))

    config_dict = _deep_merge(config_dict, _load_env_config(env_prefix))

    config_dict = _deep_merge(config_dict, cli_config)

    config = AppConfig(**config_dict)
    # The server log level drives logging unless logging.level was set explicitly
    if "level" not in config_dict.get("logging", {}):
        config.logging.level = config.server.log_level
    return config
