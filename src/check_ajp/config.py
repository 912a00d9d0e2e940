"""Configuration management for check-ajp.

Implements multi-level configuration with precedence:
1. CLI arguments (highest priority)
2. Environment variables (CHECK_AJP_* prefix)
3. Explicit config file (--config)
4. Project config (./.check-ajp.yaml)
5. Global config (~/.check-ajp/config.yaml)
6. Built-in defaults (lowest priority)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, model_validator

from check_ajp.protocol.framing import DEFAULT_MAX_PACKET_SIZE, HEADER_SIZE, MAX_PAYLOAD_SIZE

GLOBAL_CONFIG_PATH = Path.home() / ".check-ajp" / "config.yaml"
PROJECT_CONFIG_NAME = ".check-ajp.yaml"


class ConnectionConfig(BaseModel):
    """Container connection configuration."""

    host: str = Field(default="127.0.0.1", min_length=1)
    port: int = Field(default=8009, ge=1, le=65535)
    timeout: float = Field(default=1.0, gt=0, le=300)


class RequestConfig(BaseModel):
    """Forward request defaults."""

    protocol: str = "HTTP/1.0"
    user_agent: str | None = None
    max_packet_size: int = Field(
        default=DEFAULT_MAX_PACKET_SIZE, ge=HEADER_SIZE + 1, le=MAX_PAYLOAD_SIZE + HEADER_SIZE
    )


class ThresholdConfig(BaseModel):
    """Response time thresholds in seconds."""

    warning: float = Field(default=5.0, ge=0)
    critical: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def check_order(self) -> ThresholdConfig:
        if self.warning > self.critical:
            raise ValueError("warning threshold must not exceed critical threshold")
        return self


class OutputConfig(BaseModel):
    """Output configuration."""

    verbose: int = Field(default=0, ge=0, le=3)
    color: bool = True


class Config(BaseModel):
    """Complete check-ajp configuration."""

    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        skip_global: bool = False,
        skip_project: bool = False,
    ) -> Config:
        """Load configuration with precedence: env > file > project > global > defaults.

        Args:
            config_path: Optional explicit config file path
            skip_global: Skip loading global config
            skip_project: Skip loading project config

        Returns:
            Loaded and merged configuration

        Raises:
            ValueError: If a config file is missing or invalid
        """
        config_data: dict[str, Any] = {}

        if not skip_global and GLOBAL_CONFIG_PATH.exists():
            config_data = cls._load_yaml_file(GLOBAL_CONFIG_PATH)

        if not skip_project and not config_path:
            project_config_path = Path.cwd() / PROJECT_CONFIG_NAME
            if project_config_path.exists():
                project_data = cls._load_yaml_file(project_config_path)
                config_data = cls._deep_merge(config_data, project_data)

        if config_path:
            if not config_path.exists():
                raise ValueError(f"Config file not found: {config_path}")
            explicit_data = cls._load_yaml_file(config_path)
            config_data = cls._deep_merge(config_data, explicit_data)

        env_overrides = cls._load_from_env()
        config_data = cls._deep_merge(config_data, env_overrides)

        config_data = cls._substitute_env_vars(config_data)

        try:
            return cls(**config_data)
        except Exception as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @staticmethod
    def _load_yaml_file(path: Path) -> dict[str, Any]:
        """Load and parse a YAML file.

        Raises:
            ValueError: If file is invalid YAML or unreadable
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ValueError(f"Failed to read {path}: {e}") from e

    @staticmethod
    def _load_from_env() -> dict[str, Any]:
        """Load configuration from environment variables.

        - CHECK_AJP_HOST -> connection.host
        - CHECK_AJP_PORT -> connection.port
        - CHECK_AJP_TIMEOUT -> connection.timeout
        - CHECK_AJP_WARNING / CHECK_AJP_CRITICAL -> thresholds.*
        - etc.
        """
        env_mapping = {
            "CHECK_AJP_HOST": ["connection", "host"],
            "CHECK_AJP_PORT": ["connection", "port"],
            "CHECK_AJP_TIMEOUT": ["connection", "timeout"],
            "CHECK_AJP_PROTOCOL": ["request", "protocol"],
            "CHECK_AJP_USER_AGENT": ["request", "user_agent"],
            "CHECK_AJP_MAX_PACKET_SIZE": ["request", "max_packet_size"],
            "CHECK_AJP_WARNING": ["thresholds", "warning"],
            "CHECK_AJP_CRITICAL": ["thresholds", "critical"],
            "CHECK_AJP_VERBOSE": ["output", "verbose"],
            "CHECK_AJP_COLOR": ["output", "color"],
        }

        result: dict[str, Any] = {}
        for env_var, path in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                Config._set_nested(result, path, Config._convert_env_value(value, path))
        return result

    @staticmethod
    def _convert_env_value(value: str, path: list[str]) -> Any:
        """Convert an environment variable string to the type its key expects."""
        key = path[-1]
        if key == "color":
            return value.lower() in ("true", "1", "yes", "on")

        if key in ("port", "max_packet_size", "verbose"):
            try:
                return int(value)
            except ValueError:
                return value

        if key in ("timeout", "warning", "critical"):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @staticmethod
    def _substitute_env_vars(data: Any) -> Any:
        """Substitute ``${VAR_NAME}`` references in string values."""
        if isinstance(data, dict):
            return {k: Config._substitute_env_vars(v) for k, v in data.items()}
        if isinstance(data, list):
            return [Config._substitute_env_vars(item) for item in data]
        if isinstance(data, str):

            def replace_env(match: re.Match[str]) -> str:
                return os.getenv(match.group(1), match.group(0))

            return re.sub(r"\$\{([A-Z_][A-Z0-9_]*)\}", replace_env, data)
        return data

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries, override taking precedence."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _set_nested(data: dict[str, Any], path: list[str], value: Any) -> None:
        for key in path[:-1]:
            data = data.setdefault(key, {})
        data[path[-1]] = value

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def get_template(cls) -> str:
        """Get configuration file template.

        Returns:
            YAML template with comments
        """
        return """# check-ajp configuration

# Container connection
connection:
  host: 127.0.0.1
  port: 8009
  timeout: 1.0  # connect timeout in seconds

# Forward request defaults
request:
  protocol: HTTP/1.0
  # user_agent: check_ajp
  max_packet_size: 8192

# Response time thresholds in seconds
thresholds:
  warning: 5.0
  critical: 10.0

# Output
output:
  verbose: 0  # 0-3
  color: true
"""

    def validate_config(self) -> list[str]:
        """Validate configuration and return any warnings.

        Returns:
            List of validation warnings (empty if valid)
        """
        warnings: list[str] = []

        if self.thresholds.critical <= self.connection.timeout:
            warnings.append(
                f"Critical threshold ({self.thresholds.critical}s) is not above the "
                f"connect timeout ({self.connection.timeout}s)."
            )

        if self.request.max_packet_size > DEFAULT_MAX_PACKET_SIZE:
            warnings.append(
                f"max_packet_size {self.request.max_packet_size} exceeds the default "
                f"AJP packet size ({DEFAULT_MAX_PACKET_SIZE}); the container must be "
                "configured with a matching packetSize."
            )

        return warnings
