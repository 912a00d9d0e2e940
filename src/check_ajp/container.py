"""Dependency injection container for check-ajp.

Manages object creation and wiring across the CLI layers:
- get_config(): Load and cache configuration
- get_check_service(): Create the check service (no caching)

Transports are not cached: every check opens its own connection.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from check_ajp.config import Config
from check_ajp.services.check import CheckService
from check_ajp.transport.tcp import SocketTransport

# Global container state for testing/mocking
_overrides: dict[str, Any] = {}
_config_path: Path | None = None


def set_override(key: str, value: Any) -> None:
    """Override a container dependency for testing.

    Args:
        key: Dependency key ("config", "check_service")
        value: Mock or test implementation

    Example:
        >>> set_override("check_service", Mock(spec=CheckService))
        >>> service = get_check_service()  # Returns mock
        >>> clear_overrides()
    """
    _overrides[key] = value


def clear_overrides() -> None:
    """Clear all dependency overrides."""
    _overrides.clear()


def set_config_path(path: Path | None) -> None:
    """Use an explicit config file for the next get_config() call."""
    global _config_path
    _config_path = path
    get_config.cache_clear()


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache configuration.

    Raises:
        TypeError: If the "config" override is not a Config
        ValueError: If the configuration is invalid
    """
    if "config" in _overrides:
        override = _overrides["config"]
        if not isinstance(override, Config):
            raise TypeError("Override for 'config' must be a Config instance")
        return override

    return Config.load(config_path=_config_path)


def get_check_service() -> CheckService:
    """Create check service instance.

    Service is created on-demand (NOT cached).

    Raises:
        TypeError: If the "check_service" override is not a CheckService
    """
    if "check_service" in _overrides:
        override = _overrides["check_service"]
        if not isinstance(override, CheckService):
            raise TypeError("Override for 'check_service' must be a CheckService instance")
        return override

    config = get_config()
    return CheckService(
        transport_factory=SocketTransport,
        max_packet_size=config.request.max_packet_size,
    )


def reset_container() -> None:
    """Reset container state for testing."""
    global _config_path
    clear_overrides()
    _config_path = None
    get_config.cache_clear()
