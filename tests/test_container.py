"""Tests for dependency injection container."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from check_ajp.config import Config, RequestConfig
from check_ajp.container import (
    get_check_service,
    get_config,
    reset_container,
    set_config_path,
    set_override,
)
from check_ajp.services.check import CheckService
from check_ajp.transport.tcp import SocketTransport


class TestGetConfig:
    """Tests for get_config()."""

    def test_config_is_cached(self) -> None:
        """Test that configuration is loaded once."""
        with patch("check_ajp.container.Config.load", return_value=Config()) as mock_load:
            first = get_config()
            second = get_config()

        assert first is second
        mock_load.assert_called_once_with(config_path=None)

    def test_config_path_is_passed_and_clears_cache(self, tmp_path: Path) -> None:
        path = tmp_path / "check.yaml"
        with patch("check_ajp.container.Config.load", return_value=Config()) as mock_load:
            get_config()
            set_config_path(path)
            get_config()

        assert mock_load.call_count == 2
        mock_load.assert_called_with(config_path=path)

    def test_override(self) -> None:
        config = Config(request=RequestConfig(protocol="HTTP/1.1"))
        set_override("config", config)

        assert get_config() is config

    def test_invalid_override(self) -> None:
        set_override("config", {"connection": {}})

        with pytest.raises(TypeError, match="must be a Config instance"):
            get_config()


class TestGetCheckService:
    """Tests for get_check_service()."""

    def test_service_uses_config(self) -> None:
        """Test that the service picks up the configured packet size."""
        set_override("config", Config(request=RequestConfig(max_packet_size=16384)))

        service = get_check_service()

        assert isinstance(service, CheckService)
        assert service.max_packet_size == 16384
        assert service.transport_factory is SocketTransport

    def test_service_is_not_cached(self) -> None:
        set_override("config", Config())

        assert get_check_service() is not get_check_service()

    def test_override(self) -> None:
        mock_service = Mock(spec=CheckService)
        set_override("check_service", mock_service)

        assert get_check_service() is mock_service

    def test_invalid_override(self) -> None:
        set_override("check_service", object())

        with pytest.raises(TypeError, match="must be a CheckService instance"):
            get_check_service()


def test_reset_container() -> None:
    """Test that reset drops overrides and the config path."""
    set_override("check_service", Mock(spec=CheckService))
    set_config_path(Path("/nonexistent.yaml"))

    reset_container()

    with patch("check_ajp.container.Config.load", return_value=Config()) as mock_load:
        get_config()
    mock_load.assert_called_once_with(config_path=None)
    assert not isinstance(get_check_service(), Mock)
