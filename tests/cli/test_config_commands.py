"""Integration tests for config commands.

These tests verify that the config commands properly interact with the
configuration system and display/manage configuration values.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from check_ajp.config import Config, ConnectionConfig
from check_ajp.container import set_override
from check_ajp.main import app


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def mock_config() -> Config:
    """Install a known configuration in the container."""
    config = Config(connection=ConnectionConfig(host="app01.example.com", port=8010))
    set_override("config", config)
    return config


class TestConfigShowCommand:
    """Test suite for config show command."""

    def test_show_table_format(self, runner: CliRunner, mock_config: Config) -> None:
        """Test config show renders one table per section."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Current Configuration" in result.stdout
        assert "app01.example.com" in result.stdout
        assert "Thresholds" in result.stdout
        assert "Not set" in result.stdout

    def test_show_json_format(self, runner: CliRunner, mock_config: Config) -> None:
        result = runner.invoke(app, ["config", "show", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["connection"]["host"] == "app01.example.com"
        assert data["connection"]["port"] == 8010
        assert data["request"]["max_packet_size"] == 8192

    def test_show_warnings(self, runner: CliRunner) -> None:
        set_override("config", Config(connection=ConnectionConfig(timeout=20.0)))

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "connect timeout" in result.stdout

    def test_show_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test config show reports an unreadable config file."""
        bad = tmp_path / "bad.yaml"
        bad.write_text("connection:\n  port: 0\n")

        result = runner.invoke(app, ["--config", str(bad), "config", "show"])

        assert result.exit_code == 1
        assert "Error reading configuration" in result.stdout


class TestConfigInitCommand:
    """Test suite for config init command."""

    def test_init_creates_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test config init writes the template."""
        path = tmp_path / "conf" / "check-ajp.yaml"

        result = runner.invoke(app, ["config", "init", "--path", str(path)])

        assert result.exit_code == 0
        assert path.exists()
        assert Config(**yaml.safe_load(path.read_text())) == Config()

    def test_init_existing_file_without_force(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "check-ajp.yaml"
        path.write_text("connection:\n  host: keep-me\n")

        result = runner.invoke(app, ["config", "init", "--path", str(path)])

        assert result.exit_code == 0
        assert "already exists" in result.stdout
        assert "keep-me" in path.read_text()

    def test_init_force_overwrites(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "check-ajp.yaml"
        path.write_text("connection:\n  host: old\n")

        result = runner.invoke(app, ["config", "init", "--path", str(path), "--force"])

        assert result.exit_code == 0
        text = path.read_text()
        assert "host: old" not in text
        assert Config(**yaml.safe_load(text)) == Config()
