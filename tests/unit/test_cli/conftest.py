"""Shared fixtures for CLI command tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from summarizer.config.settings import SummarizeConfig


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep real config files, env keys and log handlers out of CLI runs."""
    for name in ("OPENROUTER_API_KEY", "SUMMARIZER_CONFIG_FILE", "SUMMARIZER_DEFAULT_MODEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(SummarizeConfig, "setup_logging", lambda self: None)
    return tmp_path


@pytest.fixture
def mock_service(monkeypatch):
    """Replace SummarizeService in the CLI module with a configured mock."""
    service = MagicMock()
    service.is_configured.return_value = True
    service.extract = AsyncMock()
    service.summarize = AsyncMock()
    service.summarize_into = AsyncMock()
    service.client.fetch_models = AsyncMock(return_value=[])
    factory = MagicMock(return_value=service)
    monkeypatch.setattr("summarizer.cli.main.SummarizeService", factory)
    return service
