"""Tests for logging configuration."""

import logging

import pytest
import structlog

from pagescore.config.settings import Environment, LogLevel, Settings
from pagescore.observability import configure_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_sets_root_level(self) -> None:
        configure_logging(Settings(_env_file=None, LOG_LEVEL=LogLevel.WARNING))
        assert logging.getLogger().level == logging.WARNING

    def test_dev_uses_console_renderer(self) -> None:
        configure_logging(Settings(_env_file=None, ENVIRONMENT=Environment.DEV))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_prod_renders_json(self, capsys) -> None:
        configure_logging(
            Settings(_env_file=None, ENVIRONMENT=Environment.PROD, LOG_LEVEL=LogLevel.INFO),
        )
        assert isinstance(
            structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer,
        )
        structlog.get_logger("test").info("page_scored", url="https://example.com")
        out = capsys.readouterr().out
        assert '"event": "page_scored"' in out
        assert '"url": "https://example.com"' in out

    def test_level_filters_structlog_events(self, capsys) -> None:
        configure_logging(
            Settings(_env_file=None, ENVIRONMENT=Environment.PROD, LOG_LEVEL=LogLevel.ERROR),
        )
        structlog.get_logger("test").info("page_scored")
        assert capsys.readouterr().out == ""
