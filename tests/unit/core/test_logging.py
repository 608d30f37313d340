"""Unit tests for notely.core.logging."""

import logging
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def mock_logging_config():
    """Create a mock logging configuration."""
    return {
        "level": "INFO",
        "format": "json",
        "handlers": {
            "console": {"enabled": True},
            "file": {
                "enabled": True,
                "path": "logs/system.jsonl",
                "max_bytes": 10485760,
                "backup_count": 5,
            },
        },
    }


class TestLoggingSettings:
    """Tests for loading logging settings from YAML."""

    def test_loads_project_logging_yaml(self):
        from notely.core.logging import _logging_settings

        _logging_settings.cache_clear()
        settings = _logging_settings()

        assert settings["level"] == "INFO"
        assert settings["handlers"]["file"]["path"] == "logs/system.jsonl"

    def test_settings_are_cached(self):
        from notely.core.logging import _logging_settings

        _logging_settings.cache_clear()
        with patch("notely.core.logging.load_yaml_config", return_value={"level": "INFO"}) as loader:
            first = _logging_settings()
            second = _logging_settings()

            assert first is second
            loader.assert_called_once_with("logging.yaml")
        _logging_settings.cache_clear()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_explicit_level_overrides_config(self, mock_logging_config):
        from notely.core.logging import setup_logging

        with patch("notely.core.logging._logging_settings", return_value=mock_logging_config):
            setup_logging(level="DEBUG", enable_file_logging=False)

        assert logging.getLogger().level == logging.DEBUG

    def test_uses_config_defaults(self, mock_logging_config):
        from notely.core.logging import setup_logging

        with patch("notely.core.logging._logging_settings", return_value=mock_logging_config):
            setup_logging(enable_file_logging=False)

        assert logging.getLogger().level == logging.INFO

    def test_console_handler_writes_to_stderr(self, mock_logging_config):
        from notely.core.logging import setup_logging

        with patch("notely.core.logging._logging_settings", return_value=mock_logging_config):
            setup_logging(format_type="console", enable_file_logging=False)

        handlers = logging.getLogger().handlers
        assert [type(h).__name__ for h in handlers] == ["StreamHandler"]

    def test_file_logging_adds_rotating_handler(self, tmp_path, mock_logging_config):
        from notely.core.logging import setup_logging

        log_file = tmp_path / "logs" / "system.jsonl"
        with patch("notely.core.logging._logging_settings", return_value=mock_logging_config), \
             patch("notely.core.logging._log_path", return_value=log_file):
            setup_logging(level="INFO", enable_console=False, enable_file_logging=True)

        handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
        assert handler_types == ["RotatingFileHandler"]
        assert log_file.parent.is_dir()

        # close the file handler so tmp_path can be removed
        setup_logging(enable_console=False, enable_file_logging=False)

    def test_repeated_setup_does_not_stack_handlers(self, mock_logging_config):
        from notely.core.logging import setup_logging

        with patch("notely.core.logging._logging_settings", return_value=mock_logging_config):
            setup_logging(enable_file_logging=False)
            setup_logging(enable_file_logging=False)

        assert len(logging.getLogger().handlers) == 1

    def test_http_libraries_are_quieted(self, mock_logging_config):
        from notely.core.logging import setup_logging

        with patch("notely.core.logging._logging_settings", return_value=mock_logging_config):
            setup_logging(level="DEBUG", enable_file_logging=False)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestGetLogger:
    def test_get_logger_returns_structlog_logger(self):
        from notely.core.logging import get_logger

        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_adds_source_field(self):
        from notely.core.logging import log_with_source

        logger = MagicMock()
        log_with_source(logger, "sync", "info", "Notes loaded", count=3)

        logger.info.assert_called_once_with("Notes loaded", source="sync", count=3)

    def test_level_is_case_insensitive(self):
        from notely.core.logging import log_with_source

        logger = MagicMock()
        log_with_source(logger, "api", "WARNING", "Slow response")

        logger.warning.assert_called_once_with("Slow response", source="api")

    def test_raises_on_invalid_level(self):
        from notely.core.logging import get_logger, log_with_source

        with pytest.raises(AttributeError):
            log_with_source(get_logger("test"), "api", "nonexistent_level", "Test")


class TestLogPath:
    def test_relative_to_project_root(self, tmp_path):
        from notely.core.logging import _log_path

        with patch("notely.core.logging.find_project_root", return_value=tmp_path):
            assert _log_path("logs/system.jsonl") == tmp_path / "logs" / "system.jsonl"

    def test_absolute_path_is_kept(self, tmp_path):
        from notely.core.logging import _log_path

        target = tmp_path / "notely.jsonl"
        assert _log_path(str(target)) == target
