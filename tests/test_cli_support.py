"""Tests for CLI support utilities."""
import logging
from unittest.mock import patch

import pytest
import typer
from rich.console import Console

from stencil.cli_support import (
    confirm_action,
    handle_cli_error,
    is_mock,
    parse_variables,
    print_error,
    print_info,
    print_success,
    print_warning,
)


class TestIsMock:
    """Test mock mode detection."""

    def test_mock_enabled(self, monkeypatch):
        """Should return True when STENCIL_MOCK=1."""
        monkeypatch.setenv("STENCIL_MOCK", "1")
        assert is_mock() is True

    def test_mock_disabled(self, monkeypatch):
        monkeypatch.delenv("STENCIL_MOCK", raising=False)
        assert is_mock() is False


class TestParseVariables:
    """Test --var parsing."""

    def test_pairs(self):
        assert parse_variables(["a=1", "b = two", "c="]) == {"a": "1", "b": " two", "c": ""}

    def test_value_may_contain_equals(self):
        assert parse_variables(["url=http://x/?a=b"]) == {"url": "http://x/?a=b"}

    def test_none(self):
        assert parse_variables(None) == {}

    @pytest.mark.parametrize("item", ["novalue", "=value"])
    def test_invalid(self, item):
        with pytest.raises(typer.BadParameter):
            parse_variables([item])


class TestConfirmAction:
    """Test confirmation prompts."""

    def test_yes_flag_skips_prompt(self):
        with patch("typer.confirm") as mock_confirm:
            assert confirm_action("Proceed?", yes_flag=True) is True
            mock_confirm.assert_not_called()

    def test_prompts(self):
        with patch("typer.confirm", return_value=False) as mock_confirm:
            assert confirm_action("Proceed?") is False
            mock_confirm.assert_called_once_with("Proceed?")


class TestOutputHelpers:
    """Test message formatting helpers."""

    @pytest.fixture
    def console(self):
        return Console(record=True, width=200)

    def test_handle_cli_error_exits(self, console):
        with pytest.raises(typer.Exit) as exc_info:
            handle_cli_error(ValueError("bad [thing]"), console, exit_code=3)
        assert exc_info.value.exit_code == 3
        # brackets in messages are not treated as markup
        assert "Error: bad [thing]" in console.export_text()

    def test_prefixes(self, console):
        print_success(console, "done")
        print_error(console, "failed")
        print_warning(console, "careful")
        print_info(console, "fyi")
        text = console.export_text()
        assert "✓ done" in text
        assert "✗ failed" in text
        assert "⚠ careful" in text
        assert "ℹ fyi" in text


class TestFileLogging:
    """Test optional file logging."""

    def test_setup_file_logging(self, tmp_path, monkeypatch):
        from stencil.core import logger as logger_module

        monkeypatch.setattr(logger_module, "_file_logging_configured", False)
        log_file = tmp_path / "logs" / "stencil.log"
        root_logger = logging.getLogger("stencil")
        before = list(root_logger.handlers)

        try:
            logger_module.setup_file_logging(str(log_file))
            logger_module.get_logger("stencil.test").info("hello from test")
            for handler in root_logger.handlers:
                handler.flush()
            assert "hello from test" in log_file.read_text()
        finally:
            for handler in root_logger.handlers[:]:
                if handler not in before:
                    root_logger.removeHandler(handler)
                    handler.close()

    def test_log_file_precedence(self, tmp_path, monkeypatch):
        from stencil.core.logger import resolve_log_file

        monkeypatch.setenv("STENCIL_LOG_FILE", str(tmp_path / "env" / "env.log"))

        assert resolve_log_file(str(tmp_path / "cli.log")) == tmp_path / "cli.log"
        assert resolve_log_file() == tmp_path / "env" / "env.log"
        assert (tmp_path / "env").is_dir()
