"""Tests for logger.py — setup_logging() and JsonFormatter.

Covers:
- HTTP mode logging (stderr handler)
- stdio mode logging (file handler only, never stdout)
- Debug level override
- Environment variable LOG_LEVEL / LOG_FILE handling
- JSON formatter output
- Third-party logger silencing

Strategy: Mock logging.basicConfig to verify setup_logging passes correct args,
since pytest's log capture plugin interferes with actual basicConfig calls.
"""

import json
import logging
import sys
from unittest.mock import patch

from confluence_mcp_server.logger import DEFAULT_LOG_FILE, JsonFormatter, setup_logging


def _close_file_handlers(handlers):
    for h in handlers:
        if isinstance(h, logging.FileHandler):
            h.close()


# ---------------------------------------------------------------------------
# setup_logging tests
# ---------------------------------------------------------------------------


class TestSetupLogging:
    """Tests for setup_logging()."""

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_http_mode_logs_to_stderr(self, mock_basic):
        """HTTP mode passes StreamHandler(stderr) to basicConfig."""
        setup_logging(mode="http")

        mock_basic.assert_called_once()
        handlers = mock_basic.call_args[1]["handlers"]
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].stream is sys.stderr

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_stdio_mode_logs_to_file_only(self, mock_basic, tmp_path):
        """stdio mode installs a single FileHandler, nothing on a stream."""
        log_file = tmp_path / "test-stdio.log"
        setup_logging(mode="stdio", log_file=str(log_file))

        handlers = mock_basic.call_args[1]["handlers"]
        try:
            assert len(handlers) == 1
            assert isinstance(handlers[0], logging.FileHandler)
            assert handlers[0].baseFilename == str(log_file)
        finally:
            _close_file_handlers(handlers)

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_stdio_mode_log_file_env(self, mock_basic, tmp_path, monkeypatch):
        log_file = tmp_path / "from-env.log"
        monkeypatch.setenv("LOG_FILE", str(log_file))
        setup_logging(mode="stdio")

        handlers = mock_basic.call_args[1]["handlers"]
        try:
            assert handlers[0].baseFilename == str(log_file)
        finally:
            _close_file_handlers(handlers)

    @patch("confluence_mcp_server.logger.logging.FileHandler")
    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_stdio_mode_default_log_file(self, mock_basic, mock_file_handler, monkeypatch):
        """stdio mode defaults to /tmp/confluence-mcp-server.log."""
        monkeypatch.delenv("LOG_FILE", raising=False)
        setup_logging(mode="stdio")

        mock_file_handler.assert_called_once_with(DEFAULT_LOG_FILE, mode="a")
        assert DEFAULT_LOG_FILE == "/tmp/confluence-mcp-server.log"

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_debug_overrides_level(self, mock_basic):
        setup_logging(mode="http", debug=True)
        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_env_log_level_honored(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(mode="http")
        assert mock_basic.call_args[1]["level"] == logging.ERROR

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_explicit_level_beats_env(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(mode="http", level="debug")
        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_debug_beats_env(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(mode="http", debug=True)
        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_http_mode_with_log_file(self, mock_basic, tmp_path):
        """HTTP mode with log_file creates both stderr and file handlers."""
        setup_logging(mode="http", log_file=str(tmp_path / "test-http.log"))

        handlers = mock_basic.call_args[1]["handlers"]
        try:
            file_handlers = [h for h in handlers if isinstance(h, logging.FileHandler)]
            assert len(handlers) == 2
            assert len(file_handlers) == 1
        finally:
            _close_file_handlers(handlers)

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_json_format_uses_json_formatter(self, mock_basic):
        setup_logging(mode="http", debug_format="json")
        handlers = mock_basic.call_args[1]["handlers"]
        assert all(isinstance(h.formatter, JsonFormatter) for h in handlers)

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_third_party_silenced(self, _mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(mode="http")

        for name in ("urllib3", "httpx", "httpcore", "uvicorn.access"):
            assert logging.getLogger(name).level == logging.WARNING

    @patch("confluence_mcp_server.logger.logging.FileHandler")
    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_stdio_default_level_is_warning(self, mock_basic, _fh, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(mode="stdio")
        assert mock_basic.call_args[1]["level"] == logging.WARNING

    @patch("confluence_mcp_server.logger.logging.basicConfig")
    def test_http_default_level_is_info(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(mode="http")
        assert mock_basic.call_args[1]["level"] == logging.INFO


# ---------------------------------------------------------------------------
# JsonFormatter tests
# ---------------------------------------------------------------------------


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_basic_output(self):
        formatter = JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        record = logging.LogRecord(
            name="confluence_mcp_server.core.client",
            level=logging.INFO,
            pathname="client.py",
            lineno=1,
            msg="Getting space with key: %s",
            args=("DOCS",),
            exc_info=None,
        )

        data = json.loads(formatter.format(record))

        assert "ts" in data
        assert data["level"] == "INFO"
        assert data["logger"] == "confluence_mcp_server.core.client"
        assert data["msg"] == "Getting space with key: DOCS"
        assert "exc" not in data

    def test_includes_exception(self):
        formatter = JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")

        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            name="test",
            level=logging.ERROR,
            pathname="test.py",
            lineno=1,
            msg="An error occurred",
            args=(),
            exc_info=exc_info,
        )

        data = json.loads(formatter.format(record))
        assert "ValueError: test error" in data["exc"]
