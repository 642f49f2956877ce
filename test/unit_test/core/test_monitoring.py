"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Logfire initialization with various configurations
- Feature flag handling
- The audit helpers with Logfire disabled and enabled
- Graceful degradation when Logfire calls fail
"""

from unittest.mock import MagicMock, patch

import pytest

from usogui_db.core import monitoring
from usogui_db.core.monitoring import (
    initialize_logfire,
    log_api_request,
    log_auth_event,
    log_error,
    log_media_resolution,
    log_moderation_action,
)

MODULE = "usogui_db.core.monitoring"


@pytest.fixture
def enabled():
    with patch(f"{MODULE}.LOGFIRE_ENABLED", True), patch(f"{MODULE}.LOGFIRE_TOKEN", "test-token"):
        yield


@pytest.fixture
def no_instrumentation():
    with patch(f"{MODULE}.LOGFIRE_TRACE_SQLALCHEMY", False), patch(
        f"{MODULE}.LOGFIRE_TRACE_HTTPX", False
    ), patch(f"{MODULE}.LOGFIRE_TRACE_FASTAPI", False):
        yield


class TestInitializeLogfire:
    """Test Logfire initialization."""

    @patch(f"{MODULE}.LOGFIRE_ENABLED", False)
    @patch(f"{MODULE}.logger")
    def test_disabled(self, mock_logger):
        assert initialize_logfire() is False
        mock_logger.info.assert_called_once()
        assert "disabled" in mock_logger.info.call_args[0][0]

    @patch(f"{MODULE}.LOGFIRE_ENABLED", True)
    @patch(f"{MODULE}.LOGFIRE_TOKEN", "")
    @patch(f"{MODULE}.logger")
    def test_missing_token(self, mock_logger):
        assert initialize_logfire() is False
        assert "LOGFIRE_TOKEN" in mock_logger.warning.call_args[0][0]

    @patch(f"{MODULE}.LOGFIRE_SERVICE_NAME", "usogui-db-test")
    @patch(f"{MODULE}.LOGFIRE_SAMPLE_RATE", 0.5)
    def test_configure_called(self, enabled, no_instrumentation):
        with patch("logfire.configure") as mock_configure:
            assert initialize_logfire() is True

        kwargs = mock_configure.call_args.kwargs
        assert kwargs["token"] == "test-token"
        assert kwargs["service_name"] == "usogui-db-test"
        assert kwargs["sampling"].head == 0.5

    @patch(f"{MODULE}.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch(f"{MODULE}.LOGFIRE_TRACE_HTTPX", True)
    @patch(f"{MODULE}.LOGFIRE_TRACE_FASTAPI", True)
    def test_instrumentation_flags(self, enabled):
        app = MagicMock()
        with patch("logfire.configure"), patch("logfire.instrument_sqlalchemy") as sqlalchemy, patch(
            "logfire.instrument_httpx"
        ) as httpx_instrument, patch("logfire.instrument_fastapi") as fastapi:
            assert initialize_logfire(app) is True

        sqlalchemy.assert_called_once()
        httpx_instrument.assert_called_once()
        fastapi.assert_called_once_with(app=app)

    @patch(f"{MODULE}.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch(f"{MODULE}.logger")
    def test_instrumentation_failure_is_a_warning(self, mock_logger, enabled):
        with patch("logfire.configure"), patch(
            "logfire.instrument_sqlalchemy", side_effect=RuntimeError("no engine")
        ), patch("logfire.instrument_httpx"), patch(f"{MODULE}.LOGFIRE_TRACE_FASTAPI", False):
            assert initialize_logfire() is True

        assert "Failed to instrument SQLAlchemy" in mock_logger.warning.call_args[0][0]

    @patch(f"{MODULE}.logger")
    def test_configure_failure(self, mock_logger, enabled):
        with patch("logfire.configure", side_effect=RuntimeError("bad token")):
            assert initialize_logfire() is False
        mock_logger.error.assert_called_once()


class TestHelpersDisabled:
    """With Logfire off every helper logs at debug level only."""

    @patch(f"{MODULE}.LOGFIRE_ENABLED", False)
    @patch(f"{MODULE}.logger")
    def test_api_request(self, mock_logger):
        log_api_request("GET", "/api/v1/events", 200, 12.345)
        mock_logger.debug.assert_called_once_with("GET /api/v1/events -> 200 (12.35ms)")

    @patch(f"{MODULE}.LOGFIRE_ENABLED", False)
    @patch(f"{MODULE}.logger")
    def test_other_helpers(self, mock_logger):
        log_media_resolution("https://cdn.usogui-fans.net/a.png", "direct", cached=True)
        log_auth_event("login", user_id=1, username="kaji")
        log_error("ValueError", "bad")
        assert mock_logger.debug.call_count == 3

    @patch(f"{MODULE}.LOGFIRE_ENABLED", False)
    @patch(f"{MODULE}.logger")
    def test_moderation_is_always_logged(self, mock_logger):
        log_moderation_action("reject", "media", 4, 2, reason="Off topic")
        message = mock_logger.info.call_args[0][0]
        assert message == "Moderation: reject media 4 by user 2"
        assert mock_logger.info.call_args.kwargs["extra"]["reason"] == "Off topic"


class TestHelpersEnabled:
    """With Logfire on the helpers emit Logfire records."""

    def test_api_request(self, enabled):
        with patch("logfire.info") as mock_info:
            log_api_request("POST", "/api/v1/media", 201, 5.0)
        mock_info.assert_called_once_with(
            "API request", method="POST", path="/api/v1/media", status_code=201, duration_ms=5.0
        )

    def test_auth_event(self, enabled):
        with patch("logfire.info") as mock_info:
            log_auth_event("logout", user_id=3)
        assert mock_info.call_args.kwargs["auth_event"] == "logout"

    def test_error_context(self, enabled):
        with patch("logfire.error") as mock_error:
            log_error("IntegrityError", "duplicate", {"path": "/api/v1/tags"})
        mock_error.assert_called_once_with("IntegrityError: duplicate", path="/api/v1/tags")

    @patch(f"{MODULE}.logger")
    def test_logfire_failure_degrades(self, mock_logger, enabled):
        with patch("logfire.info", side_effect=RuntimeError("exporter down")):
            log_media_resolution("https://cdn.usogui-fans.net/a.png", "direct", cached=False)
        assert "Could not log media resolution" in mock_logger.debug.call_args[0][0]


def test_module_defaults_from_environment():
    assert monitoring.LOGFIRE_ENABLED is False
