"""Unit tests for FastAPI dependencies and settings."""

from datetime import timedelta
from datetime import timezone
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from pipeline_console.dependencies import get_board
from pipeline_console.dependencies import get_client
from pipeline_console.dependencies import get_display_timezone
from pipeline_console.dependencies import get_settings
from pipeline_console.schedule.timezones import set_display_timezone


class TestAppStateDependencies:
    """Tests for dependencies reading app.state."""

    def test_get_settings_from_request(self):
        mock_settings = MagicMock()
        mock_request = MagicMock()
        mock_request.app.state.settings = mock_settings

        assert get_settings(mock_request) == mock_settings

    def test_get_client_from_request(self):
        mock_client = MagicMock()
        mock_request = MagicMock()
        mock_request.app.state.client = mock_client

        assert get_client(mock_request) == mock_client

    def test_get_board_from_request(self):
        mock_board = MagicMock()
        mock_request = MagicMock()
        mock_request.app.state.board = mock_board

        assert get_board(mock_request) == mock_board


class TestDisplayTimezone:
    """Tests for the configured display timezone."""

    def test_fixed_offset(self):
        set_display_timezone("+05:30")
        try:
            assert get_display_timezone() == timezone(timedelta(hours=5, minutes=30))
        finally:
            set_display_timezone("UTC")

    def test_invalid_name_rejected(self):
        with pytest.raises(ValueError):
            set_display_timezone("Nowhere/Special")


class TestSettings:
    """Tests for Settings loaded from the environment."""

    def test_defaults(self):
        from pipeline_console.settings import Settings

        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.orchestrator_base_url == "http://localhost:8002"
        assert settings.poll_interval_ms == 3000
        assert settings.enable_background_polling is True
        assert settings.display_timezone == "local"

    def test_from_environment(self, mock_settings):
        assert mock_settings.orchestrator_api_token == "test-token"
        assert mock_settings.orchestrator_org_slug == "test-org"
        assert mock_settings.enable_background_polling is False
        assert mock_settings.log_level == "DEBUG"
