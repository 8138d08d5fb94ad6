"""Tests for PostHog analytics helper."""

from unittest.mock import MagicMock, patch


class TestPostHogCapture:
    """Test posthog capture helper functions."""

    @patch("moodjournal.core.posthog._posthog")
    @patch("moodjournal.core.posthog._initialized", True)
    def test_capture_sends_event(self, mock_posthog):
        from moodjournal.core.posthog import capture

        capture(user_id="user-123", event="mood_entry_committed", properties={"mood_level": 7})
        mock_posthog.capture.assert_called_once()
        call_kwargs = mock_posthog.capture.call_args
        assert call_kwargs.kwargs["distinct_id"] == "user-123"
        assert call_kwargs.kwargs["event"] == "mood_entry_committed"
        assert call_kwargs.kwargs["properties"]["mood_level"] == 7

    @patch("moodjournal.core.posthog._posthog")
    @patch("moodjournal.core.posthog._initialized", False)
    def test_capture_noop_when_not_initialized(self, mock_posthog):
        from moodjournal.core.posthog import capture

        capture(user_id="user-123", event="test_event")
        mock_posthog.capture.assert_not_called()

    @patch("moodjournal.core.posthog._posthog")
    @patch("moodjournal.core.posthog._initialized", True)
    def test_capture_swallows_exceptions(self, mock_posthog):
        from moodjournal.core.posthog import capture

        mock_posthog.capture.side_effect = Exception("network error")
        # Should not raise
        capture(user_id="user-123", event="test_event")


class TestPostHogLifecycle:
    @patch("moodjournal.core.posthog._posthog")
    @patch("moodjournal.core.posthog.get_settings")
    def test_disabled_without_api_key(self, mock_settings, mock_posthog):
        import moodjournal.core.posthog as posthog_module

        mock_settings.return_value = MagicMock(posthog_enabled=True, posthog_api_key="")
        with patch.object(posthog_module, "_initialized", False):
            posthog_module.init_posthog()
            assert posthog_module._initialized is False

    @patch("moodjournal.core.posthog._posthog")
    @patch("moodjournal.core.posthog.get_settings")
    def test_init_then_shutdown(self, mock_settings, mock_posthog):
        import moodjournal.core.posthog as posthog_module

        mock_settings.return_value = MagicMock(
            posthog_enabled=True,
            posthog_api_key="phc_test",
            posthog_host="https://eu.i.posthog.com",
            debug=False,
        )
        with patch.object(posthog_module, "_initialized", False):
            posthog_module.init_posthog()
            assert posthog_module._initialized is True
            assert mock_posthog.api_key == "phc_test"

            posthog_module.shutdown_posthog()
            assert posthog_module._initialized is False
            mock_posthog.flush.assert_called_once()
            mock_posthog.shutdown.assert_called_once()
