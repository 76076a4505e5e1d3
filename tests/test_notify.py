"""Tests for sarotate/notify.py - apprise dispatch."""

from __future__ import annotations

import logging

import pytest
from sarotate.config import NotificationConfig
from sarotate.exceptions import SARotateError
from sarotate.notify import NotifyStatus, Notifier, build_apprise_command, sanitize_message


class TestSanitizeMessage:
    """Tests for sanitize_message."""

    def test_replaces_quotes(self):
        assert sanitize_message("it's \"fine\"") == "it´s ´fine´"

    def test_plain_message_unchanged(self):
        assert sanitize_message("Switching remote gdrive") == "Switching remote gdrive"


class TestBuildAppriseCommand:
    """Tests for build_apprise_command."""

    def test_command(self):
        cmd = build_apprise_command("don't", ["discord://a/b", "mailto://c"])
        assert cmd == ["apprise", "-vv", "-b", "don´t", "discord://a/b", "mailto://c"]


class TestNotifier:
    """Tests for Notifier.notify with mocked run_command."""

    def test_errors_only_suppresses_info(self, mocker):
        """Below-error messages are never dispatched in errors-only mode."""
        mock_run = mocker.patch("sarotate.notify.run_command")
        notifier = Notifier(NotificationConfig(errors_only=True, apprise=["discord://a/b"]))

        for level in (logging.DEBUG, logging.INFO, logging.WARNING):
            assert notifier.notify("swapped", level) is NotifyStatus.SUPPRESSED

        mock_run.assert_not_called()

    @pytest.mark.parametrize("level", [logging.ERROR, logging.CRITICAL])
    def test_errors_only_sends_errors(self, mocker, level):
        mock_run = mocker.patch("sarotate.notify.run_command", return_value=(0, "", ""))
        notifier = Notifier(NotificationConfig(errors_only=True, apprise=["discord://a/b"]))

        assert notifier.notify("failed", level) is NotifyStatus.SENT
        assert mock_run.call_count == 1

    def test_sends_info_when_not_errors_only(self, mocker):
        mock_run = mocker.patch("sarotate.notify.run_command", return_value=(0, "", ""))
        notifier = Notifier(NotificationConfig(apprise=["discord://a/b", ""]), timeout_s=7)

        assert notifier.notify("swapped", logging.INFO) is NotifyStatus.SENT
        cmd = mock_run.call_args[0][0]
        assert cmd == ["apprise", "-vv", "-b", "swapped", "discord://a/b"]
        assert mock_run.call_args[1]["timeout_s"] == 7

    def test_no_targets(self, mocker):
        mock_run = mocker.patch("sarotate.notify.run_command")
        notifier = Notifier(NotificationConfig(apprise=["  "]))

        assert notifier.notify("failed", logging.ERROR) is NotifyStatus.NO_TARGETS
        mock_run.assert_not_called()

    def test_dispatch_failure_is_not_raised(self, mocker, caplog):
        mocker.patch("sarotate.notify.run_command", return_value=(1, "", "bad url"))
        notifier = Notifier(NotificationConfig(apprise=["bogus://"]))

        with caplog.at_level(logging.ERROR, logger="sarotate"):
            status = notifier.notify("failed", logging.ERROR)

        assert status is NotifyStatus.FAILED
        assert "Unable to send apprise notification" in caplog.text

    def test_missing_apprise_binary_is_not_raised(self, mocker):
        mocker.patch(
            "sarotate.notify.run_command",
            side_effect=SARotateError("apprise binary not found on PATH."),
        )
        notifier = Notifier(NotificationConfig(apprise=["discord://a/b"]))

        assert notifier.notify("failed", logging.ERROR) is NotifyStatus.FAILED

    def test_launch_error_is_not_raised(self, mocker, caplog):
        """An apprise binary that cannot be executed is reported, not raised."""
        mocker.patch(
            "sarotate.rclone.subprocess.run",
            side_effect=PermissionError(13, "Permission denied"),
        )
        notifier = Notifier(NotificationConfig(apprise=["discord://a/b"]))

        with caplog.at_level(logging.ERROR, logger="sarotate"):
            status = notifier.notify("boom", logging.ERROR)

        assert status is NotifyStatus.FAILED
        assert "Unable to send apprise notification: boom" in caplog.text
