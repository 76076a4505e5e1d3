"""Apprise notifications."""

from __future__ import annotations

import logging
from enum import Enum

from .config import NotificationConfig
from .constants import APPRISE_BINARY, DEFAULT_COMMAND_TIMEOUT_S, QUOTE_REPLACEMENT
from .exceptions import SARotateError
from .rclone import run_command

logger = logging.getLogger("sarotate")


class NotifyStatus(Enum):
    SENT = "sent"
    SUPPRESSED = "suppressed"
    NO_TARGETS = "no_targets"
    FAILED = "failed"


def sanitize_message(message: str) -> str:
    """Replace quote characters that would break the apprise invocation."""
    return message.replace("'", QUOTE_REPLACEMENT).replace('"', QUOTE_REPLACEMENT)


def build_apprise_command(message: str, targets: list[str]) -> list[str]:
    return [APPRISE_BINARY, "-vv", "-b", sanitize_message(message), *targets]


class Notifier:
    """Send messages to every configured apprise target.

    Dispatch failures are logged and reported as NotifyStatus.FAILED, never
    raised.
    """

    def __init__(self, config: NotificationConfig, *, timeout_s: int = DEFAULT_COMMAND_TIMEOUT_S):
        self.config = config
        self.timeout_s = timeout_s

    def notify(self, message: str, level: int = logging.DEBUG) -> NotifyStatus:
        if self.config.errors_only and level < logging.ERROR:
            logger.log(
                level,
                "apprise notification not sent due to errors_only notifications: %s",
                message,
            )
            return NotifyStatus.SUPPRESSED

        targets = self.config.targets
        if not targets:
            return NotifyStatus.NO_TARGETS

        try:
            rc, out, err = run_command(
                build_apprise_command(message, targets), timeout_s=self.timeout_s
            )
        except SARotateError as e:
            logger.error("Unable to send apprise notification: %s", message)
            logger.debug("Apprise failure: %s", e)
            return NotifyStatus.FAILED

        if rc != 0:
            logger.error("Unable to send apprise notification: %s", message)
            logger.debug("Apprise failure (rc=%d): %s", rc, (err or out).strip())
            return NotifyStatus.FAILED

        logger.debug("sent apprise notification: %s", message)
        return NotifyStatus.SENT
