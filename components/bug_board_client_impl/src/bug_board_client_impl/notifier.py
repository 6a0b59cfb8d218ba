"""Notifier that writes user-facing messages to the log."""

import logging

from bug_board_interface.notifications import Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """Stands in for on-screen toasts when the board runs without a UI."""

    def success(self, message: str) -> None:
        logger.info("%s", message)

    def error(self, message: str) -> None:
        logger.error("%s", message)
