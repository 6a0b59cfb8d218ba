"""Notifier contract for user-visible success and error messages."""

from abc import ABC, abstractmethod

__all__ = ["Notifier"]


class Notifier(ABC):
    """Shows short messages to the user (toasts in a browser, log lines in a terminal)."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show a positive message naming the action that completed."""
        raise NotImplementedError

    @abstractmethod
    def error(self, message: str) -> None:
        """Show a failure message."""
        raise NotImplementedError
