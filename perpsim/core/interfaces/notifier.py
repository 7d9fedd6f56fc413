"""
Trade notification interface.
"""

from abc import ABC, abstractmethod


class ITradeNotifier(ABC):
    """Abstract interface for the human-readable trade side channel.

    Notifications are a non-critical effect: the engine catches and logs any
    failure and never lets it affect a cycle's result.
    """

    @abstractmethod
    def notify(self, message: str) -> None:
        """Deliver message.

        Raises:
            NotificationError: If delivery failed
        """
        pass


class NullNotifier(ITradeNotifier):
    """Notifier that discards every message."""

    def notify(self, message: str) -> None:
        """Discard message."""
        return None
