"""
Trade notification infrastructure.
"""

from .telegram import TelegramNotifier

__all__ = ["TelegramNotifier"]
