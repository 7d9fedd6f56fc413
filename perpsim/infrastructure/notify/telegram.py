"""
Telegram trade notifier.
"""

import requests
from loguru import logger

from perpsim.core.constants import HTTP_TIMEOUT_SECONDS, TELEGRAM_API_URL
from perpsim.core.exceptions.simulation import ConfigurationError, NotificationError
from perpsim.core.interfaces.notifier import ITradeNotifier


class TelegramNotifier(ITradeNotifier):
    """Posts trade messages to a Telegram chat through the Bot API."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        api_url: str = TELEGRAM_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        if not bot_token or not chat_id:
            raise ConfigurationError("Telegram bot token and chat id are required")

        self.chat_id = chat_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self._url = f"{api_url.rstrip('/')}/bot{bot_token}/sendMessage"

    def notify(self, message: str) -> None:
        try:
            response = self.session.post(
                self._url,
                json={"chat_id": self.chat_id, "text": message},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            # The exception text carries the URL, which embeds the token.
            raise NotificationError(f"Telegram delivery failed: {type(e).__name__}") from e

        logger.debug(f"Sent Telegram notification to chat {self.chat_id}")
