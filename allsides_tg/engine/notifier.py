"""Telegram Bot API delivery."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

from ..config import TelegramConfig
from ..errors import NetworkError

# Official limit: 4,096 characters per message
TELEGRAM_MAX_MESSAGE_LENGTH = 4096


class Notifier(Protocol):
    def publish(self, channel: str, body: str) -> None: ...

    def notify_admin(self, admin: str, message: str) -> None: ...


class TelegramNotifier:
    """Send HTML-formatted posts to a channel and plain reports to an admin chat."""

    def __init__(
        self,
        config: TelegramConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("allsides_tg.notifier")
        self._client = client or httpx.Client(timeout=config.timeout)

    def publish(self, channel: str, body: str) -> None:
        if len(body) > TELEGRAM_MAX_MESSAGE_LENGTH:
            self.logger.warning("message_too_long", length=len(body), channel=channel)
        self._send(
            {
                "chat_id": channel,
                "text": body,
                "parse_mode": "HTML",
                "disable_web_page_preview": self.config.disable_web_page_preview,
            }
        )

    def notify_admin(self, admin: str, message: str) -> None:
        self._send({"chat_id": admin, "text": message[:TELEGRAM_MAX_MESSAGE_LENGTH]})

    def close(self) -> None:
        self._client.close()

    def _send(self, payload: dict[str, Any]) -> None:
        url = f"{self.config.api_base.rstrip('/')}/bot{self.config.secret}/sendMessage"
        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise NetworkError(f"telegram request failed: {exc}") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error or not body.get("ok", False):
            description = body.get("description") or response.reason_phrase
            raise NetworkError(
                f"telegram rejected message to {payload['chat_id']}: "
                f"{response.status_code} {description}"
            )


__all__ = ["Notifier", "TELEGRAM_MAX_MESSAGE_LENGTH", "TelegramNotifier"]
