"""Bark push notification client.

Bark (https://github.com/Finb/Bark) delivers iOS push notifications through
a simple HTTP API: POST {server}/push with a JSON body carrying the device
key. A successful push answers {"code": 200, "message": "success"}.
"""

from dataclasses import asdict, dataclass

import httpx

from gas_tracker.config import BarkSettings
from gas_tracker.exceptions import NotificationError
from gas_tracker.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotificationOptions:
    """Presentation options of a Bark push."""

    sound: str = "bell"
    icon: str = "⛽"
    group: str = "gas-tracker"
    level: str = "active"  # active | timeSensitive | passive | critical
    badge: int = 1
    url: str = ""


class BarkNotifier:
    """Sends push notifications through a Bark server.

    Without a configured key every send() is a logged no-op returning False.

    Args:
        client: Shared async HTTP client.
        settings: Bark key, server URL and timeout.
    """

    def __init__(self, client: httpx.AsyncClient, settings: BarkSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return bool(self._settings.key.get_secret_value())

    async def send(
        self,
        title: str,
        body: str,
        options: NotificationOptions | None = None,
    ) -> bool:
        """Push a notification.

        Args:
            title: Notification title.
            body: Notification body text.
            options: Sound, icon, group, level, badge and deep link.

        Returns:
            True only when Bark confirmed the push. Delivery errors are
            logged and reported as False.
        """
        if not self.enabled:
            logger.info("bark_not_configured_skipping_notification", title=title)
            return False

        options = options or NotificationOptions()
        payload = {
            "device_key": self._settings.key.get_secret_value(),
            "title": title,
            "body": body,
            **asdict(options),
        }
        if not payload["url"]:
            del payload["url"]

        try:
            await self._push(payload)
        except (httpx.HTTPError, httpx.InvalidURL, NotificationError, ValueError) as e:
            logger.error("bark_notification_failed", title=title, error=str(e))
            return False

        logger.info("bark_notification_sent", title=title, level=options.level)
        return True

    async def _push(self, payload: dict) -> None:
        url = f"{self._settings.server_url.rstrip('/')}/push"
        response = await self._client.post(
            url, json=payload, timeout=self._settings.timeout_seconds
        )
        response.raise_for_status()

        data = response.json()
        code = data.get("code") if isinstance(data, dict) else None
        if code is not None and code != 200:
            raise NotificationError(f"Bark rejected push: {code} {data.get('message')}")
