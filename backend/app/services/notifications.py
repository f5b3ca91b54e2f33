"""Outbound webhook for vendor approval decisions. Best-effort by contract."""
import asyncio
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Optional

logger = logging.getLogger(__name__)


class WebhookNotifier:
    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    def _post(self, event: dict[str, Any]) -> int:
        req = urllib.request.Request(
            self.url,
            data=json.dumps(event).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json", "User-Agent": "RFP-Portal/1.0"},
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return resp.status

    async def notify(self, event: dict[str, Any]) -> None:
        status = await asyncio.to_thread(self._post, event)
        logger.info("webhook delivered: action=%s vendor_id=%s status=%s", event.get("action"), event.get("vendorId"), status)


class NotificationDispatcher:
    """Wraps a notifier so that delivery failures are logged and dropped, never raised."""

    def __init__(self, notifier: Optional[Any]) -> None:
        self.notifier = notifier

    async def dispatch(self, event: dict[str, Any]) -> bool:
        if self.notifier is None:
            logger.info("webhook not configured; skipping %s for vendor %s", event.get("action"), event.get("vendorId"))
            return False
        try:
            await self.notifier.notify(event)
            return True
        except Exception as e:
            logger.warning("webhook failed for vendor %s (%s): %s", event.get("vendorId"), event.get("action"), e)
            return False
