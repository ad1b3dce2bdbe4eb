"""
Webhook Sender

Forwards desktop hints to a push gateway over HTTP using httpx.
"""
import logging
from typing import Optional

import httpx

from .base_sender import BaseSender, DeliveryHint, SendResult

logger = logging.getLogger("mwmgr.notifications.webhook")


class WebhookSender(BaseSender):
    """POST hints as JSON to a configured URL"""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def send(self, hint: DeliveryHint) -> SendResult:
        if not self.url:
            return SendResult(success=False, error="DESKTOP_WEBHOOK_URL not configured")

        try:
            response = await self._get_client().post(self.url, json=hint.to_dict())
        except httpx.HTTPError as e:
            logger.error(f"Webhook send error: {e}")
            return SendResult(success=False, error=str(e))

        if response.is_success:
            logger.info(f"Desktop hint forwarded for user {hint.user_id}")
            return SendResult(success=True)

        err = f"HTTP {response.status_code}: {response.text[:200]}"
        logger.error(f"Webhook request failed: {err}")
        return SendResult(success=False, error=err)

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
