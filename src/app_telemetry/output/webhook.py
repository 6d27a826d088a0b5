import asyncio
import random

import httpx

from app_telemetry.domain import Alert
from app_telemetry.exceptions import AlertDeliveryError, RateLimitError


class WebhookAlertOutput:
    """POSTs alerts as JSON to an HTTP endpoint, backing off on 429 responses."""

    MAX_RETRIES = 3
    BASE_BACKOFF = 1.0
    MAX_JITTER = 0.5

    def __init__(
        self,
        url: str,
        access_token: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.access_token = access_token
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "webhook"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def send(self, alert: Alert) -> None:
        payload = alert.to_dict()
        retries = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                response = await client.post(self.url, json=payload, headers=self._headers())

                if response.status_code == 429:
                    if retries >= self.MAX_RETRIES:
                        retry_after = response.headers.get("Retry-After")
                        raise RateLimitError(
                            "Webhook rate limit exceeded after max retries",
                            retry_after=float(retry_after) if retry_after else None,
                        )

                    delay = self.BASE_BACKOFF * (2**retries) + random.uniform(0, self.MAX_JITTER)
                    await asyncio.sleep(delay)
                    retries += 1
                    continue

                if response.status_code >= 400:
                    raise AlertDeliveryError(
                        f"Webhook rejected alert {alert.rule.id!r} with status {response.status_code}"
                    )
                return
