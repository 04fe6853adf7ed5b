"""HTTP client for the push-queue publish API"""

import json
from typing import Any

import httpx
from pydantic import BaseModel

from jobrelay.config.logging import get_logger
from jobrelay.v1.core.exceptions import InfrastructureError

logger = get_logger(__name__)


class PublishReceipt(BaseModel):
    message_id: str | None = None


class QueuePublisher:
    """Publishes messages that the push-queue will deliver to a callback URL"""

    def __init__(
        self,
        base_url: str,
        token: str | None,
        timeout: float = 10.0,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.max_retries = max_retries
        self.client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def publish(self, url: str, body: dict[str, Any]) -> PublishReceipt:
        """
        Ask the queue to deliver ``body`` to ``url``.

        Success means the queue accepted the message for later delivery,
        not that the callback ran.
        """
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Upstash-Delay": "0s",
        }
        if self.max_retries is not None:
            headers["Upstash-Retries"] = str(self.max_retries)

        try:
            response = await self.client.post(
                f"/v2/publish/{url}",
                content=json.dumps(body).encode("utf-8"),
                headers=headers,
            )
        except httpx.RequestError as e:
            logger.error("Queue publish failed", url=url, error=str(e))
            raise InfrastructureError(
                "Queue provider unreachable", details={"error": str(e)}
            ) from e

        return self._handle_response(response, url)

    def _handle_response(self, response: httpx.Response, url: str) -> PublishReceipt:
        """Check status and extract the message id"""
        if response.status_code >= 400:
            logger.error(
                "Queue publish rejected",
                url=url,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise InfrastructureError(
                f"Queue provider rejected publish: {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError:
            data = {}

        # Batch-style responses come back as a list of receipts
        if isinstance(data, list):
            data = data[0] if data else {}

        return PublishReceipt(message_id=data.get("messageId"))
