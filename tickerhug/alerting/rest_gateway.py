"""HTTP REST SMS gateway channel (Infobip-style advanced text API)."""

import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import DispatchError
from ..models import SmsChannelType
from .channel import SmsChannel

logger = logging.getLogger(__name__)

SEND_PATH = "/sms/2/text/advanced"


class RestGatewayChannel(SmsChannel):
    """Sends SMS with a single JSON POST to a REST gateway."""

    channel_type = SmsChannelType.REST_GATEWAY

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        sender: str,
        timeout: float = 10.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        if self.base_url and "://" not in self.base_url:
            self.base_url = f"https://{self.base_url}"
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self.http = http

    @property
    def enabled(self) -> bool:
        return all([self.base_url, self.api_key])

    def build_payload(self, message: str, recipient: str) -> Dict[str, Any]:
        return {
            "messages": [
                {
                    "destinations": [{"to": recipient}],
                    "from": self.sender,
                    "text": message,
                }
            ]
        }

    async def _post(self, client: httpx.AsyncClient, message: str, recipient: str) -> httpx.Response:
        return await client.post(
            f"{self.base_url}{SEND_PATH}",
            json=self.build_payload(message, recipient),
            headers={
                "Authorization": f"App {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self.timeout,
        )

    async def _deliver(self, message: str, recipient: str) -> Optional[str]:
        try:
            if self.http is not None:
                response = await self._post(self.http, message, recipient)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, message, recipient)
        except httpx.HTTPError as e:
            raise DispatchError(f"SMS gateway unreachable: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise DispatchError(f"SMS gateway error: {response.status_code} - {response.text}")

        try:
            return response.json()["messages"][0]["messageId"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.debug(f"SMS gateway accepted message without a message id: {response.text}")
            return None
