"""Common interface for SMS channels."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..exceptions import DispatchError
from ..models import DispatchResult, SmsChannelType

logger = logging.getLogger(__name__)


class SmsChannel(ABC):
    """An SMS provider that can deliver one text message to one number.

    Subclasses implement `_deliver`, raising DispatchError on any provider or
    network failure. `send` turns that into a failed DispatchResult, so a
    channel never raises for a message that could not be delivered.
    """

    channel_type: SmsChannelType

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether the channel has the credentials it needs."""

    @abstractmethod
    async def _deliver(self, message: str, recipient: str) -> Optional[str]:
        """Hand the message to the provider and return its message id."""

    async def send(self, message: str, recipient: str) -> DispatchResult:
        if not self.enabled:
            logger.warning(f"{self.channel_type.value} not configured, cannot send SMS")
            return DispatchResult(
                channel=self.channel_type,
                success=False,
                error="channel not configured",
            )

        try:
            provider_id = await self._deliver(message, recipient)
        except DispatchError as e:
            logger.error(f"Failed to send SMS via {self.channel_type.value}: {e}")
            return DispatchResult(channel=self.channel_type, success=False, error=str(e))

        logger.info(f"SMS sent via {self.channel_type.value}: {provider_id}")
        return DispatchResult(channel=self.channel_type, success=True, provider_id=provider_id)
