"""Twilio channel for SMS delivery."""

import asyncio
import logging
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from ..exceptions import DispatchError
from ..models import SmsChannelType
from .channel import SmsChannel

logger = logging.getLogger(__name__)


class TwilioChannel(SmsChannel):
    """Sends SMS through the Twilio messaging API.

    Twilio trial accounts prepend a fixed sender prefix to every body, which is
    why the digest budget subtracts a prefix overhead by default.
    """

    channel_type = SmsChannelType.TWILIO

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        client: Optional[Client] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.client: Optional[Client] = client

    @property
    def enabled(self) -> bool:
        if self.client is not None:
            return bool(self.from_number)
        return all([self.account_sid, self.auth_token, self.from_number])

    def connect(self) -> Client:
        """Create the Twilio REST client on first use."""
        if self.client is None:
            self.client = Client(self.account_sid, self.auth_token)
            logger.info("Twilio client initialized")
        return self.client

    def _create_message(self, message: str, recipient: str) -> str:
        client = self.connect()
        msg = client.messages.create(
            body=message,
            from_=self.from_number,
            to=recipient,
        )
        return msg.sid

    async def _deliver(self, message: str, recipient: str) -> Optional[str]:
        # The Twilio SDK is blocking; keep it off the event loop
        try:
            return await asyncio.to_thread(self._create_message, message, recipient)
        except TwilioException as e:
            raise DispatchError(f"Twilio error: {e}") from e
        except OSError as e:
            raise DispatchError(f"Twilio unreachable: {e}") from e
