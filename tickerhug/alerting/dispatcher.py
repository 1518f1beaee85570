"""SMS dispatcher: channel selection and delivery."""

import logging

from ..config import Settings
from ..models import DispatchResult, SmsChannelType
from .channel import SmsChannel
from .rest_gateway import RestGatewayChannel
from .twilio_client import TwilioChannel

logger = logging.getLogger(__name__)


def build_channel(settings: Settings) -> SmsChannel:
    """Create the SMS channel named by SMS_CHANNEL.

    Raises:
        ValueError: if the channel name is unknown
    """
    try:
        channel_type = SmsChannelType(settings.sms_channel.strip().lower())
    except ValueError:
        raise ValueError(
            f"Unknown SMS_CHANNEL {settings.sms_channel!r}; "
            f"expected one of {[c.value for c in SmsChannelType]}"
        )

    if channel_type == SmsChannelType.REST_GATEWAY:
        return RestGatewayChannel(
            base_url=settings.rest_gateway_base_url,
            api_key=settings.rest_gateway_api_key,
            sender=settings.rest_gateway_sender,
            timeout=settings.http_timeout_seconds,
        )
    return TwilioChannel(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_phone_number,
    )


class SmsDispatcher:
    """Delivers the digest to the configured recipient over one channel."""

    def __init__(self, channel: SmsChannel, recipient: str):
        self.channel = channel
        self.recipient = recipient

    async def send(self, message: str) -> DispatchResult:
        """Send the message once. Failures are logged and returned, never raised."""
        if not self.recipient:
            logger.warning("No recipient phone number configured, cannot send SMS")
            return DispatchResult(
                channel=self.channel.channel_type,
                success=False,
                error="recipient not configured",
            )

        result = await self.channel.send(message, self.recipient)

        log_level = logging.INFO if result.success else logging.ERROR
        logger.log(
            log_level,
            f"Digest {'sent' if result.success else 'FAILED'} via {result.channel.value} "
            f"({len(message)} chars)"
        )
        return result
