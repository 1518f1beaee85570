"""SMS alerting for TickerHug."""

from .channel import SmsChannel
from .dispatcher import SmsDispatcher, build_channel
from .rest_gateway import RestGatewayChannel
from .twilio_client import TwilioChannel

__all__ = ["SmsChannel", "SmsDispatcher", "build_channel", "RestGatewayChannel", "TwilioChannel"]
