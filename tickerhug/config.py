"""Configuration for TickerHug."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """TickerHug configuration.

    Built once at process start and passed to the components that need it.
    """

    # OKX - Exchange API
    okx_api_key: str = Field(default="", alias="OKX_API_KEY")
    okx_secret_key: str = Field(default="", alias="OKX_SECRET_KEY")
    okx_passphrase: str = Field(default="", alias="OKX_PASSPHRASE")
    okx_base_url: str = Field(default="https://www.okx.com", alias="OKX_BASE_URL")
    instruments_raw: str = Field(default="BTC-USDT-SWAP,LINK-USDT-SWAP", alias="INSTRUMENTS")

    # Affirmation filler (shown when no bots are running)
    affirmation_url: str = Field(default="https://www.affirmations.dev/", alias="AFFIRMATION_URL")

    # SMS channel selection: "twilio" or "rest_gateway"
    sms_channel: str = Field(default="twilio", alias="SMS_CHANNEL")
    recipient_phone_number: str = Field(default="", alias="RECIPIENT_PHONE_NUMBER")

    # Twilio - Telecom API channel
    twilio_account_sid: Optional[str] = Field(default=None, alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: Optional[str] = Field(default=None, alias="TWILIO_AUTH_TOKEN")
    twilio_phone_number: Optional[str] = Field(default=None, alias="TWILIO_PHONE_NUMBER")

    # REST SMS gateway channel
    rest_gateway_base_url: Optional[str] = Field(default=None, alias="REST_GATEWAY_BASE_URL")
    rest_gateway_api_key: Optional[str] = Field(default=None, alias="REST_GATEWAY_API_KEY")
    rest_gateway_sender: str = Field(default="TickerHug", alias="REST_GATEWAY_SENDER")

    # Message budget
    sms_max_length: int = Field(default=159, alias="SMS_MAX_LENGTH")
    sms_prefix_overhead: int = Field(default=38, alias="SMS_PREFIX_OVERHEAD")  # Twilio trial prefix
    message_budget_override: Optional[int] = Field(default=None, alias="MESSAGE_BUDGET")

    # Timeouts
    fetch_timeout_seconds: float = Field(default=10.0, alias="FETCH_TIMEOUT_SECONDS")
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")

    # Server
    port: int = Field(default=3000, alias="PORT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def instruments(self) -> List[str]:
        return [s.strip().upper() for s in self.instruments_raw.split(",") if s.strip()]

    @property
    def message_budget(self) -> int:
        """Characters available to the digest once the provider prefix is accounted for."""
        if self.message_budget_override is not None:
            return self.message_budget_override
        return max(self.sms_max_length - self.sms_prefix_overhead, 0)

    @property
    def okx_enabled(self) -> bool:
        return all([self.okx_api_key, self.okx_secret_key, self.okx_passphrase])

    @property
    def twilio_enabled(self) -> bool:
        return all([
            self.twilio_account_sid,
            self.twilio_auth_token,
            self.twilio_phone_number,
            self.recipient_phone_number,
        ])

    @property
    def rest_gateway_enabled(self) -> bool:
        return all([self.rest_gateway_base_url, self.rest_gateway_api_key, self.recipient_phone_number])

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
