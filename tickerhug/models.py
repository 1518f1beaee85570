"""Data models for TickerHug."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional


class SmsChannelType(str, Enum):
    TWILIO = "twilio"
    REST_GATEWAY = "rest_gateway"


def display_symbol(inst_id: str) -> str:
    """BTC-USDT-SWAP -> BTC"""
    return inst_id.split("-")[0]


def _to_decimal(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid number for {field_name}: {value!r}") from e


def _optional_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    # OKX sends "" for prices that do not apply to the bot
    if value is None or value == "":
        return None
    return _to_decimal(value, field_name)


@dataclass
class TickerQuote:
    """Last trade price for one instrument."""
    inst_id: str
    last: str

    @property
    def symbol(self) -> str:
        """Display symbol: the instrument id without its quote/contract suffix."""
        return display_symbol(self.inst_id)


@dataclass
class BalanceSnapshot:
    """Account-wide equity in USD."""
    total_equity: Decimal


@dataclass
class GridBotRecord:
    """Active contract grid bot, as reported by the exchange."""
    underlying: str
    direction: str
    grid_profit: Decimal
    total_pnl: Decimal
    pnl_ratio: Decimal
    investment: Decimal
    liquidation_price: Optional[Decimal] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    arbitrage_count: Optional[str] = None

    @property
    def symbol(self) -> str:
        return display_symbol(self.underlying)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GridBotRecord":
        """Build a record from an OKX orders-algo-pending entry.

        Raises:
            KeyError: if a required field is missing
            ValueError: if a numeric field cannot be parsed
        """
        arbitrage = data.get("arbitrageNum")
        return cls(
            underlying=data["uly"],
            direction=data["direction"],
            grid_profit=_to_decimal(data["gridProfit"], "gridProfit"),
            total_pnl=_to_decimal(data["totalPnl"], "totalPnl"),
            pnl_ratio=_to_decimal(data["pnlRatio"], "pnlRatio"),
            investment=_to_decimal(data["investment"], "investment"),
            liquidation_price=_optional_decimal(data.get("liqPx"), "liqPx"),
            min_price=_optional_decimal(data.get("minPx"), "minPx"),
            max_price=_optional_decimal(data.get("maxPx"), "maxPx"),
            arbitrage_count=str(arbitrage) if arbitrage is not None else None,
        )


@dataclass
class DispatchResult:
    """Outcome of one SMS send."""
    channel: SmsChannelType
    success: bool
    provider_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class DigestResult:
    """Outcome of one full fetch-compose-dispatch run."""
    message: str
    dispatch: DispatchResult

    @property
    def success(self) -> bool:
        return self.dispatch.success
