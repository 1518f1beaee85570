"""Digest formatting for SMS delivery.

Everything here produces plain text sized for a single SMS, so field order and
separators are fixed. The final message is cut to a character budget rather
than parsed downstream.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from .models import BalanceSnapshot, GridBotRecord, TickerQuote

NOT_AVAILABLE = "N/A"
NO_ACTIVE_BOTS = "Active bots: 0"


def compact_decimal(value: Decimal, places: int) -> str:
    """Round half-up to `places` and drop trailing zeros (1234.50 -> 1234.5)."""
    quantized = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    if quantized == 0:
        return "0"
    return format(quantized.normalize(), "f")


def _optional(value: Optional[Decimal], places: int) -> str:
    if value is None:
        return NOT_AVAILABLE
    return compact_decimal(value, places)


def format_ticker_prices(quotes: Sequence[TickerQuote]) -> str:
    return "\n".join(f"{quote.symbol}: {quote.last}" for quote in quotes)


def format_balance(balance: BalanceSnapshot) -> str:
    return f"Eq:${compact_decimal(balance.total_equity, 2)}"


def format_grid_bot(bot: GridBotRecord) -> str:
    """One line per bot.

    BTC|L|PnL: $12.5(12.3%)|Inv: $100.5|Liq: $50000|R: $60000->$70000|Arbs: 42($3.21)
    """
    direction = bot.direction[:1].upper()
    pnl = compact_decimal(bot.total_pnl, 2)
    pnl_pct = compact_decimal(bot.pnl_ratio * 100, 1)
    investment = compact_decimal(bot.investment, 1)
    liq = _optional(bot.liquidation_price, 2)
    low = _optional(bot.min_price, 2)
    high = _optional(bot.max_price, 2)
    arbs = bot.arbitrage_count if bot.arbitrage_count is not None else NOT_AVAILABLE
    grid_profit = compact_decimal(bot.grid_profit, 2)

    return (
        f"{bot.symbol}|{direction}|PnL: ${pnl}({pnl_pct}%)|Inv: ${investment}"
        f"|Liq: ${liq}|R: ${low}->${high}|Arbs: {arbs}(${grid_profit})"
    )


def format_grid_bots(bots: Sequence[GridBotRecord]) -> str:
    if not bots:
        return NO_ACTIVE_BOTS
    return "\n".join(format_grid_bot(bot) for bot in bots)


def truncate(message: str, budget: int) -> str:
    """Keep the first `budget` characters; words may be cut."""
    return message[:max(budget, 0)]


def compose_message(
    balance_text: str,
    prices_text: str,
    bots_text: str,
    affirmation_text: str,
    has_active_bots: bool,
    budget: int,
) -> str:
    """Assemble the digest and cut it to the transport budget.

    Bot details and the affirmation never share a message: the affirmation
    only replaces the bot section when no bots are running.
    """
    sections: List[str] = [balance_text, prices_text]
    if has_active_bots:
        sections.append(bots_text)
    else:
        sections.append(affirmation_text)
    return truncate("\n".join(sections), budget)
