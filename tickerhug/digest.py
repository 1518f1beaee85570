"""Account digest - fetch, compose and dispatch.

Four independent fetchers run concurrently. Each one swallows its own failure
and substitutes a fixed fallback line, so a digest with three good sections
still goes out.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

import httpx

from .alerting.dispatcher import SmsDispatcher
from .config import Settings
from .formatter import (
    NO_ACTIVE_BOTS,
    compose_message,
    format_balance,
    format_grid_bots,
    format_ticker_prices,
)
from .models import DigestResult
from .sources.affirmations import AffirmationClient
from .sources.okx import OkxClient, okx_client_from_settings

logger = logging.getLogger(__name__)

PRICES_FALLBACK = "Error fetching prices."
BALANCE_FALLBACK = "Error fetching balance."
GRID_BOTS_FALLBACK = "Error fetching grid bots."
AFFIRMATION_FALLBACK = "Keep going, you're doing great!"

T = TypeVar("T")


async def _guarded(
    name: str,
    fetch: Callable[[], Awaitable[T]],
    render: Callable[[T], str],
    fallback: str,
    timeout: Optional[float],
) -> str:
    """Run one fetch under a timeout; any failure becomes the fallback line."""
    try:
        result = await asyncio.wait_for(fetch(), timeout=timeout)
        return render(result)
    except asyncio.TimeoutError:
        logger.error(f"{name} fetch timed out after {timeout}s")
    except Exception as e:
        logger.error(f"{name} error: {e}")
    return fallback


async def fetch_ticker_prices(
    okx: OkxClient, instruments: List[str], timeout: Optional[float] = None
) -> str:
    """`SYMBOL: price` lines, or one fallback line if any instrument fails."""
    return await _guarded(
        "Ticker",
        lambda: okx.get_ticker_quotes(instruments),
        format_ticker_prices,
        PRICES_FALLBACK,
        timeout,
    )


async def fetch_account_balance(okx: OkxClient, timeout: Optional[float] = None) -> str:
    return await _guarded("Balance", okx.get_balance, format_balance, BALANCE_FALLBACK, timeout)


async def fetch_grid_bots(okx: OkxClient, timeout: Optional[float] = None) -> str:
    return await _guarded("Grid bot", okx.get_grid_bots, format_grid_bots, GRID_BOTS_FALLBACK, timeout)


async def fetch_affirmation(client: AffirmationClient, timeout: Optional[float] = None) -> str:
    return await _guarded(
        "Affirmation",
        client.get_affirmation,
        lambda text: text,
        AFFIRMATION_FALLBACK,
        timeout,
    )


class DigestRunner:
    """Runs one full digest: fan out the fetchers, compose, send.

    Settings are passed in explicitly; nothing here reads the environment.
    """

    def __init__(
        self,
        settings: Settings,
        dispatcher: SmsDispatcher,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.dispatcher = dispatcher
        self.http_client = http_client

    async def run(self) -> DigestResult:
        if self.http_client is not None:
            return await self._run(self.http_client)
        async with httpx.AsyncClient(timeout=self.settings.http_timeout_seconds) as client:
            return await self._run(client)

    async def _run(self, http: httpx.AsyncClient) -> DigestResult:
        settings = self.settings
        okx = okx_client_from_settings(http, settings)
        affirmations = AffirmationClient(http, settings.affirmation_url)
        timeout = settings.fetch_timeout_seconds

        balance_text, prices_text, bots_text, affirmation_text = await asyncio.gather(
            fetch_account_balance(okx, timeout),
            fetch_ticker_prices(okx, settings.instruments, timeout),
            fetch_grid_bots(okx, timeout),
            fetch_affirmation(affirmations, timeout),
        )

        message = compose_message(
            balance_text,
            prices_text,
            bots_text,
            affirmation_text,
            has_active_bots=bots_text != NO_ACTIVE_BOTS,
            budget=settings.message_budget,
        )
        logger.info(f"Digest message:\n{message}")

        dispatch = await self.dispatcher.send(message)
        return DigestResult(message=message, dispatch=dispatch)
