"""OKX REST client for prices, balance and grid bots."""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

import httpx

from ..config import Settings
from ..exceptions import FetchError
from ..models import BalanceSnapshot, GridBotRecord, TickerQuote
from ..signing import build_auth_headers

logger = logging.getLogger(__name__)

TICKER_PATH = "/api/v5/market/ticker"
BALANCE_PATH = "/api/v5/account/balance"
GRID_BOTS_PATH = "/api/v5/tradingBot/grid/orders-algo-pending?algoOrdType=contract_grid"


class OkxClient:
    """Async client for the handful of OKX endpoints the digest needs.

    Every method raises FetchError on failure; callers decide on fallbacks.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        secret_key: str,
        passphrase: str,
        base_url: str = "https://www.okx.com",
    ):
        self.http = http
        self.api_key = api_key
        self.secret_key = secret_key
        self.passphrase = passphrase
        self.base_url = base_url.rstrip("/")

    async def _get(self, source: str, path: str, signed: bool = False) -> List[Dict[str, Any]]:
        """GET an OKX endpoint and return the `data` list of its envelope.

        Args:
            source: Short name used in errors and logs
            path: Path plus query string; for signed calls this exact string is signed
            signed: Whether to attach authentication headers
        """
        if signed:
            headers = build_auth_headers(self.api_key, self.secret_key, self.passphrase, "GET", path)
        else:
            headers = {"Content-Type": "application/json"}

        try:
            response = await self.http.get(f"{self.base_url}{path}", headers=headers)
        except httpx.HTTPError as e:
            raise FetchError(source, f"request failed: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise FetchError(source, f"HTTP {response.status_code} - {response.text}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(source, f"invalid JSON: {response.text[:200]}") from e

        if not isinstance(payload, dict):
            raise FetchError(source, f"unexpected payload: {payload!r}")
        if str(payload.get("code", "0")) != "0":
            raise FetchError(source, f"OKX error {payload.get('code')}: {payload.get('msg', '')}")

        data = payload.get("data") or []
        if not isinstance(data, list):
            raise FetchError(source, f"unexpected data field: {data!r}")
        return data

    async def get_ticker_quote(self, inst_id: str) -> TickerQuote:
        data = await self._get("ticker", f"{TICKER_PATH}?instId={inst_id}")
        try:
            return TickerQuote(inst_id=inst_id, last=str(data[0]["last"]))
        except (IndexError, KeyError, TypeError) as e:
            raise FetchError("ticker", f"malformed ticker for {inst_id}: {data!r}") from e

    async def get_ticker_quotes(self, instruments: List[str]) -> List[TickerQuote]:
        """Fetch last prices for all instruments concurrently.

        The batch succeeds or fails as a unit: one bad instrument fails the call.
        """
        return list(await asyncio.gather(*(self.get_ticker_quote(inst) for inst in instruments)))

    async def get_balance(self) -> BalanceSnapshot:
        data = await self._get("balance", BALANCE_PATH, signed=True)
        try:
            return BalanceSnapshot(total_equity=Decimal(str(data[0]["totalEq"])))
        except (IndexError, KeyError, TypeError, InvalidOperation) as e:
            raise FetchError("balance", f"malformed balance: {data!r}") from e

    async def get_grid_bots(self) -> List[GridBotRecord]:
        """Running contract grid bots. An account with none returns []."""
        data = await self._get("grid_bots", GRID_BOTS_PATH, signed=True)
        logger.debug(f"Grid bot data: {data}")
        try:
            return [GridBotRecord.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError("grid_bots", f"malformed grid bot record: {e}") from e


def okx_client_from_settings(http: httpx.AsyncClient, settings: Settings) -> OkxClient:
    return OkxClient(
        http,
        api_key=settings.okx_api_key,
        secret_key=settings.okx_secret_key,
        passphrase=settings.okx_passphrase,
        base_url=settings.okx_base_url,
    )
