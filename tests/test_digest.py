"""Tests for the fetchers' fallbacks and the digest orchestrator."""

import asyncio
from typing import List, Optional

import httpx

from tickerhug.alerting.channel import SmsChannel
from tickerhug.alerting.dispatcher import SmsDispatcher
from tickerhug.config import Settings
from tickerhug.digest import (
    AFFIRMATION_FALLBACK,
    BALANCE_FALLBACK,
    GRID_BOTS_FALLBACK,
    PRICES_FALLBACK,
    DigestRunner,
    fetch_account_balance,
    fetch_affirmation,
    fetch_grid_bots,
    fetch_ticker_prices,
)
from tickerhug.exceptions import DispatchError
from tickerhug.models import SmsChannelType
from tickerhug.sources.affirmations import AffirmationClient
from tickerhug.sources.okx import OkxClient

BTC = "/api/v5/market/ticker?instId=BTC-USDT-SWAP"
LINK = "/api/v5/market/ticker?instId=LINK-USDT-SWAP"
BALANCE = "/api/v5/account/balance"
GRID = "/api/v5/tradingBot/grid/orders-algo-pending?algoOrdType=contract_grid"
AFFIRMATION_HOST = "www.affirmations.dev"

BOT = {
    "uly": "BTC-USDT", "direction": "long", "gridProfit": "3.214", "totalPnl": "12.499",
    "pnlRatio": "0.1234", "investment": "100.46", "liqPx": "50000", "minPx": "60000.5",
    "maxPx": "70000", "arbitrageNum": "42",
}


def _ok(data) -> httpx.Response:
    return httpx.Response(200, json={"code": "0", "msg": "", "data": data})


def _healthy_routes(bots=None):
    return {
        BTC: _ok([{"last": "65000.1"}]),
        LINK: _ok([{"last": "14.2"}]),
        BALANCE: _ok([{"totalEq": "1234.567"}]),
        GRID: _ok(bots or []),
        AFFIRMATION_HOST: httpx.Response(200, json={"affirmation": "You are enough."}),
    }


def _transport(routes) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == AFFIRMATION_HOST:
            route = routes.get(AFFIRMATION_HOST)
        else:
            route = routes.get(request.url.raw_path.decode())
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        return route

    return httpx.MockTransport(handler)


def _settings(**overrides) -> Settings:
    values = {
        "OKX_API_KEY": "key",
        "OKX_SECRET_KEY": "secret",
        "OKX_PASSPHRASE": "pass",
        "INSTRUMENTS": "BTC-USDT-SWAP,LINK-USDT-SWAP",
        "RECIPIENT_PHONE_NUMBER": "+15550001111",
        "FETCH_TIMEOUT_SECONDS": 5.0,
    }
    values.update(overrides)
    return Settings(**values)


class _RecordingChannel(SmsChannel):
    channel_type = SmsChannelType.REST_GATEWAY

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[tuple] = []

    @property
    def enabled(self) -> bool:
        return True

    async def _deliver(self, message: str, recipient: str) -> Optional[str]:
        self.sent.append((message, recipient))
        if self.fail:
            raise DispatchError("rejected")
        return "msg-1"


def _with_okx(routes, call):
    async def go():
        async with httpx.AsyncClient(transport=_transport(routes)) as http:
            return await call(OkxClient(http, "key", "secret", "pass"))

    return asyncio.run(go())


class TestFetcherFallbacks:

    def test_prices_success(self):
        text = _with_okx(
            _healthy_routes(), lambda okx: fetch_ticker_prices(okx, ["BTC-USDT-SWAP", "LINK-USDT-SWAP"])
        )
        assert text == "BTC: 65000.1\nLINK: 14.2"

    def test_prices_fail_all_together(self):
        routes = _healthy_routes()
        routes[LINK] = httpx.Response(500, text="boom")
        text = _with_okx(routes, lambda okx: fetch_ticker_prices(okx, ["BTC-USDT-SWAP", "LINK-USDT-SWAP"]))
        assert text == PRICES_FALLBACK

    def test_balance_success(self):
        assert _with_okx(_healthy_routes(), fetch_account_balance) == "Eq:$1234.57"

    def test_balance_network_failure(self):
        routes = _healthy_routes()
        routes[BALANCE] = httpx.ConnectError("connection refused")
        assert _with_okx(routes, fetch_account_balance) == BALANCE_FALLBACK

    def test_grid_bots_empty(self):
        assert _with_okx(_healthy_routes(), fetch_grid_bots) == "Active bots: 0"

    def test_grid_bots_malformed(self):
        routes = _healthy_routes()
        routes[GRID] = _ok([{"uly": "BTC-USDT"}])
        assert _with_okx(routes, fetch_grid_bots) == GRID_BOTS_FALLBACK

    def test_affirmation_failure(self):
        routes = _healthy_routes()
        routes[AFFIRMATION_HOST] = httpx.Response(500, text="down")

        async def go():
            async with httpx.AsyncClient(transport=_transport(routes)) as http:
                return await fetch_affirmation(AffirmationClient(http))

        assert asyncio.run(go()) == AFFIRMATION_FALLBACK

    def test_timeout_becomes_fallback(self):
        class _SlowOkx:
            async def get_balance(self):
                await asyncio.sleep(5)

        text = asyncio.run(fetch_account_balance(_SlowOkx(), timeout=0.01))
        assert text == BALANCE_FALLBACK

    def test_unexpected_exception_becomes_fallback(self):
        class _BrokenOkx:
            async def get_grid_bots(self):
                raise RuntimeError("unexpected")

        assert asyncio.run(fetch_grid_bots(_BrokenOkx())) == GRID_BOTS_FALLBACK


class TestDigestRunner:

    def _run(self, routes, settings=None, channel=None):
        settings = settings or _settings()
        channel = channel or _RecordingChannel()
        dispatcher = SmsDispatcher(channel, settings.recipient_phone_number)

        async def go():
            async with httpx.AsyncClient(transport=_transport(routes)) as http:
                return await DigestRunner(settings, dispatcher, http_client=http).run()

        return asyncio.run(go()), channel

    def test_no_bots_sends_affirmation(self):
        result, channel = self._run(_healthy_routes())
        assert result.success
        assert result.message == "Eq:$1234.57\nBTC: 65000.1\nLINK: 14.2\nYou are enough."
        assert channel.sent == [(result.message, "+15550001111")]
        assert result.dispatch.provider_id == "msg-1"

    def test_bots_replace_affirmation_and_respect_budget(self):
        result, _ = self._run(_healthy_routes(bots=[BOT, dict(BOT, uly="SOL-USDT")]))
        full = (
            "Eq:$1234.57\nBTC: 65000.1\nLINK: 14.2\n"
            "BTC|L|PnL: $12.5(12.3%)|Inv: $100.5|Liq: $50000|R: $60000.5->$70000|Arbs: 42($3.21)\n"
            "SOL|L|PnL: $12.5(12.3%)|Inv: $100.5|Liq: $50000|R: $60000.5->$70000|Arbs: 42($3.21)"
        )
        assert len(result.message) == 121
        assert full.startswith(result.message)
        assert "You are enough." not in result.message

    def test_budget_override(self):
        settings = _settings(MESSAGE_BUDGET=30)
        result, _ = self._run(_healthy_routes(bots=[BOT]), settings=settings)
        assert len(result.message) == 30

    def test_one_failing_source_does_not_affect_others(self):
        routes = _healthy_routes()
        routes[BALANCE] = httpx.Response(500, text="boom")
        result, _ = self._run(routes)
        assert result.message == f"{BALANCE_FALLBACK}\nBTC: 65000.1\nLINK: 14.2\nYou are enough."

    def test_everything_failing_still_dispatches(self):
        result, channel = self._run({})
        assert result.success
        assert result.message.startswith(f"{BALANCE_FALLBACK}\n{PRICES_FALLBACK}\n{GRID_BOTS_FALLBACK}")
        assert AFFIRMATION_FALLBACK not in result.message
        assert len(channel.sent) == 1

    def test_dispatch_failure_reported(self):
        result, _ = self._run(_healthy_routes(), channel=_RecordingChannel(fail=True))
        assert not result.success
        assert result.dispatch.error == "rejected"
