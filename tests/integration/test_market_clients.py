"""Integration tests for DexScreener and CoinGecko clients."""
from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from walletscan.config import PricingConfig
from walletscan.errors import DataSourceError, RateLimitError, TerminalError
from walletscan.oracles.coingecko import CoinGeckoClient
from walletscan.oracles.dexscreener import DexScreenerClient

TOKEN = "0x" + "11" * 20
OTHER = "0x" + "22" * 20


def _mock_session(response_data: Any = None, status: int = 200):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=response_data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


@pytest.fixture()
def pricing() -> PricingConfig:
    return PricingConfig(
        dexscreener_url="https://dex.example.com/latest/dex",
        coingecko_url="https://cg.example.com/api/v3",
        coingecko_api_key="demo-key",
        timeout=3.0,
        dexscreener_batch_size=2,
    )


SAMPLE_PAIR = {
    "chainId": "ethereum",
    "dexId": "uniswap",
    "pairAddress": "0xPAIR",
    "baseToken": {"address": TOKEN.upper().replace("0X", "0x"), "symbol": "TK1"},
    "quoteToken": {"address": OTHER, "symbol": "WETH"},
    "priceNative": "0.0005",
    "priceUsd": "1.75",
    "priceChange": {"h24": -2.5},
    "volume": {"h24": 12345.6},
    "liquidity": {"usd": 99999},
}


class TestDexScreenerClient:
    @pytest.mark.asyncio
    async def test_parses_pairs(self, pricing: PricingConfig) -> None:
        session = _mock_session({"schemaVersion": "1.0.0", "pairs": [SAMPLE_PAIR]})
        mod = "walletscan.oracles.dexscreener"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=session):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                pairs = await DexScreenerClient(pricing).get_pairs([TOKEN, OTHER])

        url = session.get.call_args[0][0]
        assert url == f"https://dex.example.com/latest/dex/tokens/{TOKEN},{OTHER}"
        assert len(pairs) == 1
        pair = pairs[0]
        assert pair.chain_id == "ethereum"
        assert pair.base_address == TOKEN
        assert pair.quote_symbol == "WETH"
        assert pair.price_usd == pytest.approx(1.75)
        assert pair.price_native == pytest.approx(0.0005)
        assert pair.change_24h == pytest.approx(-2.5)
        assert pair.volume_24h == pytest.approx(12345.6)
        assert pair.liquidity_usd == pytest.approx(99999)

    @pytest.mark.asyncio
    async def test_null_pairs_is_empty(self, pricing: PricingConfig) -> None:
        session = _mock_session({"pairs": None})
        mod = "walletscan.oracles.dexscreener"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=session):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                assert await DexScreenerClient(pricing).get_pairs([TOKEN]) == []

    @pytest.mark.asyncio
    async def test_malformed_numbers_become_none(self, pricing: PricingConfig) -> None:
        raw = dict(SAMPLE_PAIR, priceUsd="n/a", volume={})
        session = _mock_session({"pairs": [raw]})
        mod = "walletscan.oracles.dexscreener"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=session):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                pair = (await DexScreenerClient(pricing).get_pairs([TOKEN]))[0]
        assert pair.price_usd is None
        assert pair.volume_24h is None

    @pytest.mark.asyncio
    async def test_batch_limit(self, pricing: PricingConfig) -> None:
        with pytest.raises(ValueError, match="at most 2"):
            await DexScreenerClient(pricing).get_pairs([TOKEN, OTHER, "0x" + "33" * 20])

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self, pricing: PricingConfig) -> None:
        with patch("walletscan.oracles.dexscreener.aiohttp.ClientSession") as session_cls:
            assert await DexScreenerClient(pricing).get_pairs([]) == []
        session_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_429(self, pricing: PricingConfig) -> None:
        mod = "walletscan.oracles.dexscreener"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=_mock_session({}, status=429)):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                with pytest.raises(RateLimitError):
                    await DexScreenerClient(pricing).get_pairs([TOKEN])


class TestCoinGeckoClient:
    @pytest.mark.asyncio
    async def test_parses_prices(self, pricing: PricingConfig) -> None:
        session = _mock_session(
            {"usd-coin": {"usd": 0.9998, "usd_24h_change": 0.01}, "weth": {"usd": 3000}}
        )
        mod = "walletscan.oracles.coingecko"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=session):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                prices = await CoinGeckoClient(pricing).get_prices(["usd-coin", "weth", "missing"])

        assert prices == {"usd-coin": (0.9998, 0.01), "weth": (3000.0, None)}
        url = session.get.call_args[0][0]
        kwargs = session.get.call_args.kwargs
        assert url == "https://cg.example.com/api/v3/simple/price"
        assert kwargs["params"] == {
            "ids": "usd-coin,weth,missing",
            "vs_currencies": "usd",
            "include_24hr_change": "true",
        }
        assert kwargs["headers"]["X-CG-Demo-API-Key"] == "demo-key"

    @pytest.mark.asyncio
    async def test_no_key_header_without_key(self) -> None:
        session = _mock_session({})
        mod = "walletscan.oracles.coingecko"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=session):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                await CoinGeckoClient(PricingConfig()).get_prices(["weth"])
        assert "X-CG-Demo-API-Key" not in session.get.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_unauthorised_is_terminal(self, pricing: PricingConfig) -> None:
        mod = "walletscan.oracles.coingecko"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=_mock_session({}, status=401)):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                with pytest.raises(TerminalError):
                    await CoinGeckoClient(pricing).get_prices(["weth"])

    @pytest.mark.asyncio
    async def test_non_object_body(self, pricing: PricingConfig) -> None:
        mod = "walletscan.oracles.coingecko"
        with patch(f"{mod}.aiohttp.ClientSession", return_value=_mock_session([1, 2])):
            with patch(f"{mod}.aiohttp.TCPConnector"):
                with pytest.raises(DataSourceError):
                    await CoinGeckoClient(pricing).get_prices(["weth"])
