"""CoinGecko simple-price client, used as the curated backup price source."""
from __future__ import annotations

import logging
import ssl

import aiohttp
import certifi

from ..chains.etherscan.client import USER_AGENT, raise_for_http_status
from ..config import PricingConfig
from ..errors import DataSourceError
from .dexscreener import _to_float

logger = logging.getLogger(__name__)


class CoinGeckoClient:
    """Fetch USD prices and 24h change by CoinGecko coin id."""

    def __init__(self, config: PricingConfig) -> None:
        self.base_url = config.coingecko_url
        self.api_key = config.coingecko_api_key
        self.timeout = config.timeout

    async def get_prices(
        self, coin_ids: list[str]
    ) -> dict[str, tuple[float | None, float | None]]:
        """Return ``{coin_id: (usd, usd_24h_change)}`` for ids CoinGecko knows."""
        if not coin_ids:
            return {}

        params = {
            "ids": ",".join(coin_ids),
            "vs_currencies": "usd",
            "include_24hr_change": "true",
        }
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                f"{self.base_url}/simple/price",
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                raise_for_http_status(response.status, "CoinGecko")
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise DataSourceError("CoinGecko: invalid JSON response") from e

        if not isinstance(data, dict):
            raise DataSourceError("CoinGecko: unexpected response shape")

        prices: dict[str, tuple[float | None, float | None]] = {}
        for coin_id in coin_ids:
            entry = data.get(coin_id)
            if not isinstance(entry, dict):
                continue
            prices[coin_id] = (_to_float(entry.get("usd")), _to_float(entry.get("usd_24h_change")))

        logger.debug("CoinGecko returned %d/%d prices", len(prices), len(coin_ids))
        return prices
