"""DexScreener market data client."""
from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import Any

import aiohttp
import certifi

from ..chains.etherscan.client import USER_AGENT, raise_for_http_status
from ..config import PricingConfig
from ..errors import DataSourceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DexPair:
    """One trading pair as reported by DexScreener."""

    chain_id: str
    dex_id: str
    pair_address: str
    base_address: str
    base_symbol: str
    quote_address: str
    quote_symbol: str
    price_usd: float | None
    price_native: float | None
    change_24h: float | None
    volume_24h: float | None
    liquidity_usd: float | None


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_pair(raw: dict[str, Any]) -> DexPair:
    base = raw.get("baseToken") or {}
    quote = raw.get("quoteToken") or {}
    return DexPair(
        chain_id=str(raw.get("chainId", "")),
        dex_id=str(raw.get("dexId", "")),
        pair_address=str(raw.get("pairAddress", "")),
        base_address=str(base.get("address", "")).lower(),
        base_symbol=str(base.get("symbol", "")),
        quote_address=str(quote.get("address", "")).lower(),
        quote_symbol=str(quote.get("symbol", "")),
        price_usd=_to_float(raw.get("priceUsd")),
        price_native=_to_float(raw.get("priceNative")),
        change_24h=_to_float((raw.get("priceChange") or {}).get("h24")),
        volume_24h=_to_float((raw.get("volume") or {}).get("h24")),
        liquidity_usd=_to_float((raw.get("liquidity") or {}).get("usd")),
    )


class DexScreenerClient:
    """Fetch trading pairs for token addresses from DexScreener."""

    def __init__(self, config: PricingConfig) -> None:
        self.base_url = config.dexscreener_url
        self.timeout = config.timeout
        self.batch_size = config.dexscreener_batch_size

    async def get_pairs(self, token_addresses: list[str]) -> list[DexPair]:
        """Return every pair involving any of the given tokens, on any chain.

        One HTTP attempt. Raises ``ValueError`` when more addresses are passed
        than the provider accepts in a single request.
        """
        if not token_addresses:
            return []
        if len(token_addresses) > self.batch_size:
            raise ValueError(
                f"DexScreener accepts at most {self.batch_size} addresses per request"
            )

        url = f"{self.base_url}/tokens/{','.join(token_addresses)}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                raise_for_http_status(response.status, "DexScreener")
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise DataSourceError("DexScreener: invalid JSON response") from e

        if not isinstance(data, dict):
            raise DataSourceError("DexScreener: unexpected response shape")

        pairs = [_parse_pair(p) for p in (data.get("pairs") or []) if isinstance(p, dict)]
        logger.debug(
            "DexScreener returned %d pairs for %d tokens", len(pairs), len(token_addresses)
        )
        return pairs
