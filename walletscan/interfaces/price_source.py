"""Price source protocols — primary market data and curated backup."""
from typing import Protocol

from ..oracles.dexscreener import DexPair


class MarketDataSource(Protocol):
    """Aggregator returning trading pairs for token addresses."""

    async def get_pairs(self, token_addresses: list[str]) -> list[DexPair]: ...


class BackupPriceSource(Protocol):
    """Curated id-keyed price API."""

    async def get_prices(
        self, coin_ids: list[str]
    ) -> dict[str, tuple[float | None, float | None]]: ...
