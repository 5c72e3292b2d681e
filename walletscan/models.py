"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class TokenProvenance(str, Enum):
    REGISTRY = "registry"
    ON_CHAIN = "on-chain"
    FALLBACK = "fallback"


class PriceSource(str, Enum):
    PRIMARY = "primary"
    BACKUP = "backup"
    NONE = "none"


class Category(str, Enum):
    ALL = "all"
    SOME = "some"
    NONE = "none"


@dataclass(frozen=True)
class TokenDescriptor:
    """Resolved token metadata and where it came from."""

    address: str
    symbol: str | None
    name: str | None
    decimals: int
    source: TokenProvenance

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class BalanceObservation:
    """One wallet/token balance read, scaled by the token's decimals."""

    wallet: str
    token: str
    raw_balance: str
    balance: str
    amount: Decimal
    decimals: int
    has_balance: bool
    error: str | None = None


@dataclass(frozen=True)
class PriceQuote:
    """USD price for a token. ``usd_price`` of None means no price is known."""

    token: str
    usd_price: float | None
    change_24h: float | None
    source: PriceSource
    error: str | None = None
    volume_24h: float | None = None
    dex_id: str | None = None
    pair_address: str | None = None
    coingecko_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "price": self.usd_price,
            "priceChange24h": self.change_24h,
            "priceSource": self.source.value,
        }
        if self.error:
            data["priceError"] = self.error
        if self.volume_24h is not None:
            data["volume24h"] = self.volume_24h
        if self.dex_id:
            data["dexId"] = self.dex_id
        if self.pair_address:
            data["pairAddress"] = self.pair_address
        if self.coingecko_id:
            data["coingeckoId"] = self.coingecko_id
        return data


@dataclass(frozen=True)
class Valuation:
    usd_value: float | None
    formatted: str | None

    @property
    def is_null(self) -> bool:
        return self.usd_value is None


NULL_VALUATION = Valuation(usd_value=None, formatted=None)


@dataclass(frozen=True)
class TokenHolding:
    token: TokenDescriptor
    balance: BalanceObservation
    price: PriceQuote
    valuation: Valuation

    def to_dict(self) -> dict[str, Any]:
        data = self.token.to_dict()
        data.update(
            {
                "balance": self.balance.balance,
                "rawBalance": self.balance.raw_balance,
                "usdValue": self.valuation.usd_value,
                "usdValueFormatted": self.valuation.formatted,
            }
        )
        data.update(self.price.to_dict())
        return data


@dataclass(frozen=True)
class WalletReport:
    """Per-wallet outcome. A set ``error`` means the wallet could not be analysed."""

    wallet: str
    network: str
    holdings: tuple[TokenHolding, ...] = ()
    total_usd: float = 0.0
    total_formatted: str = "$0.00"
    error: str | None = None

    @property
    def matched_tokens(self) -> frozenset[str]:
        return frozenset(h.token.address for h in self.holdings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "wallet": self.wallet,
            "network": self.network,
            "tokens": [h.to_dict() for h in self.holdings],
            "tokenCount": len(self.holdings),
            "totalValue": self.total_usd,
            "totalValueFormatted": self.total_formatted,
            "error": self.error,
        }


@dataclass(frozen=True)
class Partition:
    all_tokens: tuple[WalletReport, ...] = ()
    some_tokens: tuple[WalletReport, ...] = ()
    no_tokens: tuple[WalletReport, ...] = ()

    def __len__(self) -> int:
        return len(self.all_tokens) + len(self.some_tokens) + len(self.no_tokens)


@dataclass(frozen=True)
class AnalysisResult:
    """Categorised batch result handed back to request handlers and the CLI."""

    network_id: str
    network_name: str
    chain_id: int
    wallet_count: int
    token_count: int
    duration: float
    partition: Partition

    def to_dict(self) -> dict[str, Any]:
        return {
            "network": {
                "id": self.network_id,
                "name": self.network_name,
                "chainId": self.chain_id,
            },
            "analysis": {
                "walletCount": self.wallet_count,
                "tokenCount": self.token_count,
                "duration": f"{self.duration:.2f}s",
            },
            "results": {
                "allTokens": [r.to_dict() for r in self.partition.all_tokens],
                "someTokens": [r.to_dict() for r in self.partition.some_tokens],
                "noTokens": [r.to_dict() for r in self.partition.no_tokens],
            },
        }
