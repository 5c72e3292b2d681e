"""Built-in network descriptors, token registries and curated price-id mappings."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class NetworkId(str, Enum):
    ETHEREUM = "ethereum"
    BASE = "base"

    @classmethod
    def parse(cls, value: str) -> "NetworkId":
        """Case-insensitive lookup; raises ValueError for unknown ids."""
        return cls(value.strip().lower())


DEFAULT_NETWORK = NetworkId.ETHEREUM

ETHERSCAN_V2_URL = "https://api.etherscan.io/v2/api"


@dataclass(frozen=True)
class RegistryToken:
    symbol: str
    name: str
    decimals: int


# Lower-cased contract address -> metadata.
ETHEREUM_TOKENS: dict[str, RegistryToken] = {
    # Stablecoins
    "0xdac17f958d2ee523a2206206994597c13d831ec7": RegistryToken("USDT", "Tether USD", 6),
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": RegistryToken("USDC", "USD Coin", 6),
    "0x6b175474e89094c44da98b954eedeac495271d0f": RegistryToken("DAI", "Dai Stablecoin", 18),
    "0x4fabb145d64652a948d72533023f6e7a623c7c53": RegistryToken("BUSD", "Binance USD", 18),
    # Majors
    "0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce": RegistryToken("SHIB", "SHIBA INU", 18),
    "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599": RegistryToken("WBTC", "Wrapped BTC", 8),
    "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2": RegistryToken("WETH", "Wrapped Ether", 18),
    "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984": RegistryToken("UNI", "Uniswap", 18),
    "0x514910771af9ca656af840dff83e8264ecf986ca": RegistryToken("LINK", "Chainlink", 18),
    "0x7d1afa7b718fb893db30a3abc0cfc608aacfebb0": RegistryToken("MATIC", "Polygon", 18),
    # DeFi
    "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9": RegistryToken("AAVE", "Aave Token", 18),
    "0xc00e94cb662c3520282e6f5717214004a7f26888": RegistryToken("COMP", "Compound", 18),
    "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2": RegistryToken("MKR", "Maker", 18),
}

BASE_TOKENS: dict[str, RegistryToken] = {
    "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913": RegistryToken("USDC", "USD Coin", 6),
    "0x50c5725949a6f0c72e6c4a641f24049a917db0cb": RegistryToken("DAI", "Dai Stablecoin", 18),
    "0x4200000000000000000000000000000000000006": RegistryToken("WETH", "Wrapped Ether", 18),
    "0x940181a94a35a4569e4529a3cdfb74e38fd98631": RegistryToken("AERO", "Aerodrome Finance", 18),
    "0x0578292cb20a443ba1cde459c985ce14ca2bdee5": RegistryToken("SCALE", "Scale", 18),
}

# Backup price source: lower-cased contract address -> CoinGecko coin id.
ETHEREUM_COINGECKO_IDS: dict[str, str] = {
    "0xdac17f958d2ee523a2206206994597c13d831ec7": "tether",
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": "usd-coin",
    "0x6b175474e89094c44da98b954eedeac495271d0f": "dai",
    "0x4fabb145d64652a948d72533023f6e7a623c7c53": "binance-usd",
    "0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce": "shiba-inu",
    "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599": "wrapped-bitcoin",
    "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2": "weth",
    "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984": "uniswap",
    "0x514910771af9ca656af840dff83e8264ecf986ca": "chainlink",
    "0x7d1afa7b718fb893db30a3abc0cfc608aacfebb0": "matic-network",
    "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9": "aave",
    "0xc00e94cb662c3520282e6f5717214004a7f26888": "compound-governance-token",
    "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2": "maker",
}

BASE_COINGECKO_IDS: dict[str, str] = {
    "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913": "usd-coin",
    "0x50c5725949a6f0c72e6c4a641f24049a917db0cb": "dai",
    "0x4200000000000000000000000000000000000006": "weth",
    "0x940181a94a35a4569e4529a3cdfb74e38fd98631": "aerodrome-finance",
}

# Static per-network facts. Endpoint, key and multiplier can be overridden in config.yaml.
BUILTIN_NETWORKS: dict[NetworkId, dict[str, Any]] = {
    NetworkId.ETHEREUM: {
        "name": "Ethereum Mainnet",
        "chain_id": 1,
        "api_url": ETHERSCAN_V2_URL,
        "explorer_url": "https://etherscan.io",
        "native_symbol": "ETH",
        "native_decimals": 18,
        "dexscreener_chain_id": "ethereum",
        "delay_multiplier": 1.0,
        "tokens": ETHEREUM_TOKENS,
        "coingecko_ids": ETHEREUM_COINGECKO_IDS,
    },
    NetworkId.BASE: {
        "name": "Base Mainnet",
        "chain_id": 8453,
        "api_url": ETHERSCAN_V2_URL,
        "explorer_url": "https://basescan.org",
        "native_symbol": "ETH",
        "native_decimals": 18,
        "dexscreener_chain_id": "base",
        # L2 endpoints tolerate a tighter cadence.
        "delay_multiplier": 0.8,
        "tokens": BASE_TOKENS,
        "coingecko_ids": BASE_COINGECKO_IDS,
    },
}
