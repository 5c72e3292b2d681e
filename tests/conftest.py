"""Shared test fixtures, in-memory data sources and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from walletscan.config import (
    AnalysisConfig,
    AppConfig,
    NetworkProfile,
    PricingConfig,
    RateLimitConfig,
)
from walletscan.errors import DataSourceError
from walletscan.networks import ETHERSCAN_V2_URL, NetworkId, RegistryToken
from walletscan.oracles.dexscreener import DexPair
from walletscan.services.context import AnalysisContext

WALLET_A = "0x" + "a1" * 20
WALLET_B = "0x" + "b2" * 20
WALLET_C = "0x" + "c3" * 20
TOKEN_1 = "0x" + "11" * 20
TOKEN_2 = "0x" + "22" * 20
UNKNOWN_TOKEN = "0x" + "99" * 20
QUOTE_TOKEN = "0x" + "ee" * 20


# ---------------------------------------------------------------------------
# In-memory data sources
# ---------------------------------------------------------------------------


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeChain:
    """ChainClient double. Values may be exceptions, which are raised."""

    def __init__(self) -> None:
        self.balances: dict[tuple[str, str], object] = {}
        self.contract_calls: dict[tuple[str, str], object] = {}
        self.balance_requests: list[tuple[str, str]] = []
        self.call_requests: list[tuple[str, str]] = []

    async def get_token_balance(
        self, network: NetworkProfile, wallet_address: str, token_address: str
    ) -> str:
        key = (wallet_address, token_address)
        self.balance_requests.append(key)
        value = self.balances.get(key, "0")
        if isinstance(value, Exception):
            raise value
        return value  # type: ignore[return-value]

    async def eth_call(
        self, network: NetworkProfile, contract_address: str, data: str
    ) -> str | None:
        key = (contract_address, data)
        self.call_requests.append(key)
        value = self.contract_calls.get(key)
        if isinstance(value, Exception):
            raise value
        return value  # type: ignore[return-value]


class FakeMarket:
    """MarketDataSource double returning canned pairs per token."""

    def __init__(self) -> None:
        self.pairs: dict[str, list[DexPair]] = {}
        self.error: Exception | None = None
        self.requests: list[list[str]] = []

    async def get_pairs(self, token_addresses: list[str]) -> list[DexPair]:
        self.requests.append(list(token_addresses))
        if self.error is not None:
            raise self.error
        found: list[DexPair] = []
        for address in token_addresses:
            found.extend(self.pairs.get(address, []))
        return found


class FakeBackup:
    """BackupPriceSource double."""

    def __init__(self) -> None:
        self.prices: dict[str, tuple[float | None, float | None]] = {}
        self.error: Exception | None = None
        self.requests: list[list[str]] = []

    async def get_prices(
        self, coin_ids: list[str]
    ) -> dict[str, tuple[float | None, float | None]]:
        self.requests.append(list(coin_ids))
        if self.error is not None:
            raise self.error
        return {cid: self.prices[cid] for cid in coin_ids if cid in self.prices}


def make_pair(
    base: str,
    quote: str = QUOTE_TOKEN,
    price_usd: float | None = 1.0,
    price_native: float | None = 1.0,
    volume: float | None = 1000.0,
    change: float | None = 1.5,
    chain_id: str = "ethereum",
    dex_id: str = "uniswap",
    pair_address: str = "0xpair",
) -> DexPair:
    return DexPair(
        chain_id=chain_id,
        dex_id=dex_id,
        pair_address=pair_address,
        base_address=base,
        base_symbol="BASE",
        quote_address=quote,
        quote_symbol="QUOTE",
        price_usd=price_usd,
        price_native=price_native,
        change_24h=change,
        volume_24h=volume,
        liquidity_usd=None,
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def eth_profile() -> NetworkProfile:
    return NetworkProfile(
        id=NetworkId.ETHEREUM,
        name="Ethereum Mainnet",
        chain_id=1,
        api_url=ETHERSCAN_V2_URL,
        api_key="test-key",
        dexscreener_chain_id="ethereum",
        delay_multiplier=1.0,
        tokens={
            TOKEN_1: RegistryToken("TK1", "Token One", 18),
            TOKEN_2: RegistryToken("TK2", "Token Two", 6),
        },
        coingecko_ids={TOKEN_2: "token-two"},
    )


@pytest.fixture()
def base_profile() -> NetworkProfile:
    return NetworkProfile(
        id=NetworkId.BASE,
        name="Base Mainnet",
        chain_id=8453,
        api_url=ETHERSCAN_V2_URL,
        api_key="test-key",
        dexscreener_chain_id="base",
        delay_multiplier=0.8,
    )


@pytest.fixture()
def rate_limits() -> RateLimitConfig:
    return RateLimitConfig(
        call_delay=0.0,
        token_delay=0.3,
        wallet_delay=0.8,
        max_retries=2,
        backoff_base_delay=0.1,
        timeout=5.0,
    )


@pytest.fixture()
def sample_app_config(
    eth_profile: NetworkProfile, base_profile: NetworkProfile, rate_limits: RateLimitConfig
) -> AppConfig:
    return AppConfig(
        default_network=NetworkId.ETHEREUM,
        networks={NetworkId.ETHEREUM: eth_profile, NetworkId.BASE: base_profile},
        rate_limits=rate_limits,
        analysis=AnalysisConfig(),
        pricing=PricingConfig(),
    )


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def ctx(
    eth_profile: NetworkProfile, rate_limits: RateLimitConfig, recording_sleep: RecordingSleep
) -> AnalysisContext:
    return AnalysisContext(
        network=eth_profile,
        rate_limits=rate_limits,
        analysis=AnalysisConfig(),
        sleep=recording_sleep,
    )


@pytest.fixture()
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def fake_market() -> FakeMarket:
    return FakeMarket()


@pytest.fixture()
def fake_backup() -> FakeBackup:
    return FakeBackup()


@pytest.fixture()
def transient_error() -> DataSourceError:
    return DataSourceError("HTTP 502")


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    default_network: ethereum
    networks:
      ethereum:
        api_key: "eth-key"
      base:
        delay_multiplier: 0.5
        tokens:
          "0x1111111111111111111111111111111111111111":
            symbol: FOO
            name: Foo Token
            decimals: 9
    rate_limits:
      call_delay: 0.1
      token_delay: 0.2
      wallet_delay: 0.4
      max_retries: 5
      backoff_base_delay: 0.05
      timeout: 12
    analysis:
      max_wallets: 10
      max_tokens: 5
    pricing:
      timeout: 7
      dexscreener:
        url: "https://dex.example.com/latest/dex/"
        batch_size: 15
      coingecko:
        url: "https://cg.example.com/api/v3"
        api_key: "cg-key"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
