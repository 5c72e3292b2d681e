"""Analysis orchestration — validates a request, then runs the wallet pipeline."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ..chains.etherscan import EtherscanClient
from ..config import AppConfig, get_network
from ..errors import RequestValidationError
from ..interfaces import BackupPriceSource, ChainClient, MarketDataSource
from ..models import AnalysisResult
from ..networks import NetworkId
from ..oracles import CoinGeckoClient, DexScreenerClient
from ..validation import (
    AddressValidation,
    normalize_address,
    validate_addresses,
    validate_request_limits,
)
from .balance_service import BalanceFetcher
from .batch import BatchAnalyzer, partition
from .context import AnalysisContext
from .price_service import PriceResolver
from .rate_limit import Sleep
from .token_service import TokenMetadataResolver
from .wallet_analyzer import WalletAnalyzer

logger = logging.getLogger(__name__)


class Analyzer:
    """Entry point used by the CLI and any request handler."""

    def __init__(
        self,
        config: AppConfig,
        chain: ChainClient | None = None,
        market: MarketDataSource | None = None,
        backup: BackupPriceSource | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self._sleep = sleep

        self._chain: ChainClient = chain or EtherscanClient(config.rate_limits.timeout)
        self._market: MarketDataSource = market or DexScreenerClient(config.pricing)
        self._backup: BackupPriceSource = backup or CoinGeckoClient(config.pricing)

        self.tokens = TokenMetadataResolver(self._chain)
        self.prices = PriceResolver(self._market, self._backup)
        self.balances = BalanceFetcher(self._chain, self.tokens)
        self.batch = BatchAnalyzer(WalletAnalyzer(self.balances, self.tokens, self.prices))

    def _context(self, network: str | NetworkId | None) -> AnalysisContext:
        return AnalysisContext(
            network=get_network(self._config, network),
            rate_limits=self._config.rate_limits,
            analysis=self._config.analysis,
            sleep=self._sleep,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def validate_addresses(self, addresses: list[Any]) -> AddressValidation:
        return validate_addresses(addresses)

    def networks(self) -> dict[str, Any]:
        """Supported networks and the configured default."""
        return {
            "default": self._config.default_network.value,
            "networks": [
                {
                    "id": profile.id.value,
                    "name": profile.name,
                    "chainId": profile.chain_id,
                    "explorer": profile.explorer_url,
                    "nativeCurrency": profile.native_symbol,
                    "knownTokens": len(profile.tokens),
                    "configured": bool(profile.api_key),
                }
                for profile in self._config.networks.values()
            ],
        }

    async def token_info(
        self,
        token_address: str,
        network: str | NetworkId | None = None,
        include_price: bool = True,
    ) -> dict[str, Any]:
        """Metadata (and optionally price) for a single token."""
        token_address = normalize_address(token_address)
        ctx = self._context(network)

        descriptor = await self.tokens.resolve(token_address, ctx)
        info: dict[str, Any] = {
            "network": ctx.network.id.value,
            "token": descriptor.to_dict(),
        }
        if include_price:
            quote = await self.prices.resolve_price(token_address, ctx)
            info["price"] = quote.to_dict()
        return info

    async def analyze(
        self,
        wallets: list[str],
        tokens: list[str],
        network: str | NetworkId | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AnalysisResult:
        """Validate the request, run the batch and categorise the reports.

        Raises ``RequestValidationError`` (or its ``UnsupportedNetworkError``
        subclass) before any network call if the request is rejected.
        """
        ctx = self._context(network)

        problems = validate_request_limits(wallets, tokens, self._config.analysis)
        if problems:
            raise RequestValidationError("; ".join(problems), errors=problems)

        wallet_check = validate_addresses(wallets)
        token_check = validate_addresses(tokens)
        if wallet_check.invalid or token_check.invalid:
            raise RequestValidationError(
                "Invalid addresses found",
                invalid_wallets=list(wallet_check.invalid),
                invalid_tokens=list(token_check.invalid),
            )
        if not wallet_check.valid or not token_check.valid:
            raise RequestValidationError("At least one wallet and one token address is required")

        valid_wallets = list(wallet_check.valid)
        valid_tokens = list(token_check.valid)

        started = time.perf_counter()
        reports = await self.batch.run(valid_wallets, valid_tokens, ctx, cancel_event)
        buckets = partition(reports, valid_tokens)
        duration = time.perf_counter() - started

        logger.info("Analysis on %s finished in %.2fs", ctx.network.name, duration)
        return AnalysisResult(
            network_id=ctx.network.id.value,
            network_name=ctx.network.name,
            chain_id=ctx.network.chain_id,
            wallet_count=len(valid_wallets),
            token_count=len(valid_tokens),
            duration=duration,
            partition=buckets,
        )
