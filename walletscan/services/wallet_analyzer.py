"""Per-wallet pipeline: balances → metadata + price for held tokens → valuation."""
from __future__ import annotations

import logging

from ..errors import BalanceReadError
from ..logging_setup import shorten_address
from ..models import BalanceObservation, TokenHolding, WalletReport
from ..validation import is_valid_address
from .balance_service import BalanceFetcher
from .context import AnalysisContext
from .price_service import PriceResolver
from .token_service import TokenMetadataResolver
from .valuation import format_usd, total_value, value_holding

logger = logging.getLogger(__name__)


def error_report(wallet_address: str, ctx: AnalysisContext, error: str) -> WalletReport:
    return WalletReport(wallet=wallet_address, network=ctx.network.id.value, error=error)


class WalletAnalyzer:
    """Analyse one wallet against the target token list. Never raises."""

    def __init__(
        self,
        balances: BalanceFetcher,
        tokens: TokenMetadataResolver,
        prices: PriceResolver,
    ) -> None:
        self.balances = balances
        self.tokens = tokens
        self.prices = prices

    async def _fetch_balances(
        self, wallet_address: str, token_addresses: list[str], ctx: AnalysisContext
    ) -> list[BalanceObservation]:
        observations: list[BalanceObservation] = []
        for i, token_address in enumerate(token_addresses):
            observation = await self.balances.fetch_balance(wallet_address, token_address, ctx)
            observations.append(observation)
            if i < len(token_addresses) - 1:
                await ctx.sleep(ctx.token_delay)

        if observations and all(o.error for o in observations):
            raise BalanceReadError(
                f"All {len(observations)} balance reads failed: {observations[-1].error}"
            )
        return observations

    async def _holding(
        self, observation: BalanceObservation, ctx: AnalysisContext
    ) -> TokenHolding:
        descriptor = await self.tokens.resolve(
            observation.token, ctx, decimals_hint=observation.decimals
        )
        quote = await self.prices.resolve_price(observation.token, ctx)
        return TokenHolding(
            token=descriptor,
            balance=observation,
            price=quote,
            valuation=value_holding(observation, quote),
        )

    async def analyze(
        self, wallet_address: str, token_addresses: list[str], ctx: AnalysisContext
    ) -> WalletReport:
        wallet_address = wallet_address.strip().lower() if isinstance(wallet_address, str) else ""
        if not is_valid_address(wallet_address):
            return error_report(wallet_address, ctx, "Invalid wallet address")

        try:
            observations = await self._fetch_balances(wallet_address, token_addresses, ctx)
            held = [o for o in observations if o.has_balance and not o.error]

            holdings: list[TokenHolding] = []
            for observation in held:
                holdings.append(await self._holding(observation, ctx))

            total = total_value([h.valuation for h in holdings])
            logger.info(
                "Wallet %s: %d/%d tokens held, %s",
                shorten_address(wallet_address),
                len(holdings),
                len(token_addresses),
                format_usd(total),
            )
            return WalletReport(
                wallet=wallet_address,
                network=ctx.network.id.value,
                holdings=tuple(holdings),
                total_usd=total,
                total_formatted=format_usd(total),
            )
        except Exception as e:
            logger.error("Wallet %s analysis failed: %s", shorten_address(wallet_address), e)
            return error_report(wallet_address, ctx, str(e) or type(e).__name__)
