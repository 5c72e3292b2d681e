"""Token balance reads and decimal scaling."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from ..interfaces import ChainClient
from ..logging_setup import shorten_address
from ..models import BalanceObservation
from .context import AnalysisContext
from .token_service import TokenMetadataResolver

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)


def scale_amount(raw_balance: str, decimals: int) -> Decimal:
    """Exact ``raw / 10**decimals``; raises ValueError for non-integer input."""
    text = str(raw_balance).strip()
    if not text.isdigit():
        raise ValueError(f"Raw balance must be a non-negative integer string, got {raw_balance!r}")
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")
    # Built from the digit tuple so the context precision never rounds it.
    sign, digits, exponent = Decimal(text).as_tuple()
    return Decimal((sign, digits, exponent - decimals))


def format_amount(amount: Decimal) -> str:
    """Variable precision so small balances don't round to zero."""
    if amount == 0:
        return "0"
    if amount >= 1:
        return f"{amount:.6f}"
    if amount >= Decimal("0.01"):
        return f"{amount:.8f}"
    return f"{amount:.3e}"


def zero_observation(
    wallet_address: str, token_address: str, decimals: int, error: str | None = None
) -> BalanceObservation:
    return BalanceObservation(
        wallet=wallet_address,
        token=token_address,
        raw_balance="0",
        balance="0",
        amount=_ZERO,
        decimals=decimals,
        has_balance=False,
        error=error,
    )


class BalanceFetcher:
    """Read one wallet/token balance. Failures come back as zero observations."""

    def __init__(self, chain: ChainClient, tokens: TokenMetadataResolver) -> None:
        self.chain = chain
        self.tokens = tokens

    async def fetch_balance(
        self,
        wallet_address: str,
        token_address: str,
        ctx: AnalysisContext,
        decimals: int | None = None,
    ) -> BalanceObservation:
        wallet_address = wallet_address.lower()
        token_address = token_address.lower()

        result = await ctx.caller.call(
            lambda: self.chain.get_token_balance(ctx.network, wallet_address, token_address),
            description=(
                f"balance {shorten_address(token_address)} of {shorten_address(wallet_address)}"
            ),
        )
        if not result.ok:
            logger.error(
                "Balance read failed for %s / %s on %s: %s",
                shorten_address(wallet_address),
                shorten_address(token_address),
                ctx.network.name,
                result.reason,
            )
            return zero_observation(
                wallet_address,
                token_address,
                ctx.analysis.default_decimals if decimals is None else decimals,
                error=result.reason,
            )

        raw_balance = str(result.value).strip()
        if decimals is None:
            # Zero balances never need their precision resolved.
            decimals = (
                ctx.analysis.default_decimals
                if raw_balance.strip("0") == ""
                else await self.tokens.resolve_decimals(token_address, ctx)
            )

        try:
            amount = scale_amount(raw_balance, decimals)
        except (ValueError, InvalidOperation) as e:
            logger.error("Cannot scale balance %r for %s: %s", raw_balance, token_address, e)
            return zero_observation(wallet_address, token_address, decimals, error=str(e))

        threshold = Decimal(str(ctx.analysis.min_balance_threshold))
        observation = BalanceObservation(
            wallet=wallet_address,
            token=token_address,
            raw_balance=raw_balance,
            balance=format_amount(amount),
            amount=amount,
            decimals=decimals,
            has_balance=amount > threshold,
        )
        logger.debug(
            "Balance %s of %s: %s (raw %s, %d decimals)",
            shorten_address(token_address),
            shorten_address(wallet_address),
            observation.balance,
            raw_balance,
            decimals,
        )
        return observation
