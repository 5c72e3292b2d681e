"""Token metadata resolution: registry → on-chain introspection → fallback."""
from __future__ import annotations

import logging

from ..chains.etherscan.parser import (
    DECIMALS_SELECTOR,
    NAME_SELECTOR,
    SYMBOL_SELECTOR,
    decode_string,
    decode_uint,
)
from ..interfaces import ChainClient
from ..logging_setup import shorten_address
from ..models import TokenDescriptor, TokenProvenance
from .context import AnalysisContext

logger = logging.getLogger(__name__)

# ERC-20 decimals is a uint8.
_MAX_DECIMALS = 255


def fallback_descriptor(token_address: str, decimals: int = 18) -> TokenDescriptor:
    return TokenDescriptor(
        address=token_address,
        symbol=f"{token_address[:6]}...",
        name=f"Token: {token_address[:10]}...{token_address[-4:]}",
        decimals=decimals,
        source=TokenProvenance.FALLBACK,
    )


class TokenMetadataResolver:
    """Resolve symbol, name and decimals for a token. Never raises."""

    def __init__(self, chain: ChainClient) -> None:
        self.chain = chain

    async def _call(self, token_address: str, selector: str, ctx: AnalysisContext) -> str | None:
        result = await ctx.caller.call(
            lambda: self.chain.eth_call(ctx.network, token_address, selector),
            description=f"eth_call {selector} on {shorten_address(token_address)}",
        )
        if not result.ok:
            logger.debug(
                "Contract read %s on %s failed: %s",
                selector,
                shorten_address(token_address),
                result.reason,
            )
            return None
        return result.value

    async def _read_string(
        self, token_address: str, selector: str, ctx: AnalysisContext
    ) -> str | None:
        return decode_string(await self._call(token_address, selector, ctx)) or None

    async def _read_decimals(self, token_address: str, ctx: AnalysisContext) -> int | None:
        value = decode_uint(await self._call(token_address, DECIMALS_SELECTOR, ctx))
        if value is None or value > _MAX_DECIMALS:
            return None
        return value

    async def resolve_decimals(self, token_address: str, ctx: AnalysisContext) -> int:
        """Decimals only: registry, then the contract, then the configured default."""
        token_address = token_address.lower()
        known = ctx.network.tokens.get(token_address)
        if known is not None:
            return known.decimals
        decimals = await self._read_decimals(token_address, ctx)
        return ctx.analysis.default_decimals if decimals is None else decimals

    async def resolve(
        self,
        token_address: str,
        ctx: AnalysisContext,
        decimals_hint: int | None = None,
    ) -> TokenDescriptor:
        """Resolve full metadata for ``token_address`` on ``ctx.network``.

        ``decimals_hint`` skips the on-chain decimals read when the caller
        already knows the precision (e.g. from the balance fetch).
        """
        token_address = token_address.lower()
        default_decimals = ctx.analysis.default_decimals

        known = ctx.network.tokens.get(token_address)
        if known is not None:
            return TokenDescriptor(
                address=token_address,
                symbol=known.symbol,
                name=known.name,
                decimals=known.decimals,
                source=TokenProvenance.REGISTRY,
            )

        name = await self._read_string(token_address, NAME_SELECTOR, ctx)
        symbol = await self._read_string(token_address, SYMBOL_SELECTOR, ctx)
        if decimals_hint is not None:
            decimals = decimals_hint
        else:
            read = await self._read_decimals(token_address, ctx)
            decimals = default_decimals if read is None else read

        if name or symbol:
            logger.debug(
                "Resolved %s on-chain: %s (%s), %d decimals",
                shorten_address(token_address),
                symbol,
                name,
                decimals,
            )
            return TokenDescriptor(
                address=token_address,
                symbol=symbol,
                name=name,
                decimals=decimals,
                source=TokenProvenance.ON_CHAIN,
            )

        logger.warning(
            "No metadata for %s on %s, using fallback",
            shorten_address(token_address),
            ctx.network.name,
        )
        # Keep the precision the balance was scaled with, if there was one.
        return fallback_descriptor(
            token_address, default_decimals if decimals_hint is None else decimals_hint
        )
