"""USD price resolution: DexScreener pairs → curated CoinGecko mapping → none."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..interfaces import BackupPriceSource, MarketDataSource
from ..logging_setup import shorten_address
from ..models import PriceQuote, PriceSource
from ..oracles.dexscreener import DexPair
from .context import AnalysisContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairPrice:
    pair: DexPair
    usd_price: float
    change_24h: float | None


def _volume(pair: DexPair) -> float:
    return pair.volume_24h or 0.0


def _most_traded(pairs: list[DexPair]) -> DexPair:
    """Highest 24h volume; the first pair wins ties."""
    best = pairs[0]
    for pair in pairs[1:]:
        if _volume(pair) > _volume(best):
            best = pair
    return best


def select_pair_price(pairs: list[DexPair], token_address: str, chain_id: str) -> PairPrice | None:
    """Pick the USD price for ``token_address`` out of a DexScreener pair list.

    Pairs where the token is the base side are preferred; their ``priceUsd``
    is the token's price directly. Only if there are none, quote-side pairs
    are used: ``priceUsd / priceNative`` is the USD price of one quote token,
    since ``priceNative`` is the base price denominated in the quote token.
    The 24h change of a quote-side pair describes the base token, so it is
    not reported.
    """
    token_address = token_address.lower()
    on_chain = [p for p in pairs if p.chain_id == chain_id]

    base_side = [
        p for p in on_chain
        if p.base_address == token_address and p.price_usd is not None and p.price_usd > 0
    ]
    if base_side:
        best = _most_traded(base_side)
        return PairPrice(pair=best, usd_price=best.price_usd, change_24h=best.change_24h)

    quote_side = [
        p for p in on_chain
        if p.quote_address == token_address
        and p.price_usd is not None
        and p.price_native is not None
        and p.price_native > 0
    ]
    if quote_side:
        best = _most_traded(quote_side)
        return PairPrice(pair=best, usd_price=best.price_usd / best.price_native, change_24h=None)

    return None


class PriceResolver:
    """Resolve a token's USD price and 24h change. Never raises."""

    def __init__(
        self, primary: MarketDataSource, backup: BackupPriceSource | None = None
    ) -> None:
        self.primary = primary
        self.backup = backup

    async def _from_primary(
        self, token_address: str, ctx: AnalysisContext
    ) -> tuple[PriceQuote | None, str]:
        result = await ctx.caller.call(
            lambda: self.primary.get_pairs([token_address]),
            description=f"DexScreener pairs for {shorten_address(token_address)}",
        )
        if not result.ok:
            return None, f"Primary price source failed: {result.reason}"

        chosen = select_pair_price(result.value, token_address, ctx.network.dexscreener_chain_id)
        if chosen is None:
            return None, f"No trading pairs found on {ctx.network.name}"

        return (
            PriceQuote(
                token=token_address,
                usd_price=chosen.usd_price,
                change_24h=chosen.change_24h,
                source=PriceSource.PRIMARY,
                volume_24h=chosen.pair.volume_24h,
                dex_id=chosen.pair.dex_id or None,
                pair_address=chosen.pair.pair_address or None,
            ),
            "",
        )

    async def _from_backup(
        self, token_address: str, ctx: AnalysisContext
    ) -> tuple[PriceQuote | None, str]:
        coin_id = ctx.network.coingecko_ids.get(token_address)
        if self.backup is None or coin_id is None:
            return None, "no backup mapping"

        result = await ctx.caller.call(
            lambda: self.backup.get_prices([coin_id]),
            description=f"CoinGecko price for {coin_id}",
        )
        if not result.ok:
            return None, f"backup source failed: {result.reason}"

        usd, change = result.value.get(coin_id, (None, None))
        if usd is None:
            return None, f"backup source has no price for {coin_id}"

        return (
            PriceQuote(
                token=token_address,
                usd_price=usd,
                change_24h=change,
                source=PriceSource.BACKUP,
                coingecko_id=coin_id,
            ),
            "",
        )

    async def resolve_price(self, token_address: str, ctx: AnalysisContext) -> PriceQuote:
        token_address = token_address.lower()

        quote, primary_reason = await self._from_primary(token_address, ctx)
        if quote is not None:
            logger.debug(
                "Price for %s from %s: $%s",
                shorten_address(token_address),
                quote.dex_id,
                quote.usd_price,
            )
            return quote

        quote, backup_reason = await self._from_backup(token_address, ctx)
        if quote is not None:
            logger.info(
                "Price for %s from backup (%s): $%s",
                shorten_address(token_address),
                quote.coingecko_id,
                quote.usd_price,
            )
            return quote

        reason = f"{primary_reason}; {backup_reason}"
        logger.warning("No price for %s: %s", shorten_address(token_address), reason)
        return PriceQuote(
            token=token_address,
            usd_price=None,
            change_24h=None,
            source=PriceSource.NONE,
            error=reason,
        )

    async def resolve_prices(
        self, token_addresses: list[str], ctx: AnalysisContext
    ) -> dict[str, PriceQuote]:
        """Resolve each token in turn; one provider call chain at a time."""
        quotes: dict[str, PriceQuote] = {}
        for token_address in token_addresses:
            quotes[token_address.lower()] = await self.resolve_price(token_address, ctx)
        return quotes
