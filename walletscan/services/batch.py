"""Sequential batch runner and ALL / SOME / NONE categorisation."""
from __future__ import annotations

import asyncio
import logging

from ..logging_setup import shorten_address
from ..models import Category, Partition, WalletReport
from .context import AnalysisContext
from .wallet_analyzer import WalletAnalyzer, error_report

logger = logging.getLogger(__name__)

CANCELLED_ERROR = "Analysis cancelled"


def categorize(report: WalletReport, target_tokens: list[str]) -> Category:
    if report.error:
        return Category.NONE
    targets = {t.lower() for t in target_tokens}
    matched = len(targets & report.matched_tokens)
    if matched == 0:
        return Category.NONE
    if matched == len(targets):
        return Category.ALL
    return Category.SOME


def partition(reports: list[WalletReport], target_tokens: list[str]) -> Partition:
    """Split reports into three disjoint lists covering every input report."""
    buckets: dict[Category, list[WalletReport]] = {c: [] for c in Category}
    for report in reports:
        buckets[categorize(report, target_tokens)].append(report)

    logger.info(
        "Categorised %d wallets: %d all, %d some, %d none",
        len(reports),
        len(buckets[Category.ALL]),
        len(buckets[Category.SOME]),
        len(buckets[Category.NONE]),
    )
    return Partition(
        all_tokens=tuple(buckets[Category.ALL]),
        some_tokens=tuple(buckets[Category.SOME]),
        no_tokens=tuple(buckets[Category.NONE]),
    )


class BatchAnalyzer:
    """Run WalletAnalyzer over wallets one at a time, never concurrently."""

    def __init__(self, wallet_analyzer: WalletAnalyzer) -> None:
        self.wallet_analyzer = wallet_analyzer

    async def run(
        self,
        wallets: list[str],
        target_tokens: list[str],
        ctx: AnalysisContext,
        cancel_event: asyncio.Event | None = None,
    ) -> list[WalletReport]:
        """Return exactly one report per wallet, in input order.

        Setting ``cancel_event`` stops further queries; wallets not yet
        analysed get a "cancelled" error report.
        """
        logger.info(
            "Analysing %d wallets x %d tokens on %s",
            len(wallets),
            len(target_tokens),
            ctx.network.name,
        )
        reports: list[WalletReport] = []
        for i, wallet in enumerate(wallets):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Batch cancelled, skipping %d wallets", len(wallets) - i)
                reports.extend(error_report(w, ctx, CANCELLED_ERROR) for w in wallets[i:])
                break

            try:
                report = await self.wallet_analyzer.analyze(wallet, target_tokens, ctx)
            except Exception as e:
                logger.error("Unexpected failure for wallet %s: %s", shorten_address(wallet), e)
                report = error_report(wallet, ctx, str(e) or type(e).__name__)
            reports.append(report)

            if i < len(wallets) - 1:
                await ctx.sleep(ctx.wallet_delay)

        return reports
