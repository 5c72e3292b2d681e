"""USD valuation of scaled balances and display formatting."""
from __future__ import annotations

import logging
import math
from typing import Any

from ..models import NULL_VALUATION, BalanceObservation, PriceQuote, Valuation

logger = logging.getLogger(__name__)

_SUFFIXES = ((1e9, "B"), (1e6, "M"), (1e3, "K"))


def format_usd(value: float) -> str:
    if not value:
        return "$0.00"
    if value < 0.01:
        return f"${value:.2e}"
    if value < 1:
        return f"${value:.4f}"
    if value < 1000:
        return f"${value:.2f}"
    for threshold, suffix in _SUFFIXES:
        if value >= threshold:
            return f"${value / threshold:.2f}{suffix}"
    return f"${value:.2f}"


def _to_float(value: Any) -> float | None:
    try:
        number = float(str(value).replace(",", ""))
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def value_holding(balance: BalanceObservation, price: PriceQuote) -> Valuation:
    """``balance × price``, or a null valuation when either side is unknown.

    Null means "unknown"; a known-worthless holding would be ``$0.00``.
    """
    if price.usd_price is None:
        return NULL_VALUATION

    amount = _to_float(balance.balance)
    usd_price = _to_float(price.usd_price)
    if amount is None or usd_price is None:
        logger.warning(
            "Cannot value %s: balance=%r price=%r", balance.token, balance.balance, price.usd_price
        )
        return NULL_VALUATION
    if amount == 0:
        return NULL_VALUATION

    usd = amount * usd_price
    return Valuation(usd_value=usd, formatted=format_usd(usd))


def total_value(valuations: list[Valuation]) -> float:
    """Sum of the known valuations; unknown ones are skipped, not counted as zero."""
    return sum(v.usd_value for v in valuations if v.usd_value is not None)
