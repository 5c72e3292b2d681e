"""Per-analysis context threaded through every pipeline call."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from ..config import AnalysisConfig, NetworkProfile, RateLimitConfig
from .rate_limit import RateLimitedCaller, Sleep


@dataclass(frozen=True)
class AnalysisContext:
    """Network, pacing and retry settings for one analysis run.

    Built fresh per request. The only state it carries is the caller's
    last-call timestamp used for pacing.
    """

    network: NetworkProfile
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    sleep: Sleep = asyncio.sleep
    caller: RateLimitedCaller = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.caller is None:
            object.__setattr__(
                self,
                "caller",
                RateLimitedCaller(
                    call_delay=self.network.scaled(self.rate_limits.call_delay),
                    max_retries=self.rate_limits.max_retries,
                    base_delay=self.rate_limits.backoff_base_delay,
                    timeout=self.rate_limits.timeout,
                    sleep=self.sleep,
                ),
            )

    @property
    def token_delay(self) -> float:
        return self.network.scaled(self.rate_limits.token_delay)

    @property
    def wallet_delay(self) -> float:
        return self.network.scaled(self.rate_limits.wallet_delay)
