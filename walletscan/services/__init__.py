"""Service modules"""
from .analyzer import Analyzer
from .batch import BatchAnalyzer, categorize, partition
from .context import AnalysisContext
from .price_service import PriceResolver
from .rate_limit import FatalErr, Ok, RateLimitedCaller, RetryableErr
from .token_service import TokenMetadataResolver
from .wallet_analyzer import WalletAnalyzer

__all__ = [
    "AnalysisContext",
    "Analyzer",
    "BatchAnalyzer",
    "FatalErr",
    "Ok",
    "PriceResolver",
    "RateLimitedCaller",
    "RetryableErr",
    "TokenMetadataResolver",
    "WalletAnalyzer",
    "categorize",
    "partition",
]
