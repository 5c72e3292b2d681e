"""Market data clients used for USD pricing."""
from .coingecko import CoinGeckoClient
from .dexscreener import DexPair, DexScreenerClient

__all__ = ["CoinGeckoClient", "DexPair", "DexScreenerClient"]
