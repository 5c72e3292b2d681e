"""Protocol interfaces for the wallet token scanner."""
from .chain import ChainClient
from .price_source import BackupPriceSource, MarketDataSource

__all__ = ["BackupPriceSource", "ChainClient", "MarketDataSource"]
