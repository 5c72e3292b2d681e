"""Etherscan V2 multichain API client and ABI helpers."""
from .client import EtherscanClient

__all__ = ["EtherscanClient"]
