"""Chain client protocol — balance and contract-call abstraction."""
from typing import Protocol

from ..config import NetworkProfile


class ChainClient(Protocol):
    """Abstract interface for account-based chain data reads."""

    async def get_token_balance(
        self, network: NetworkProfile, wallet_address: str, token_address: str
    ) -> str: ...

    async def eth_call(
        self, network: NetworkProfile, contract_address: str, data: str
    ) -> str | None: ...
